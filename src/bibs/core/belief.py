"""
Beliefs and their pairwise relationship tables.

Each belief carries three independent weighted relations:

    belief -> belief       contextualisation weight
    belief -> behaviour    "observed" weight (observing it reinforces the belief)
    belief -> behaviour    "performing" weight (holding the belief impels it)

Tables are keyed by the other entity's UUID handle rather than by object
reference, so beliefs and behaviours can be shared across every agent and
rebuilt from serialized form without dangling references.

A missing entry is a ``NotFoundError``; there is no implicit zero.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID, uuid4

from bibs.core.behaviour import Behaviour
from bibs.core.errors import NotFoundError


class IBelief(ABC):
    """
    Interface for a belief in the simulation.

    Identity (``id``) is all the agent engine relies on for hashing;
    everything else goes through the six relationship methods.
    """

    def __init__(self, name: str, id: UUID | None = None) -> None:
        self.name = name
        self.id = id or uuid4()

    def freeze(self) -> None:
        """Reject further relationship mutation. No-op unless overridden."""

    @abstractmethod
    def belief_relationship(self, b2: IBelief) -> float:
        """Weight with which holding ``b2`` contextualises this belief."""

    @abstractmethod
    def set_belief_relationship(self, b2: IBelief, value: float) -> None:
        """Insert or overwrite the weight towards ``b2``."""

    @abstractmethod
    def observed_behaviour_relationship(self, beh: Behaviour) -> float:
        """How much observing ``beh`` reinforces this belief."""

    @abstractmethod
    def set_observed_behaviour_relationship(self, beh: Behaviour, value: float) -> None:
        """Insert or overwrite the observed weight for ``beh``."""

    @abstractmethod
    def performing_behaviour_relationship(self, beh: Behaviour) -> float:
        """How much holding this belief impels performing ``beh``."""

    @abstractmethod
    def set_performing_behaviour_relationship(self, beh: Behaviour, value: float) -> None:
        """Insert or overwrite the performing weight for ``beh``."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IBelief):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, id={str(self.id)[:8]})"


class Belief(IBelief):
    """A belief with dict-backed relationship tables."""

    def __init__(self, name: str, id: UUID | None = None) -> None:
        super().__init__(name, id)
        self._belief_weights: dict[UUID, float] = {}
        self._observed_weights: dict[UUID, float] = {}
        self._performing_weights: dict[UUID, float] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Freezing
    # ------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject further relationship mutation (called once a simulation starts)."""
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(
                f"Belief '{self.name}' is frozen; relationships cannot change "
                "while a simulation is running"
            )

    # ------------------------------------------------------------------
    # Relationship tables
    # ------------------------------------------------------------------

    def belief_relationship(self, b2: IBelief) -> float:
        try:
            return self._belief_weights[b2.id]
        except KeyError:
            raise NotFoundError(
                f"Belief '{self.name}' has no relationship to belief '{b2.name}'"
            ) from None

    def set_belief_relationship(self, b2: IBelief, value: float) -> None:
        self._check_mutable()
        self._belief_weights[b2.id] = float(value)

    def observed_behaviour_relationship(self, beh: Behaviour) -> float:
        try:
            return self._observed_weights[beh.id]
        except KeyError:
            raise NotFoundError(
                f"Belief '{self.name}' has no observed relationship to "
                f"behaviour '{beh.name}'"
            ) from None

    def set_observed_behaviour_relationship(self, beh: Behaviour, value: float) -> None:
        self._check_mutable()
        self._observed_weights[beh.id] = float(value)

    def performing_behaviour_relationship(self, beh: Behaviour) -> float:
        try:
            return self._performing_weights[beh.id]
        except KeyError:
            raise NotFoundError(
                f"Belief '{self.name}' has no performing relationship to "
                f"behaviour '{beh.name}'"
            ) from None

    def set_performing_behaviour_relationship(self, beh: Behaviour, value: float) -> None:
        self._check_mutable()
        self._performing_weights[beh.id] = float(value)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "belief_relationships": {str(k): v for k, v in self._belief_weights.items()},
            "observed_relationships": {str(k): v for k, v in self._observed_weights.items()},
            "performing_relationships": {str(k): v for k, v in self._performing_weights.items()},
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Belief:
        belief = cls(name=d["name"], id=UUID(d["id"]))
        belief._belief_weights = {
            UUID(k): float(v) for k, v in d.get("belief_relationships", {}).items()
        }
        belief._observed_weights = {
            UUID(k): float(v) for k, v in d.get("observed_relationships", {}).items()
        }
        belief._performing_weights = {
            UUID(k): float(v) for k, v in d.get("performing_relationships", {}).items()
        }
        return belief
