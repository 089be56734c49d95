"""
Agents: belief activation dynamics and behaviour selection.

Each agent owns four records:

  * activations   time -> (belief -> activation strength), sparse
  * performed     time -> behaviour, at most one per time step
  * friends       other agent -> directed influence weight
  * time deltas   belief -> multiplicative per-step decay/growth

Activation recurrence (one belief, one step):

    A(t, b) = timeDelta(b) * A(t-1, b) + contextualise(b, t-1) * observed(b, t-1)

    contextualise(b, t) = exp( sum_{b2 held at t} A(t, b2) * w_bb(b, b2) )
    observed(b, t)      = sum_{friend a, weight w} w * w_obs(b, a.performed(t))

Behaviour utility:

    U(beh, t) = sum_{bel held at t} contextualise(bel, t) * w_perf(bel, beh) * A(t, bel)
                + environment(beh, t)

Nothing is cached: every value is recomputed from the records on each
call. Any missing entry raises ``NotFoundError`` and no record is mutated.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence
from uuid import UUID, uuid4

import numpy as np

from bibs.core.behaviour import Behaviour
from bibs.core.belief import IBelief
from bibs.core.decision import SelectionResult, select_behaviour
from bibs.core.errors import NotFoundError
from bibs.extensions.base import EnvironmentModel, NullEnvironment

logger = logging.getLogger(__name__)


class IAgent(ABC):
    """Interface for an agent in the simulation."""

    def __init__(self, id: UUID | None = None) -> None:
        self.id = id or uuid4()

    @abstractmethod
    def activation(self, t: int, b: IBelief) -> float:
        """Activation of belief ``b`` at time ``t``."""

    @abstractmethod
    def update_activation(self, t: int, b: IBelief) -> None:
        """Compute and store the activation of ``b`` at time ``t``."""

    @abstractmethod
    def performed(self, t: int) -> Behaviour:
        """Behaviour performed at time ``t``."""

    @abstractmethod
    def perform(self, t: int, behaviours: Sequence[Behaviour]) -> Any:
        """Choose and record a behaviour for time ``t``."""

    def tick(
        self,
        t: int,
        behaviours: Sequence[Behaviour],
        beliefs: Iterable[IBelief],
    ) -> Any:
        """
        Run one time step: update every belief, then perform.

        A failure while updating beliefs propagates before ``perform``
        is reached.
        """
        for bel in beliefs:
            self.update_activation(t, bel)
        return self.perform(t, behaviours)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IAgent):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Agent(IAgent):
    """
    An agent whose beliefs evolve under social influence.

    Parameters
    ----------
    id : UUID, optional
        Generated if omitted.
    activations : dict, optional
        Initial activation record ``{t: {belief: activation}}``; this is
        the base case the recurrence starts from.
    rng : Generator, optional
        Random source for behaviour sampling. Pass a seeded generator
        for reproducible runs.
    environment : EnvironmentModel, optional
        Additive utility term. Defaults to ``NullEnvironment``.
    keep_selection_log : bool
        Keep every step's ``SelectionResult`` in ``selection_log``.
        Off by default; ``last_selection`` is always kept.
    """

    def __init__(
        self,
        id: UUID | None = None,
        activations: dict[int, dict[IBelief, float]] | None = None,
        rng: np.random.Generator | None = None,
        environment: EnvironmentModel | None = None,
        keep_selection_log: bool = False,
    ) -> None:
        super().__init__(id)
        self._activations: dict[int, dict[IBelief, float]] = {
            t: dict(at_t) for t, at_t in (activations or {}).items()
        }
        self._performed: dict[int, Behaviour] = {}
        self._friends: dict[IAgent, float] = {}
        self._time_deltas: dict[IBelief, float] = {}
        self.rng = rng or np.random.default_rng()
        self.environment_model = environment or NullEnvironment()

        # Explainability: the latest selection, plus every step if requested
        self.last_selection: SelectionResult | None = None
        self.keep_selection_log = keep_selection_log
        self.selection_log: dict[int, SelectionResult] = {}

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def activation(self, t: int, b: IBelief) -> float:
        at_t = self._activations.get(t)
        if at_t is None:
            raise NotFoundError(f"Agent {self.short_id} has no activations at time {t}")
        try:
            return at_t[b]
        except KeyError:
            raise NotFoundError(
                f"Agent {self.short_id} does not hold belief '{b.name}' at time {t}"
            ) from None

    def set_activation(self, t: int, b: IBelief, value: float) -> None:
        """Seed an activation directly (base case for the recurrence)."""
        self._activations.setdefault(t, {})[b] = float(value)

    def held_beliefs(self, t: int) -> list[IBelief]:
        """Beliefs present in the activation record at time ``t``."""
        at_t = self._activations.get(t)
        if at_t is None:
            raise NotFoundError(f"Agent {self.short_id} has no activations at time {t}")
        return list(at_t)

    def times(self) -> list[int]:
        """Time steps with an activation record, ascending."""
        return sorted(self._activations)

    def performed(self, t: int) -> Behaviour:
        try:
            return self._performed[t]
        except KeyError:
            raise NotFoundError(
                f"Agent {self.short_id} has not performed a behaviour at time {t}"
            ) from None

    def has_performed(self, t: int) -> bool:
        return t in self._performed

    def record_performed(self, t: int, beh: Behaviour) -> None:
        """Record a behaviour without selection (seeding history)."""
        self._performed[t] = beh

    # ------------------------------------------------------------------
    # Social ties and coefficients
    # ------------------------------------------------------------------

    def friend_weight(self, a: IAgent) -> float:
        try:
            return self._friends[a]
        except KeyError:
            raise NotFoundError(
                f"Agent {self.short_id} has no tie to agent {str(a.id)[:8]}"
            ) from None

    def set_friend_weight(self, a: IAgent, w: float) -> None:
        self._friends[a] = float(w)

    def friends(self) -> dict[IAgent, float]:
        return dict(self._friends)

    def time_delta(self, b: IBelief) -> float:
        try:
            return self._time_deltas[b]
        except KeyError:
            raise NotFoundError(
                f"Agent {self.short_id} has no time delta for belief '{b.name}'"
            ) from None

    def set_time_delta(self, b: IBelief, td: float) -> None:
        self._time_deltas[b] = float(td)

    # ------------------------------------------------------------------
    # Activation dynamics
    # ------------------------------------------------------------------

    def update_activation(self, t: int, b: IBelief) -> None:
        new_activation = (
            self.time_delta(b) * self.activation(t - 1, b)
            + self.contextual_observed(b, t - 1)
        )
        # Insert only once the value is fully computed
        at_t = self._activations.get(t)
        if at_t is None:
            at_t = self._activations[t] = {}
        at_t[b] = new_activation

    def observed(self, b: IBelief, t: int) -> float:
        """Reinforcement of ``b`` from friends' behaviour at time ``t``."""
        total = 0.0
        for friend, w in self._friends.items():
            total += w * b.observed_behaviour_relationship(friend.performed(t))
        return total

    def contextualise(self, b: IBelief, t: int) -> float:
        """Exponential weight putting ``b`` in context of the beliefs held at ``t``."""
        value_to_exp = 0.0
        for b2 in self.held_beliefs(t):
            value_to_exp += self.activation(t, b2) * b.belief_relationship(b2)
        return math.exp(value_to_exp)

    def contextual_observed(self, b: IBelief, t: int) -> float:
        return self.contextualise(b, t) * self.observed(b, t)

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def belief_behaviour(self, bel: IBelief, beh: Behaviour, t: int) -> float:
        """Non-contextual impetus to perform ``beh`` from holding ``bel`` at ``t``."""
        return bel.performing_behaviour_relationship(beh) * self.activation(t, bel)

    def contextual_belief_behaviour(self, bel: IBelief, beh: Behaviour, t: int) -> float:
        return self.contextualise(bel, t) * self.belief_behaviour(bel, beh, t)

    def contextual_behaviour(self, beh: Behaviour, t: int) -> float:
        """Impetus to perform ``beh`` given every belief held at ``t``."""
        total = 0.0
        for bel in self.held_beliefs(t):
            total += self.contextual_belief_behaviour(bel, beh, t)
        return total

    def environment(self, beh: Behaviour, t: int) -> float:
        return self.environment_model.impetus(self, beh, t)

    def utility(self, beh: Behaviour, t: int) -> float:
        return self.contextual_behaviour(beh, t) + self.environment(beh, t)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def perform(self, t: int, behaviours: Sequence[Behaviour]) -> SelectionResult:
        """
        Choose and record the behaviour performed at time ``t``.

        All utilities are computed before anything is recorded, so a
        failing utility leaves the performed record untouched.
        """
        candidates = list(behaviours)
        if not candidates:
            raise ValueError("At least one behaviour required to perform")

        utilities = [self.utility(beh, t) for beh in candidates]
        result = select_behaviour(candidates, utilities, self.rng, time=t)

        self._performed[t] = result.chosen
        self.last_selection = result
        if self.keep_selection_log:
            self.selection_log[t] = result
        logger.debug(
            "Agent %s performed %r at t=%d (sampled=%s)",
            self.short_id, result.chosen.name, t, result.sampled,
        )
        return result

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "activations": {
                str(t): {str(b.id): v for b, v in at_t.items()}
                for t, at_t in sorted(self._activations.items())
            },
            "performed": {
                str(t): str(beh.id) for t, beh in sorted(self._performed.items())
            },
            "friends": {str(a.id): w for a, w in self._friends.items()},
            "time_deltas": {str(b.id): td for b, td in self._time_deltas.items()},
        }

    def __repr__(self) -> str:
        return (
            f"Agent(id={self.short_id}, times={len(self._activations)}, "
            f"friends={len(self._friends)})"
        )
