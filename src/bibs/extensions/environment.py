"""
Concrete environment models.

``ConstantEnvironment`` biases behaviours uniformly over time (e.g. a
standing incentive), ``ScheduledEnvironment`` applies time-bounded shocks.
Both key on behaviour names so they can be written in config files.
Behaviours absent from the table get 0.0: these are policy tables, not
relationship lookups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bibs.extensions.base import EnvironmentModel

if TYPE_CHECKING:
    from bibs.core.agent import IAgent
    from bibs.core.behaviour import Behaviour


class ConstantEnvironment(EnvironmentModel):
    """Fixed per-behaviour offset, the same at every time step."""

    def __init__(self, offsets: dict[str, float] | None = None) -> None:
        self.offsets: dict[str, float] = dict(offsets or {})

    @property
    def name(self) -> str:
        return "constant"

    def impetus(self, agent: IAgent, behaviour: Behaviour, t: int) -> float:
        return self.offsets.get(behaviour.name, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "offsets": dict(self.offsets)}


class ScheduledEnvironment(EnvironmentModel):
    """
    Time-indexed offsets: ``schedule[t][behaviour_name]``.

    Times outside the schedule contribute nothing.
    """

    def __init__(self, schedule: dict[int, dict[str, float]] | None = None) -> None:
        self.schedule: dict[int, dict[str, float]] = {
            int(t): dict(v) for t, v in (schedule or {}).items()
        }

    @property
    def name(self) -> str:
        return "scheduled"

    def add_shock(self, t: int, behaviour_name: str, value: float) -> None:
        """Add ``value`` to a behaviour's impetus at time ``t``."""
        at_t = self.schedule.setdefault(t, {})
        at_t[behaviour_name] = at_t.get(behaviour_name, 0.0) + value

    def impetus(self, agent: IAgent, behaviour: Behaviour, t: int) -> float:
        return self.schedule.get(t, {}).get(behaviour.name, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "schedule": {str(t): dict(v) for t, v in self.schedule.items()},
        }
