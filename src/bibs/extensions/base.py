"""
Base class for environment models.

The environment contributes an additive impetus to a behaviour's utility,
independent of the agent's beliefs. Models only override what they need;
the default contributes nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bibs.core.agent import IAgent
    from bibs.core.behaviour import Behaviour


class EnvironmentModel(ABC):
    """
    Abstract base for pluggable environment terms.

    ``impetus`` is called once per candidate behaviour inside
    ``Agent.utility``, so it must be cheap and free of side effects.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this environment model."""

    @abstractmethod
    def impetus(self, agent: IAgent, behaviour: Behaviour, t: int) -> float:
        """Impetus to perform ``behaviour`` at time ``t`` due to the environment."""


class NullEnvironment(EnvironmentModel):
    """The default environment: no contribution to any utility."""

    @property
    def name(self) -> str:
        return "null"

    def impetus(self, agent: IAgent, behaviour: Behaviour, t: int) -> float:
        return 0.0
