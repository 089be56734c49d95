"""
Population-level simulation loop.

Drives a population of agents through discrete time. Agents observe
their friends' behaviour at the previous step, so every agent's
``perform(t)`` must finish before any agent starts updating beliefs for
``t + 1``. The engine enforces that barrier: a step is only started once
all ticks of the previous step have completed. Within a step agents are
independent and may be ticked on a thread pool.
"""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from bibs.core.agent import Agent
from bibs.core.behaviour import Behaviour
from bibs.core.belief import IBelief
from bibs.core.config import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass
class StepSnapshot:
    """Population state after one time step."""
    time: int
    population_size: int
    behaviour_counts: dict[str, int]
    activation_means: dict[str, float]   # belief name -> mean activation
    activation_stds: dict[str, float]
    sampled_count: int = 0               # Agents whose choice used the random draw
    events: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "population_size": self.population_size,
            "behaviour_counts": dict(self.behaviour_counts),
            "activation_means": dict(self.activation_means),
            "activation_stds": dict(self.activation_stds),
            "sampled_count": self.sampled_count,
        }


class SimulationEngine:
    """
    Main simulation loop.

    Per run:
    1. Check the base case: every agent holds every belief at start_time
    2. Freeze relationship tables (no mutation while agents read them)
    3. Perform at start_time for agents with no seeded behaviour
    4. For each later step: tick every agent, then join (barrier)
    """

    def __init__(
        self,
        config: SimulationConfig,
        agents: Sequence[Agent],
        beliefs: Sequence[IBelief],
        behaviours: Sequence[Behaviour],
    ):
        config.validate()
        if not behaviours:
            raise ValueError("At least one behaviour required")
        self.config = config
        self.agents: list[Agent] = list(agents)
        self.beliefs: list[IBelief] = list(beliefs)
        self.behaviours: list[Behaviour] = list(behaviours)

        self.history: list[StepSnapshot] = []
        self.current_time: int | None = None

    def run(self, steps: int | None = None) -> list[StepSnapshot]:
        """
        Advance the simulation by ``steps`` time steps.

        The first call initialises from the base case at
        ``config.start_time``; later calls continue from where the
        previous one stopped.
        """
        steps = self.config.time_steps if steps is None else steps
        if self.current_time is None:
            self._initialise()

        first = self.current_time + 1
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            for t in range(first, first + steps):
                self._step(t, pool)
                self.current_time = t
                self.history.append(self._snapshot(t))
        return self.history

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _initialise(self) -> None:
        t0 = self.config.start_time

        # Base case, checked before any record or table changes
        for agent in self.agents:
            for bel in self.beliefs:
                agent.activation(t0, bel)

        for bel in self.beliefs:
            bel.freeze()

        for agent in self.agents:
            if not agent.has_performed(t0):
                agent.perform(t0, self.behaviours)

        self.current_time = t0
        self.history = [self._snapshot(t0)]
        logger.info(
            "Initialised %d agents, %d beliefs, %d behaviours at t=%d",
            len(self.agents), len(self.beliefs), len(self.behaviours), t0,
        )

    def _step(self, t: int, pool: ThreadPoolExecutor) -> None:
        try:
            if self.config.max_workers > 1:
                futures = [
                    pool.submit(agent.tick, t, self.behaviours, self.beliefs)
                    for agent in self.agents
                ]
                # Barrier: every tick of step t finishes before t + 1
                for future in futures:
                    future.result()
            else:
                for agent in self.agents:
                    agent.tick(t, self.behaviours, self.beliefs)
        except Exception:
            logger.warning("Simulation step t=%d failed", t, exc_info=True)
            raise
        logger.debug("Completed step t=%d", t)

    def _snapshot(self, t: int) -> StepSnapshot:
        counts = Counter(agent.performed(t).name for agent in self.agents)
        behaviour_counts = {beh.name: counts.get(beh.name, 0) for beh in self.behaviours}

        means: dict[str, float] = {}
        stds: dict[str, float] = {}
        for bel in self.beliefs:
            values = np.array([agent.activation(t, bel) for agent in self.agents])
            means[bel.name] = float(values.mean()) if len(values) else 0.0
            stds[bel.name] = float(values.std()) if len(values) else 0.0

        sampled = sum(
            1 for agent in self.agents
            if agent.last_selection is not None
            and agent.last_selection.time == t
            and agent.last_selection.sampled
        )

        return StepSnapshot(
            time=t,
            population_size=len(self.agents),
            behaviour_counts=behaviour_counts,
            activation_means=means,
            activation_stds=stds,
            sampled_count=sampled,
        )
