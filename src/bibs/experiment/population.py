"""
World generation: beliefs, behaviours and a socially connected population.

Builds complete relationship tables (every belief pair, every
belief/behaviour pair) so a generated world never trips a missing
relationship during simulation. Each agent gets its own child generator
spawned from the config seed, which keeps per-agent sampling independent
and reproducible regardless of tick order or threading.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from bibs.core.agent import Agent
from bibs.core.behaviour import Behaviour
from bibs.core.belief import Belief
from bibs.core.config import SimulationConfig
from bibs.extensions.base import EnvironmentModel


@dataclass
class World:
    """Everything a ``SimulationEngine`` needs."""
    agents: list[Agent]
    beliefs: list[Belief]
    behaviours: list[Behaviour]


def _uniform(rng: np.random.Generator, bounds: tuple[float, float]) -> float:
    low, high = bounds
    if low == high:
        return float(low)
    return float(rng.uniform(low, high))


def build_relationships(
    beliefs: list[Belief],
    behaviours: list[Behaviour],
    config: SimulationConfig,
    rng: np.random.Generator,
) -> None:
    """Fill every belief's three relationship tables with random weights."""
    for bel in beliefs:
        for b2 in beliefs:
            bel.set_belief_relationship(b2, _uniform(rng, config.belief_relationship_range))
        for beh in behaviours:
            bel.set_observed_behaviour_relationship(
                beh, _uniform(rng, config.observed_relationship_range),
            )
            bel.set_performing_behaviour_relationship(
                beh, _uniform(rng, config.performing_relationship_range),
            )


def build_social_graph(
    agents: list[Agent],
    config: SimulationConfig,
    rng: np.random.Generator,
) -> int:
    """
    Wire a random directed friendship graph.

    Each ordered pair (a, b), a != b, becomes a tie with probability
    ``config.friend_probability``. Returns the number of ties created.
    """
    ties = 0
    for agent in agents:
        for other in agents:
            if other is agent:
                continue
            if rng.random() < config.friend_probability:
                agent.set_friend_weight(other, _uniform(rng, config.friend_weight_range))
                ties += 1
    return ties


def build_world(
    config: SimulationConfig,
    rng: np.random.Generator | None = None,
    environment: EnvironmentModel | None = None,
) -> World:
    """
    Create beliefs, behaviours and ``config.population_size`` agents.

    Agents hold every belief at ``config.start_time`` with a random
    initial activation and a random time delta per belief.
    """
    config.validate()
    seed_seq = np.random.SeedSequence(config.random_seed)
    world_seed, *agent_seeds = seed_seq.spawn(config.population_size + 1)
    rng = rng or np.random.default_rng(world_seed)

    beliefs = [Belief(name) for name in config.belief_names]
    behaviours = [Behaviour(name) for name in config.behaviour_names]
    build_relationships(beliefs, behaviours, config, rng)

    agents: list[Agent] = []
    for agent_seed in agent_seeds:
        agent = Agent(rng=np.random.default_rng(agent_seed), environment=environment)
        for bel in beliefs:
            agent.set_time_delta(bel, _uniform(rng, config.time_delta_range))
            agent.set_activation(
                config.start_time, bel, _uniform(rng, config.initial_activation_range),
            )
        agents.append(agent)

    build_social_graph(agents, config, rng)
    return World(agents=agents, beliefs=beliefs, behaviours=behaviours)
