#!/usr/bin/env python3
"""Run a baseline belief-induced behaviour simulation and print results."""

import logging

from bibs.core.config import SimulationConfig
from bibs.core.engine import SimulationEngine
from bibs.experiment.population import build_world
from bibs.metrics.collector import MetricsCollector


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = SimulationConfig(
        experiment_name="baseline",
        population_size=100,
        time_steps=25,
        friend_probability=0.05,
        random_seed=42,
    )

    print(f"=== BIBS: {config.experiment_name} ===")
    print(f"Population: {config.population_size}")
    print(f"Beliefs: {', '.join(config.belief_names)}")
    print(f"Behaviours: {', '.join(config.behaviour_names)}")
    print()

    world = build_world(config)
    engine = SimulationEngine(config, world.agents, world.beliefs, world.behaviours)
    history = engine.run()

    collector = MetricsCollector(world.beliefs)
    names = config.behaviour_names
    header = " ".join(f"{n[:10]:>10}" for n in names)
    print(f"{'t':>4} {header} {'Entropy':>8} {'Sampled':>8}")
    print("-" * (4 + 11 * len(names) + 18))

    for snap in history:
        m = collector.collect(world.agents, snap)
        shares = " ".join(f"{m.behaviour_fractions[n]:10.2f}" for n in names)
        print(f"{snap.time:4d} {shares} {m.behaviour_entropy:8.3f} {m.sampled_fraction:8.2f}")

    final = history[-1]
    print()
    print(f"=== Final State (t={final.time}) ===")
    for belief_name, mean in final.activation_means.items():
        std = final.activation_stds[belief_name]
        print(f"  {belief_name:20s}: mean={mean:8.3f} std={std:8.3f}")


if __name__ == "__main__":
    main()
