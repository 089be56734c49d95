"""
Experiment Runner: comparisons, parameter sweeps, and multi-seed batches.

Each run builds a fresh world from its config, so runs never share
mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bibs.core.config import SimulationConfig
from bibs.core.engine import SimulationEngine, StepSnapshot
from bibs.experiment.population import build_world
from bibs.extensions.base import EnvironmentModel
from bibs.metrics.collector import MetricsCollector, StepMetrics


@dataclass
class ExperimentResult:
    """Result of a single experiment run."""
    config: SimulationConfig
    history: list[StepSnapshot]
    metrics: list[StepMetrics]
    final_behaviour_shares: dict[str, float]
    mean_entropy: float


@dataclass
class ComparisonResult:
    """Result of comparing two or more experiments."""
    results: dict[str, ExperimentResult]
    config_diffs: dict[str, Any]


class ExperimentRunner:
    """
    Run, compare, and sweep simulation experiments.
    """

    def __init__(self, environment: EnvironmentModel | None = None) -> None:
        self.environment = environment

    def run_experiment(
        self,
        config: SimulationConfig,
        collect_metrics: bool = True,
    ) -> ExperimentResult:
        """Run a single experiment and return results."""
        world = build_world(config, environment=self.environment)
        engine = SimulationEngine(config, world.agents, world.beliefs, world.behaviours)
        history = engine.run()

        collector = MetricsCollector(world.beliefs)
        metrics_list: list[StepMetrics] = []
        if collect_metrics:
            for snap in history:
                metrics_list.append(collector.collect(world.agents, snap))

        final = history[-1]
        n = final.population_size
        shares = {
            name: (count / n if n else 0.0)
            for name, count in final.behaviour_counts.items()
        }
        entropies = [m.behaviour_entropy for m in metrics_list]

        return ExperimentResult(
            config=config,
            history=history,
            metrics=metrics_list,
            final_behaviour_shares=shares,
            mean_entropy=sum(entropies) / len(entropies) if entropies else 0.0,
        )

    def compare_experiments(
        self,
        configs: dict[str, SimulationConfig],
        collect_metrics: bool = True,
    ) -> ComparisonResult:
        """Run multiple experiments and diff each config against the first."""
        results: dict[str, ExperimentResult] = {}
        for name, config in configs.items():
            results[name] = self.run_experiment(config, collect_metrics)

        config_names = list(configs.keys())
        diffs: dict[str, Any] = {}
        if len(config_names) >= 2:
            base = configs[config_names[0]]
            for name in config_names[1:]:
                diffs[f"{config_names[0]}_vs_{name}"] = base.diff(configs[name])

        return ComparisonResult(results=results, config_diffs=diffs)

    def run_parameter_sweep(
        self,
        base_config: SimulationConfig,
        param_name: str,
        values: list[Any],
        collect_metrics: bool = True,
    ) -> dict[str, ExperimentResult]:
        """
        Sweep a single parameter across multiple values.

        Args:
            base_config: Base configuration to modify
            param_name: Attribute name on SimulationConfig
            values: Values to test

        Returns:
            Dict mapping ``"param=value"`` -> ExperimentResult
        """
        if param_name not in base_config.to_dict():
            raise KeyError(f"Unknown config parameter '{param_name}'")

        results: dict[str, ExperimentResult] = {}
        for val in values:
            config_dict = base_config.to_dict()
            config_dict[param_name] = val
            config_dict["experiment_name"] = f"sweep_{param_name}={val}"
            config = SimulationConfig.from_dict(config_dict)

            results[f"{param_name}={val}"] = self.run_experiment(config, collect_metrics)
        return results

    def run_multi_seed(
        self,
        config: SimulationConfig,
        seeds: list[int],
        collect_metrics: bool = False,
    ) -> list[ExperimentResult]:
        """Run the same configuration with multiple random seeds."""
        results: list[ExperimentResult] = []
        for seed in seeds:
            config_dict = config.to_dict()
            config_dict["random_seed"] = seed
            config_dict["experiment_name"] = f"{config.experiment_name}_seed{seed}"
            results.append(
                self.run_experiment(SimulationConfig.from_dict(config_dict), collect_metrics)
            )
        return results
