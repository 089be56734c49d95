"""Tests for ExperimentRunner."""

import pytest

from bibs.core.config import SimulationConfig
from bibs.experiment.runner import ComparisonResult, ExperimentResult, ExperimentRunner
from bibs.extensions.environment import ConstantEnvironment


def _config(**kwargs):
    defaults = dict(population_size=10, time_steps=3, random_seed=42)
    defaults.update(kwargs)
    return SimulationConfig(**defaults)


class TestRunExperiment:
    def test_run_single_experiment(self):
        result = ExperimentRunner().run_experiment(_config())
        assert isinstance(result, ExperimentResult)
        assert len(result.history) == 4
        assert len(result.metrics) == 4
        assert sum(result.final_behaviour_shares.values()) == pytest.approx(1.0)
        assert result.mean_entropy >= 0.0

    def test_run_without_metrics(self):
        result = ExperimentRunner().run_experiment(_config(), collect_metrics=False)
        assert result.metrics == []
        assert result.mean_entropy == 0.0

    def test_environment_dominates_choice(self):
        runner = ExperimentRunner(environment=ConstantEnvironment({"cycle": 1e9}))
        result = runner.run_experiment(_config())
        assert result.final_behaviour_shares["cycle"] == 1.0


class TestCompareExperiments:
    def test_compare_two(self):
        comparison = ExperimentRunner().compare_experiments({
            "sparse": _config(friend_probability=0.05),
            "dense": _config(friend_probability=0.5),
        })
        assert isinstance(comparison, ComparisonResult)
        assert set(comparison.results) == {"sparse", "dense"}
        assert "friend_probability" in comparison.config_diffs["sparse_vs_dense"]

    def test_ab_labels(self):
        comparison = ExperimentRunner().compare_experiments({"A": _config()})
        assert comparison.config_diffs == {}


class TestSweepAndSeeds:
    def test_parameter_sweep(self):
        results = ExperimentRunner().run_parameter_sweep(
            _config(), "friend_probability", [0.0, 0.2],
        )
        assert set(results) == {"friend_probability=0.0", "friend_probability=0.2"}
        assert results["friend_probability=0.2"].config.friend_probability == 0.2

    def test_unknown_parameter(self):
        with pytest.raises(KeyError):
            ExperimentRunner().run_parameter_sweep(_config(), "nope", [1])

    def test_multi_seed(self):
        results = ExperimentRunner().run_multi_seed(_config(), seeds=[1, 2, 3])
        assert [r.config.random_seed for r in results] == [1, 2, 3]
        assert results[0].config.experiment_name == "default_seed1"
