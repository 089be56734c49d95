"""Tests for behaviour selection and Agent.perform."""

from unittest import mock

import numpy as np
import pytest

from bibs.core.agent import Agent
from bibs.core.behaviour import Behaviour
from bibs.core.belief import Belief
from bibs.core.decision import SelectionResult, select_behaviour
from bibs.core.errors import NotFoundError
from bibs.extensions.environment import ConstantEnvironment


def _behaviours(*names):
    return [Behaviour(n) for n in names]


def _agent_with_utilities(offsets, rng=None):
    """Agent holding no beliefs, so utility is the environment term alone."""
    return Agent(
        activations={0: {}},
        rng=rng or np.random.default_rng(0),
        environment=ConstantEnvironment(offsets),
    )


class TestSelectBehaviour:
    def test_empty_candidates_raises(self):
        with pytest.raises(ValueError, match="(?i)at least one behaviour"):
            select_behaviour([], [], np.random.default_rng(0))

    def test_misaligned_utilities_raises(self):
        with pytest.raises(ValueError):
            select_behaviour(_behaviours("a", "b"), [1.0], np.random.default_rng(0))

    def test_single_positive_is_deterministic(self):
        a, b, c = _behaviours("a", "b", "c")
        rng = mock.Mock()
        result = select_behaviour([a, b, c], [-1.0, 2.0, 0.0], rng)
        assert result.chosen == b
        assert not result.sampled
        assert result.probabilities[b] == 1.0
        rng.choice.assert_not_called()

    def test_all_non_positive_picks_max(self):
        a, b, c = _behaviours("a", "b", "c")
        rng = mock.Mock()
        result = select_behaviour([a, b, c], [-3.0, -0.5, -1.0], rng)
        assert result.chosen == b
        rng.choice.assert_not_called()

    def test_ties_go_to_first_seen(self):
        a, b, c = _behaviours("a", "b", "c")
        result = select_behaviour([a, b, c], [-1.0, -0.5, -0.5], mock.Mock())
        assert result.chosen == b

    def test_nan_utility_never_wins_max(self):
        a, b = _behaviours("a", "b")
        rng = mock.Mock()
        result = select_behaviour([a, b], [float("nan"), -1.0], rng)
        assert result.chosen == b
        assert not result.sampled
        rng.choice.assert_not_called()

    def test_all_nan_falls_back_to_first(self):
        a, b = _behaviours("a", "b")
        result = select_behaviour([a, b], [float("nan"), float("nan")], mock.Mock())
        assert result.chosen == a

    def test_nan_excluded_from_draw(self):
        a, b, c = _behaviours("a", "b", "c")
        rng = mock.Mock()
        result = select_behaviour([a, b, c], [float("nan"), 2.0, -1.0], rng)
        assert result.chosen == b
        rng.choice.assert_not_called()

    def test_all_zero_picks_first(self):
        a, b = _behaviours("a", "b")
        result = select_behaviour([a, b], [0.0, 0.0], mock.Mock())
        assert result.chosen == a

    def test_two_positive_samples(self):
        a, b, c = _behaviours("a", "b", "c")
        result = select_behaviour([a, b, c], [3.0, 1.0, -2.0], np.random.default_rng(1))
        assert result.sampled
        assert result.chosen in (a, b)
        assert result.probabilities[a] == pytest.approx(0.75)
        assert result.probabilities[b] == pytest.approx(0.25)
        assert result.probabilities[c] == 0.0

    def test_non_positive_never_sampled(self):
        a, b, c = _behaviours("a", "b", "c")
        rng = np.random.default_rng(7)
        for _ in range(200):
            result = select_behaviour([a, b, c], [1.0, 1.0, 0.0], rng)
            assert result.chosen != c

    def test_result_to_dict(self):
        a, b = _behaviours("a", "b")
        result = select_behaviour([a, b], [2.0, -1.0], np.random.default_rng(0), time=4)
        d = result.to_dict()
        assert d["chosen"] == "a"
        assert d["time"] == 4
        assert d["utilities"] == {"a": 2.0, "b": -1.0}
        assert result.explain() == {"a": 2.0, "b": -1.0}
        assert result.max_utility == 2.0


class TestPerform:
    def test_single_positive_recorded(self):
        a, b, c = _behaviours("a", "b", "c")
        agent = _agent_with_utilities({"a": -1.0, "b": 2.0, "c": 0.0})
        result = agent.perform(0, [a, b, c])
        assert isinstance(result, SelectionResult)
        assert agent.performed(0) == b
        assert agent.last_selection is result
        assert agent.selection_log == {}

    def test_all_non_positive_never_uses_rng(self):
        a, b, c = _behaviours("a", "b", "c")
        rng = mock.Mock()
        agent = _agent_with_utilities({"a": -1.0, "b": -0.5, "c": -0.5}, rng=rng)
        agent.perform(0, [a, b, c])
        assert agent.performed(0) == b
        rng.choice.assert_not_called()

    def test_weighted_draw_frequencies(self):
        a, b, c = _behaviours("a", "b", "c")
        agent = _agent_with_utilities(
            {"a": 3.0, "b": 1.0, "c": -1.0}, rng=np.random.default_rng(12345),
        )
        trials = 4000
        hits = 0
        for _ in range(trials):
            agent.perform(0, [a, b, c])
            chosen = agent.performed(0)
            assert chosen != c
            hits += chosen == a
        assert hits / trials == pytest.approx(0.75, abs=0.03)

    def test_seeded_runs_reproducible(self):
        behs = _behaviours("a", "b", "c")
        offsets = {"a": 1.0, "b": 2.0, "c": 3.0}

        def run(seed):
            agent = _agent_with_utilities(offsets, rng=np.random.default_rng(seed))
            out = []
            for _ in range(50):
                agent.perform(0, behs)
                out.append(agent.performed(0).name)
            return out

        assert run(99) == run(99)

    def test_empty_candidates_raise_and_record_nothing(self):
        agent = _agent_with_utilities({})
        with pytest.raises(ValueError):
            agent.perform(0, [])
        assert not agent.has_performed(0)

    def test_failing_utility_aborts_without_commit(self):
        bel = Belief("b")
        a, b = _behaviours("a", "b")
        bel.set_belief_relationship(bel, 0.0)
        bel.set_performing_behaviour_relationship(a, 1.0)
        agent = Agent(activations={0: {bel: 1.0}}, rng=np.random.default_rng(0))
        with pytest.raises(NotFoundError):
            agent.perform(0, [a, b])
        assert not agent.has_performed(0)
        assert agent.last_selection is None

    def test_untracked_time_raises(self):
        agent = _agent_with_utilities({"a": 1.0})
        with pytest.raises(NotFoundError):
            agent.perform(3, _behaviours("a"))

    def test_overwrites_previous_choice(self):
        a, b = _behaviours("a", "b")
        agent = _agent_with_utilities({"a": 1.0, "b": -1.0})
        agent.record_performed(0, b)
        agent.perform(0, [a, b])
        assert agent.performed(0) == a

    def test_belief_driven_choice(self):
        bel = Belief("b")
        a, b = _behaviours("a", "b")
        bel.set_belief_relationship(bel, 0.0)
        bel.set_performing_behaviour_relationship(a, -1.0)
        bel.set_performing_behaviour_relationship(b, 2.0)
        agent = Agent(activations={0: {bel: 1.0}}, rng=np.random.default_rng(0))
        result = agent.perform(0, [a, b])
        assert agent.performed(0) == b
        assert result.utilities[b] == pytest.approx(2.0)


class TestSelectionLog:
    def test_log_off_by_default(self):
        a, b = _behaviours("a", "b")
        agent = _agent_with_utilities({"a": 1.0})
        agent.perform(0, [a, b])
        assert agent.selection_log == {}
        assert agent.last_selection.time == 0
        assert agent.last_selection.chosen == a

    def test_log_kept_when_requested(self):
        a, b = _behaviours("a", "b")
        agent = Agent(
            activations={0: {}, 1: {}},
            rng=np.random.default_rng(0),
            environment=ConstantEnvironment({"b": 1.0}),
            keep_selection_log=True,
        )
        agent.perform(0, [a, b])
        agent.perform(1, [a, b])
        assert sorted(agent.selection_log) == [0, 1]
        assert agent.selection_log[1] is agent.last_selection
