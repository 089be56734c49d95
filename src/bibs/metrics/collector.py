"""
Metrics Collector: per-step population statistics.

Extends StepSnapshot with behaviour shares, behavioural diversity
(Shannon entropy), activation extremes and social-tie statistics.
Provides time series extraction for plotting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from bibs.core.agent import Agent
from bibs.core.belief import IBelief
from bibs.core.engine import StepSnapshot


@dataclass
class StepMetrics:
    """Extended metrics for a single time step."""

    time: int
    population_size: int

    # Behaviour
    behaviour_counts: dict[str, int]
    behaviour_fractions: dict[str, float]
    behaviour_entropy: float          # Shannon entropy (bits) of behaviour shares
    sampled_fraction: float           # Share of agents whose choice was a random draw

    # Beliefs
    activation_means: dict[str, float]
    activation_maxes: dict[str, float]
    activation_mins: dict[str, float]

    # Social graph
    mean_out_degree: float = 0.0
    mean_friend_weight: float = 0.0

    extra: dict[str, Any] = field(default_factory=dict)


def shannon_entropy(counts: Sequence[int]) -> float:
    """Entropy in bits of a count vector; 0.0 for an empty population."""
    arr = np.asarray(counts, dtype=float)
    total = arr.sum()
    if total <= 0:
        return 0.0
    p = arr[arr > 0] / total
    return float(-(p * np.log2(p)).sum())


class MetricsCollector:
    """
    Collects and aggregates metrics across time steps.
    """

    def __init__(self, beliefs: Sequence[IBelief]) -> None:
        self.beliefs = list(beliefs)
        self.metrics_history: list[StepMetrics] = []

    def collect(self, agents: Sequence[Agent], snapshot: StepSnapshot) -> StepMetrics:
        """Compute metrics for the step described by ``snapshot``."""
        t = snapshot.time
        n = len(agents)

        counts = dict(snapshot.behaviour_counts)
        fractions = {
            name: (c / n if n else 0.0) for name, c in counts.items()
        }

        maxes: dict[str, float] = {}
        mins: dict[str, float] = {}
        for bel in self.beliefs:
            values = [agent.activation(t, bel) for agent in agents]
            maxes[bel.name] = float(max(values)) if values else 0.0
            mins[bel.name] = float(min(values)) if values else 0.0

        degrees = [len(agent.friends()) for agent in agents]
        weights = [w for agent in agents for w in agent.friends().values()]

        m = StepMetrics(
            time=t,
            population_size=n,
            behaviour_counts=counts,
            behaviour_fractions=fractions,
            behaviour_entropy=shannon_entropy(list(counts.values())),
            sampled_fraction=snapshot.sampled_count / n if n else 0.0,
            activation_means=dict(snapshot.activation_means),
            activation_maxes=maxes,
            activation_mins=mins,
            mean_out_degree=float(np.mean(degrees)) if degrees else 0.0,
            mean_friend_weight=float(np.mean(weights)) if weights else 0.0,
        )
        self.metrics_history.append(m)
        return m

    def time_series(self, field_name: str) -> list[Any]:
        """Extract one field across every collected step."""
        return [getattr(m, field_name) for m in self.metrics_history]

    def behaviour_share_series(self, behaviour_name: str) -> list[float]:
        """Share of the population performing ``behaviour_name`` over time."""
        return [m.behaviour_fractions.get(behaviour_name, 0.0) for m in self.metrics_history]
