"""
Utility-based behaviour selection.

Given per-behaviour utilities for one agent at one time step:

  * fewer than two behaviours with strictly positive utility
      -> the single maximum-utility behaviour (first seen wins ties)
  * two or more positive-utility behaviours
      -> weighted categorical draw among them, P(b) = U(b) / sum(U)

The draw is the only source of randomness in the engine and always goes
through the ``numpy.random.Generator`` passed in, so seeded generators
give reproducible runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from bibs.core.behaviour import Behaviour


@dataclass
class SelectionResult:
    """Outcome of a behaviour selection with explainability data."""
    chosen: Behaviour
    utilities: dict[Behaviour, float]       # Raw utility per candidate, candidate order
    probabilities: dict[Behaviour, float]   # Selection probability per candidate
    sampled: bool                           # True if the random draw was used
    time: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def max_utility(self) -> float:
        return max(self.utilities.values())

    def explain(self) -> dict[str, float]:
        """Return a readable mapping of behaviour name -> utility."""
        return {beh.name: u for beh, u in self.utilities.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "chosen": self.chosen.name,
            "sampled": self.sampled,
            "utilities": {b.name: u for b, u in self.utilities.items()},
            "probabilities": {b.name: p for b, p in self.probabilities.items()},
        }


def select_behaviour(
    candidates: Sequence[Behaviour],
    utilities: Sequence[float],
    rng: np.random.Generator,
    time: int | None = None,
) -> SelectionResult:
    """
    Choose one behaviour from ``candidates`` given their ``utilities``.

    Parameters
    ----------
    candidates : sequence of Behaviour
        Candidate behaviours, in the order used for tie-breaking.
    utilities : sequence of float
        Utility per candidate, aligned with ``candidates``.
    rng : Generator
        Random source for the weighted draw.
    time : int, optional
        Recorded on the result for bookkeeping.

    Returns
    -------
    SelectionResult
    """
    if not candidates:
        raise ValueError("At least one behaviour required to perform")
    if len(candidates) != len(utilities):
        raise ValueError(
            f"Got {len(utilities)} utilities for {len(candidates)} behaviours"
        )

    max_utility = -np.inf
    max_behaviour: Behaviour | None = None
    positive: list[Behaviour] = []
    positive_utilities: list[float] = []

    for beh, ut in zip(candidates, utilities):
        # Strict comparison: the first candidate wins ties
        if ut > max_utility:
            max_utility = ut
            max_behaviour = beh
        if ut > 0:
            positive.append(beh)
            positive_utilities.append(ut)

    if max_behaviour is None:
        # Nothing compared greater than -inf (all NaN or -inf)
        max_behaviour = candidates[0]

    utility_map = dict(zip(candidates, (float(u) for u in utilities)))

    if len(positive) <= 1:
        return SelectionResult(
            chosen=max_behaviour,
            utilities=utility_map,
            probabilities={b: 1.0 if b == max_behaviour else 0.0 for b in candidates},
            sampled=False,
            time=time,
        )

    weights = np.asarray(positive_utilities, dtype=float)
    probs = weights / weights.sum()
    chosen_idx = int(rng.choice(len(positive), p=probs))

    prob_map = {b: 0.0 for b in candidates}
    for beh, p in zip(positive, probs.tolist()):
        prob_map[beh] = p

    return SelectionResult(
        chosen=positive[chosen_idx],
        utilities=utility_map,
        probabilities=prob_map,
        sampled=True,
        time=time,
    )
