"""
Master configuration for a belief-induced behaviour simulation.

All tunable parameters for building and driving a population live here.
The agent engine itself takes no configuration: its dynamics are fully
determined by the relationship tables and per-agent records.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import Any


_RANGE_FIELDS = (
    "friend_weight_range",
    "time_delta_range",
    "initial_activation_range",
    "belief_relationship_range",
    "observed_relationship_range",
    "performing_relationship_range",
)


@dataclass
class SimulationConfig:
    """
    Simulation configuration, every parameter tunable.

    Ranges are ``(low, high)`` bounds for uniform draws when a world is
    generated. Use ``to_dict()`` / ``from_dict()`` for serialization and
    comparison.
    """

    # === Experiment identity ===
    experiment_name: str = "default"
    random_seed: int | None = None

    # === Population ===
    population_size: int = 50
    belief_names: list[str] = field(default_factory=lambda: [
        "climate_concern", "thrift", "convenience",
    ])
    behaviour_names: list[str] = field(default_factory=lambda: [
        "cycle", "drive", "public_transport",
    ])

    # === Time ===
    start_time: int = 0      # Base case: activations are seeded at this step
    time_steps: int = 20     # Steps simulated after start_time

    # === Social graph ===
    friend_probability: float = 0.1
    friend_weight_range: tuple[float, float] = (0.0, 0.5)

    # === Per-agent coefficients ===
    time_delta_range: tuple[float, float] = (0.5, 0.9)
    initial_activation_range: tuple[float, float] = (0.0, 1.0)

    # === Relationship tables ===
    belief_relationship_range: tuple[float, float] = (-0.1, 0.1)
    observed_relationship_range: tuple[float, float] = (-0.05, 0.05)
    performing_relationship_range: tuple[float, float] = (-1.0, 1.0)

    # === Execution ===
    max_workers: int = 1     # >1 ticks agents of one step on a thread pool

    def __post_init__(self) -> None:
        # JSON round trips turn tuples into lists
        for name in _RANGE_FIELDS:
            value = getattr(self, name)
            setattr(self, name, (float(value[0]), float(value[1])))

    def validate(self) -> None:
        """Raise ``ValueError`` on parameters no simulation can run with."""
        if self.population_size < 0:
            raise ValueError("population_size must be non-negative")
        if self.time_steps < 0:
            raise ValueError("time_steps must be non-negative")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if not 0.0 <= self.friend_probability <= 1.0:
            raise ValueError("friend_probability must be within [0, 1]")
        if not self.behaviour_names:
            raise ValueError("At least one behaviour name required")
        for name in _RANGE_FIELDS:
            low, high = getattr(self, name)
            if low > high:
                raise ValueError(f"{name} has low > high: ({low}, {high})")
        for label, names in (("belief", self.belief_names), ("behaviour", self.behaviour_names)):
            if len(set(names)) != len(names):
                raise ValueError(f"Duplicate {label} names: {names}")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            d[f.name] = list(v) if isinstance(v, (tuple, list)) else v
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SimulationConfig:
        """Deserialize from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, s: str) -> SimulationConfig:
        return cls.from_dict(json.loads(s))

    def diff(self, other: SimulationConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
