"""
Behaviours an agent can perform.

A behaviour is a plain identity + label. All the interesting numbers live
on beliefs (how much a belief impels or is reinforced by a behaviour).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True, eq=False)
class Behaviour:
    """A behaviour which can be performed."""

    name: str
    id: UUID = field(default_factory=uuid4)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Behaviour):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "name": self.name}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Behaviour:
        return cls(name=d["name"], id=UUID(d["id"]))

    def __repr__(self) -> str:
        return f"Behaviour(name={self.name!r}, id={str(self.id)[:8]})"
