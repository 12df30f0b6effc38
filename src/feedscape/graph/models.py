"""Data models for placement and the relation graph."""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class Vector3(NamedTuple):
    """A point in scene space."""

    x: float
    y: float
    z: float

    def translated(self, dx: float, dy: float, dz: float) -> "Vector3":
        return Vector3(self.x + dx, self.y + dy, self.z + dz)

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]


class EdgeReason(str, Enum):
    """Why two entities are related."""

    SHARED_CATEGORY = "shared_category"
    SHARED_DAY = "shared_day"


@dataclass(frozen=True)
class RelationEdge:
    """An unordered link between two entities, keyed by entity id.

    ``source_id`` always sorts before ``target_id``, so (A, B) and (B, A)
    build the same edge.
    """

    source_id: str
    target_id: str
    reasons: frozenset[EdgeReason]

    @classmethod
    def between(cls, a: str, b: str, reasons: frozenset[EdgeReason]) -> "RelationEdge":
        if a == b:
            raise ValueError(f"Self-edge on {a}")
        source_id, target_id = (a, b) if a < b else (b, a)
        return cls(source_id=source_id, target_id=target_id, reasons=reasons)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_id, self.target_id)

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "reasons": sorted(r.value for r in self.reasons),
        }
