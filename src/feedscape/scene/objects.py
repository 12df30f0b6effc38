"""Scene primitives: entity spheres, relation lines and spawn effects."""

import uuid
from dataclasses import dataclass, field

import numpy as np

from feedscape.graph.models import Vector3


@dataclass
class SceneObject:
    """
    Visual proxy for one visible entity.

    ``entity_id`` is a lookup key into the EntityStore; no entity field is
    copied here. ``color`` is derived from the entity's category and is
    restyled whenever the object is repositioned.
    """

    entity_id: str
    position: Vector3
    radius: float
    color: int
    emissive: int = 0x000000
    scale: float = 1.0
    opacity: float = 0.7

    @property
    def effective_radius(self) -> float:
        return self.radius * self.scale

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "position": self.position.to_list(),
            "radius": self.radius,
            "scale": self.scale,
            "color": self.color,
            "emissive": self.emissive,
            "opacity": self.opacity,
        }


@dataclass
class LineObject:
    """A relation edge drawn between two object positions."""

    source_id: str
    target_id: str
    start: Vector3
    end: Vector3
    color: int = 0xCCCCCC
    opacity: float = 0.3

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "start": self.start.to_list(),
            "end": self.end.to_list(),
            "color": self.color,
            "opacity": self.opacity,
        }


@dataclass
class SpawnEffect:
    """Short-lived particle burst marking a newly entered entity."""

    entity_id: str
    position: Vector3
    particles: np.ndarray  # (n, 3) offsets from position
    created_at: float
    expires_at: float
    color: int = 0xFFFFFF
    particle_size: float = 0.1
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def burst(
        cls,
        entity_id: str,
        position: Vector3,
        now: float,
        lifetime: float = 2.0,
        count: int = 100,
        spread: float = 10.0,
        rng: np.random.Generator | None = None,
    ) -> "SpawnEffect":
        """Scatter ``count`` particles uniformly in a cube of side ``spread``."""
        rng = rng or np.random.default_rng()
        particles = (rng.random((count, 3)) - 0.5) * spread
        return cls(
            entity_id=entity_id,
            position=position,
            particles=particles,
            created_at=now,
            expires_at=now + lifetime,
        )

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "position": self.position.to_list(),
            "particles": self.particles.tolist(),
            "color": self.color,
            "particle_size": self.particle_size,
            "expires_at": self.expires_at,
        }


@dataclass
class Tooltip:
    content: str
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"content": self.content, "x": self.x, "y": self.y}


@dataclass
class HoverState:
    """What the pointer is over, if anything."""

    entity_id: str | None = None
    tooltip: Tooltip | None = None
    cursor: str = "default"

    def clear(self) -> None:
        self.entity_id = None
        self.tooltip = None
        self.cursor = "default"

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "tooltip": self.tooltip.to_dict() if self.tooltip else None,
            "cursor": self.cursor,
        }
