"""3D scene capability consumed by the synchronizer, picker and render loop.

``SceneBackend`` is the seam a renderer plugs into. ``InMemoryScene`` is the
headless scene graph used by the service: the HTTP API serves its snapshot to
whatever draws it.
"""

import logging
from typing import Protocol, runtime_checkable

from feedscape.exceptions import SceneMutationError
from feedscape.graph.models import Vector3
from feedscape.scene.objects import LineObject, SceneObject, SpawnEffect

logger = logging.getLogger(__name__)


@runtime_checkable
class SceneBackend(Protocol):
    """Primitive operations on the live scene."""

    def add_object(self, obj: SceneObject) -> None: ...

    def remove_object(self, entity_id: str) -> None: ...

    def move_object(self, entity_id: str, position: Vector3, radius: float | None = None) -> None: ...

    def restyle_object(self, entity_id: str, color: int) -> None: ...

    def set_emissive(self, entity_id: str, color: int) -> None: ...

    def set_scale(self, entity_id: str, scale: float) -> None: ...

    def get_object(self, entity_id: str) -> SceneObject | None: ...

    def objects(self) -> list[SceneObject]: ...

    def add_line(self, line: LineObject) -> None: ...

    def clear_lines(self) -> None: ...

    def lines(self) -> list[LineObject]: ...

    def add_effect(self, effect: SpawnEffect) -> None: ...

    def expire_effects(self, now: float) -> int: ...

    def effects(self) -> list[SpawnEffect]: ...

    def set_background(self, color: int) -> None: ...

    def clear(self) -> None: ...


class InMemoryScene:
    """Headless scene graph.

    Raises SceneMutationError for operations on objects it does not hold,
    the way a renderer rejects a missing parent.
    """

    def __init__(self, background: int = 0x001A33) -> None:
        self._objects: dict[str, SceneObject] = {}
        self._lines: list[LineObject] = []
        self._effects: dict[str, SpawnEffect] = {}
        self.background = background

    # Objects

    def add_object(self, obj: SceneObject) -> None:
        if obj.entity_id in self._objects:
            raise SceneMutationError(f"Object already in scene: {obj.entity_id}")
        self._objects[obj.entity_id] = obj

    def remove_object(self, entity_id: str) -> None:
        if self._objects.pop(entity_id, None) is None:
            raise SceneMutationError(f"Object not in scene: {entity_id}")

    def move_object(self, entity_id: str, position: Vector3, radius: float | None = None) -> None:
        obj = self._require(entity_id)
        obj.position = position
        if radius is not None:
            obj.radius = radius

    def restyle_object(self, entity_id: str, color: int) -> None:
        self._require(entity_id).color = color

    def set_emissive(self, entity_id: str, color: int) -> None:
        self._require(entity_id).emissive = color

    def set_scale(self, entity_id: str, scale: float) -> None:
        self._require(entity_id).scale = scale

    def _require(self, entity_id: str) -> SceneObject:
        obj = self._objects.get(entity_id)
        if obj is None:
            raise SceneMutationError(f"Object not in scene: {entity_id}")
        return obj

    def get_object(self, entity_id: str) -> SceneObject | None:
        return self._objects.get(entity_id)

    def objects(self) -> list[SceneObject]:
        return list(self._objects.values())

    # Lines

    def add_line(self, line: LineObject) -> None:
        self._lines.append(line)

    def clear_lines(self) -> None:
        self._lines = []

    def lines(self) -> list[LineObject]:
        return list(self._lines)

    # Effects

    def add_effect(self, effect: SpawnEffect) -> None:
        self._effects[effect.id] = effect

    def expire_effects(self, now: float) -> int:
        """Drop effects past their lifetime. Returns how many were removed."""
        expired = [eid for eid, e in self._effects.items() if e.is_expired(now)]
        for eid in expired:
            del self._effects[eid]
        return len(expired)

    def effects(self) -> list[SpawnEffect]:
        return list(self._effects.values())

    # Misc

    def set_background(self, color: int) -> None:
        self.background = color

    def clear(self) -> None:
        self._objects = {}
        self._lines = []
        self._effects = {}

    def snapshot(self) -> dict:
        """Serializable view of the whole scene."""
        return {
            "background": self.background,
            "objects": [o.to_dict() for o in self._objects.values()],
            "lines": [line.to_dict() for line in self._lines],
            "effects": [e.to_dict() for e in self._effects.values()],
        }
