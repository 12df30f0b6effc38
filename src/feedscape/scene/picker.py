"""Pointer picking and hover highlighting.

Runs on every pointer move, so one pick is a single vectorized ray/sphere
pass over the visible objects.
"""

import html
import logging
from collections.abc import Sequence
from datetime import timezone, tzinfo

import numpy as np

from feedscape.exceptions import SceneMutationError
from feedscape.graph.relations import relation_reasons
from feedscape.models import Entity
from feedscape.scene.backend import SceneBackend
from feedscape.scene.camera import PerspectiveCamera
from feedscape.scene.objects import HoverState, SceneObject, Tooltip
from feedscape.storage import EntityStore

logger = logging.getLogger(__name__)


def intersect_spheres(
    origin: np.ndarray,
    direction: np.ndarray,
    centers: np.ndarray,
    radii: np.ndarray,
    near: float = 0.0,
    far: float = float("inf"),
) -> tuple[int, float] | None:
    """Nearest sphere hit along a unit-direction ray.

    Returns (index, distance) or None. Hits closer than ``near`` or farther
    than ``far`` are ignored; a ray starting inside a sphere hits its far side.
    """
    if len(centers) == 0:
        return None

    oc = origin - centers
    b = oc @ direction
    c = np.einsum("ij,ij->i", oc, oc) - radii**2
    disc = b**2 - c
    hit = disc >= 0
    root = np.sqrt(np.where(hit, disc, 0.0))
    t_near = -b - root
    t_far = -b + root
    t = np.where(t_near >= near, t_near, t_far)
    valid = hit & (t >= near) & (t <= far)
    if not valid.any():
        return None

    distances = np.where(valid, t, np.inf)
    index = int(np.argmin(distances))
    return index, float(distances[index])


def format_tooltip(entity: Entity) -> str:
    title = html.escape(entity.title or "(untitled)")
    published = entity.published_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    return (
        f"<strong>{title}</strong><br>"
        f"Category: {html.escape(entity.category)}<br>"
        f"Published: {published}<br>"
        f"Engagement: {entity.engagement:g}"
    )


class Highlighter:
    """Applies and clears the related-entity highlight."""

    def __init__(
        self,
        scene: SceneBackend,
        store: EntityStore,
        hover: HoverState | None = None,
        highlight_color: int = 0x00FF00,
        neutral_color: int = 0x000000,
        calendar_tz: tzinfo = timezone.utc,
    ) -> None:
        self.scene = scene
        self.store = store
        self.hover = hover or HoverState()
        self.highlight_color = highlight_color
        self.neutral_color = neutral_color
        self.calendar_tz = calendar_tz

    def highlight(self, entity: Entity) -> int:
        """Light up every object related to ``entity``. Returns how many."""
        lit = 0
        for obj in self.scene.objects():
            other = self.store.get(obj.entity_id)
            related = other is not None and (
                other.id == entity.id or relation_reasons(entity, other, self.calendar_tz)
            )
            lit += self._set(obj, self.highlight_color if related else self.neutral_color)
        return lit

    def reset(self) -> None:
        for obj in self.scene.objects():
            self._set(obj, self.neutral_color)

    def reapply(self) -> None:
        """Restore the highlight after objects were rebuilt."""
        entity_id = self.hover.entity_id
        entity = self.store.get(entity_id) if entity_id else None
        if entity is None or self.scene.get_object(entity.id) is None:
            self.hover.clear()
            self.reset()
            return
        self.highlight(entity)

    def _set(self, obj: SceneObject, color: int) -> int:
        try:
            self.scene.set_emissive(obj.entity_id, color)
        except SceneMutationError as e:
            logger.warning(f"Could not set highlight on {obj.entity_id}: {e}")
            return 0
        return 1 if color == self.highlight_color else 0


class PointerPicker:
    """Maps pointer coordinates to the entity under the pointer."""

    def __init__(
        self,
        scene: SceneBackend,
        camera: PerspectiveCamera,
        store: EntityStore,
        highlighter: Highlighter,
    ) -> None:
        self.scene = scene
        self.camera = camera
        self.store = store
        self.highlighter = highlighter

    @property
    def hover(self) -> HoverState:
        return self.highlighter.hover

    def pick(
        self,
        pointer: tuple[float, float],
        camera: PerspectiveCamera | None = None,
        scene_objects: Sequence[SceneObject] | None = None,
    ) -> Entity | None:
        """Entity of the nearest object under ``pointer`` (pixels), or None."""
        camera = camera or self.camera
        objects = list(self.scene.objects() if scene_objects is None else scene_objects)
        if not objects:
            return None

        origin, direction = camera.ray_from_ndc(*camera.to_ndc(*pointer))
        centers = np.array([o.position for o in objects], dtype=float)
        radii = np.array([o.effective_radius for o in objects], dtype=float)

        hit = intersect_spheres(origin, direction, centers, radii, camera.near, camera.far)
        if hit is None:
            return None
        return self.store.get(objects[hit[0]].entity_id)

    def on_pointer_move(self, x: float, y: float) -> Entity | None:
        """Pick, then update highlight, tooltip and cursor."""
        entity = self.pick((x, y))
        hover = self.hover

        if entity is None:
            hover.clear()
            self.highlighter.reset()
            return None

        hover.entity_id = entity.id
        hover.tooltip = Tooltip(content=format_tooltip(entity), x=x, y=y)
        hover.cursor = "pointer"
        self.highlighter.highlight(entity)
        return entity
