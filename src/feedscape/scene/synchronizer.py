"""Scene synchronizer - reconciles live scene objects with the visible set.

Order within one pass:
1. Destroy objects whose entity left the visible set
2. Create or reposition an object per visible entity; spawn effect for new ids
3. Drop all relation lines and rebuild them
4. Reapply the hover highlight

Everything happens synchronously inside ``reconcile``, so the render loop and
the picker never see a half-updated object set. Destroying before creating
means a pass that fails midway can never leave duplicates behind.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import numpy as np

from feedscape.exceptions import SceneMutationError
from feedscape.graph.config import RelationConfig
from feedscape.graph.layout import CategoryPalette, SpatialPlacement
from feedscape.graph.relations import build_edges
from feedscape.models import Entity
from feedscape.scene.backend import SceneBackend
from feedscape.scene.objects import LineObject, SceneObject, SpawnEffect
from feedscape.scene.picker import Highlighter

logger = logging.getLogger(__name__)


@dataclass
class EffectConfig:
    """Spawn effect parameters."""

    lifetime: float = 2.0  # seconds
    particle_count: int = 100
    spread: float = 10.0


@dataclass
class EdgeStyle:
    color: int = 0xCCCCCC
    opacity: float = 0.3


@dataclass
class ReconcileResult:
    """What one reconcile pass did, by entity id."""

    created: list[str] = field(default_factory=list)
    repositioned: list[str] = field(default_factory=list)
    destroyed: list[str] = field(default_factory=list)
    spawned: list[str] = field(default_factory=list)
    edges: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "repositioned": self.repositioned,
            "destroyed": self.destroyed,
            "spawned": self.spawned,
            "edges": self.edges,
            "errors": self.errors,
        }


class SceneSynchronizer:
    """Owns the lifecycle of scene objects, relation lines and spawn effects."""

    def __init__(
        self,
        scene: SceneBackend,
        placement: SpatialPlacement,
        palette: CategoryPalette,
        highlighter: Highlighter | None = None,
        relation_config: RelationConfig | None = None,
        edge_style: EdgeStyle | None = None,
        effect_config: EffectConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.scene = scene
        self.placement = placement
        self.palette = palette
        self.highlighter = highlighter
        self.relation_config = relation_config or RelationConfig()
        self.edge_style = edge_style or EdgeStyle()
        self.effect_config = effect_config or EffectConfig()
        self.clock = clock
        self.rng = rng or np.random.default_rng(placement.config.seed)

    @property
    def live_ids(self) -> set[str]:
        return {obj.entity_id for obj in self.scene.objects()}

    def reconcile(
        self,
        previous_visible: Iterable[Entity],
        next_visible: Iterable[Entity],
    ) -> ReconcileResult:
        """Bring the scene in line with ``next_visible``."""
        result = ReconcileResult()
        now = self.clock()
        self.scene.expire_effects(now)

        previous_ids = {e.id for e in previous_visible}
        next_by_id: dict[str, Entity] = {}
        for entity in next_visible:
            next_by_id[entity.id] = entity

        # 1. Destroy objects that left the visible set
        for obj in self.scene.objects():
            if obj.entity_id in next_by_id:
                continue
            try:
                self.scene.remove_object(obj.entity_id)
                result.destroyed.append(obj.entity_id)
            except SceneMutationError as e:
                logger.warning(f"Failed to destroy {obj.entity_id}: {e}")
                result.errors.append(str(e))

        # 2. Create or reposition
        for entity in next_by_id.values():
            existing = self.scene.get_object(entity.id)
            position = self.placement.place(
                entity, existing.position if existing is not None else None
            )
            radius = self.placement.radius(entity)
            color = self.palette.color_for(entity.category)

            try:
                if existing is not None:
                    # The same id may come back under another category
                    self.scene.move_object(entity.id, position, radius)
                    self.scene.restyle_object(entity.id, color)
                    result.repositioned.append(entity.id)
                else:
                    self.scene.add_object(
                        SceneObject(
                            entity_id=entity.id,
                            position=position,
                            radius=radius,
                            color=color,
                        )
                    )
                    result.created.append(entity.id)
            except SceneMutationError as e:
                logger.warning(f"Failed to place {entity.id}: {e}")
                result.errors.append(str(e))
                continue

            if entity.id not in previous_ids:
                self._spawn(entity.id, position, now, result)

        # 3. Rebuild relation lines
        result.edges = self._rebuild_edges(next_by_id)

        # 4. Objects moved or were recreated; restore hover highlight
        if self.highlighter is not None:
            self.highlighter.reapply()

        logger.info(
            f"Reconciled {len(next_by_id)} visible: +{len(result.created)} "
            f"-{len(result.destroyed)} ~{len(result.repositioned)}, {result.edges} edges"
        )
        return result

    def _spawn(self, entity_id: str, position, now: float, result: ReconcileResult) -> None:
        cfg = self.effect_config
        effect = SpawnEffect.burst(
            entity_id,
            position,
            now,
            lifetime=cfg.lifetime,
            count=cfg.particle_count,
            spread=cfg.spread,
            rng=self.rng,
        )
        try:
            self.scene.add_effect(effect)
            result.spawned.append(entity_id)
        except SceneMutationError as e:
            # Effects are cosmetic; the entity stays in the scene
            logger.warning(f"Failed to add spawn effect for {entity_id}: {e}")

    def _rebuild_edges(self, entities: dict[str, Entity]) -> int:
        self.scene.clear_lines()
        live = self.scene.objects()
        by_id = {obj.entity_id: obj for obj in live}

        edges = build_edges(live, entities, self.relation_config)
        for edge in edges:
            a, b = by_id[edge.source_id], by_id[edge.target_id]
            self.scene.add_line(
                LineObject(
                    source_id=edge.source_id,
                    target_id=edge.target_id,
                    start=a.position,
                    end=b.position,
                    color=self.edge_style.color,
                    opacity=self.edge_style.opacity,
                )
            )
        return len(edges)

    def clear(self) -> None:
        """Remove everything from the scene."""
        self.scene.clear()
        if self.highlighter is not None:
            self.highlighter.hover.clear()
