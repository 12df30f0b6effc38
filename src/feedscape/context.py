"""Reconciliation context - owns every piece of live state.

One context per scene: entity store, filter state, sources, scene, camera,
synchronizer, picker, render loop and scheduler. Nothing lives at module
scope; the HTTP layer and the CLI each hold a context.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from feedscape import filtering
from feedscape.config import Settings, settings
from feedscape.graph import CategoryLayout, CategoryPalette, GraphConfig, SpatialPlacement, Vector3
from feedscape.graph.relations import resolve_timezone
from feedscape.ingestion import FeedAdapter, PollingScheduler, Rss2JsonFeedAdapter
from feedscape.models import Entity, FilterState, SourceDescriptor, TimeWindow
from feedscape.scene import (
    EdgeStyle,
    EffectConfig,
    Highlighter,
    HoverState,
    InMemoryScene,
    PerspectiveCamera,
    PointerPicker,
    ReconcileResult,
    RenderLoop,
    SceneBackend,
    SceneSynchronizer,
)
from feedscape.storage import EntityDiff, EntityStore

logger = logging.getLogger(__name__)

FilterListener = Callable[[FilterState], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationContext:
    """Wires the pipeline together: scheduler → store → filters → scene."""

    def __init__(
        self,
        cfg: Settings | None = None,
        adapter: FeedAdapter | None = None,
        scene: SceneBackend | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        cfg = cfg or settings
        self.settings = cfg
        self.now = now

        self.store = EntityStore()
        self.sources: list[SourceDescriptor] = [
            SourceDescriptor.from_dict(d) for d in cfg.feed_sources
        ]

        categories = list(cfg.category_colors)
        categories += [s.category for s in self.sources if s.category not in categories]
        graph_config = GraphConfig.from_settings(cfg)
        self.layout = CategoryLayout(categories, spacing=graph_config.placement.anchor_spacing)
        self.palette = CategoryPalette(cfg.category_colors)
        self.placement = SpatialPlacement(self.layout, graph_config.placement)

        self.filter_state = FilterState(
            category_visibility={c: True for c in self.layout.categories}
        )
        self._filter_listeners: list[FilterListener] = []

        self.scene = scene or InMemoryScene(background=cfg.background_night_color)
        self.camera = PerspectiveCamera(
            fov=cfg.camera_fov,
            near=cfg.camera_near,
            far=cfg.camera_far,
            position=Vector3(0.0, 0.0, cfg.camera_distance),
            width=cfg.viewport_width,
            height=cfg.viewport_height,
        )
        self.hover = HoverState()
        self.highlighter = Highlighter(
            self.scene,
            self.store,
            self.hover,
            highlight_color=cfg.highlight_color,
            neutral_color=cfg.neutral_emissive,
            calendar_tz=resolve_timezone(cfg.calendar_timezone),
        )
        self.picker = PointerPicker(self.scene, self.camera, self.store, self.highlighter)
        self.synchronizer = SceneSynchronizer(
            self.scene,
            self.placement,
            self.palette,
            highlighter=self.highlighter,
            relation_config=graph_config.relations,
            edge_style=EdgeStyle(color=cfg.edge_color, opacity=cfg.edge_opacity),
            effect_config=EffectConfig(
                lifetime=cfg.spawn_effect_lifetime,
                particle_count=cfg.spawn_particle_count,
                spread=cfg.spawn_particle_spread,
            ),
            clock=clock,
        )
        self.render_loop = RenderLoop(
            self.scene,
            self.camera,
            fps=cfg.render_fps,
            auto_rotate=cfg.auto_rotate,
            auto_rotate_speed=cfg.auto_rotate_speed,
            pulse_amplitude=cfg.pulse_amplitude,
            night_color=cfg.background_night_color,
            day_color=cfg.background_day_color,
            clock=clock,
        )

        self.adapter = adapter or Rss2JsonFeedAdapter(
            base_url=cfg.rss2json_url,
            timeout=cfg.feed_timeout,
            max_concurrent=cfg.feed_max_concurrent,
            max_retries=cfg.feed_max_retries,
        )
        self.scheduler = PollingScheduler(
            self.adapter,
            sources=lambda: list(self.sources),
            on_batch=self.apply_batch,
            interval=cfg.poll_interval_seconds,
        )

        self.visible: list[Entity] = []
        self.last_diff: EntityDiff | None = None
        self.last_result: ReconcileResult | None = None

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def apply_batch(self, batch: list[Entity]) -> ReconcileResult:
        """Ingest a fetched batch and reconcile the scene."""
        self.last_diff = self.store.ingest(batch)
        for entity in self.last_diff.entering:
            self.layout.anchor(entity.category)
        return self.refresh()

    def refresh(self) -> ReconcileResult:
        """Recompute the visible set and reconcile against the previous one."""
        next_visible = filtering.apply(self.store.current, self.filter_state, now=self.now())
        result = self.synchronizer.reconcile(self.visible, next_visible)
        self.visible = next_visible
        self.last_result = result
        return result

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def add_filter_listener(self, listener: FilterListener) -> None:
        self._filter_listeners.append(listener)

    def update_filters(
        self,
        time_window: TimeWindow | str | None = None,
        category_visibility: dict[str, bool] | None = None,
        search_term: str | None = None,
    ) -> ReconcileResult:
        """Replace filter parameters and re-reconcile immediately."""
        self.filter_state = self.filter_state.with_changes(
            time_window=time_window,
            category_visibility=category_visibility,
            search_term=search_term,
        )
        logger.debug(f"Filters changed: {self.filter_state.to_dict()}")
        for listener in self._filter_listeners:
            listener(self.filter_state)
        return self.refresh()

    def set_category_visible(self, category: str, visible: bool) -> ReconcileResult:
        visibility = dict(self.filter_state.category_visibility)
        visibility[category] = visible
        return self.update_filters(category_visibility=visibility)

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def add_source(self, descriptor: SourceDescriptor) -> None:
        """Add a source and poll now. A new category starts out visible."""
        self.sources.append(descriptor)
        if self.layout.register(descriptor.category):
            visibility = dict(self.filter_state.category_visibility)
            visibility.setdefault(descriptor.category, True)
            self.filter_state = self.filter_state.with_changes(category_visibility=visibility)
        logger.info(f"Added source {descriptor.address} ({descriptor.category})")
        self.scheduler.trigger()

    def remove_source(self, index: int | SourceDescriptor) -> SourceDescriptor:
        """Remove a source, by position or descriptor, and poll now."""
        if isinstance(index, SourceDescriptor):
            if index not in self.sources:
                raise IndexError(f"Unknown source: {index.address}")
            index = self.sources.index(index)
        if not 0 <= index < len(self.sources):
            raise IndexError(f"No source at index {index}")
        descriptor = self.sources.pop(index)
        logger.info(f"Removed source {descriptor.address}")
        self.scheduler.trigger()
        return descriptor

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def pointer_move(self, x: float, y: float) -> Entity | None:
        return self.picker.on_pointer_move(x, y)

    def resize(self, width: int, height: int) -> None:
        self.render_loop.resize(width, height)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start rendering and polling (first poll runs immediately)."""
        self.render_loop.start()
        self.scheduler.start()

    async def teardown(self) -> None:
        """Stop polling before the scene goes away, then clear it."""
        await self.scheduler.stop()
        await self.render_loop.stop()
        self.synchronizer.clear()
        self.visible = []
        close = getattr(self.adapter, "close", None)
        if close is not None:
            await close()
        logger.info("Reconciliation context torn down")

    def snapshot(self) -> dict:
        """Everything a renderer needs to draw the current frame."""
        scene_state = self.scene.snapshot() if hasattr(self.scene, "snapshot") else {}
        # Category is looked up in the store, never kept on the object
        for obj in scene_state.get("objects", []):
            entity = self.store.get(obj["entity_id"])
            obj["category"] = entity.category if entity is not None else None
        return {
            **scene_state,
            "camera": self.camera.to_dict(),
            "hover": self.hover.to_dict(),
            "filters": self.filter_state.to_dict(),
            "auto_rotate": self.render_loop.rotating,
            "entities_total": len(self.store),
            "entities_visible": len(self.visible),
        }
