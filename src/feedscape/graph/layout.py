"""Spatial placement of entities around per-category anchors."""

import logging
import math
import random
import zlib

from feedscape.graph.config import PlacementConfig
from feedscape.graph.models import Vector3
from feedscape.models import Entity

logger = logging.getLogger(__name__)

# Colors for categories missing from the configured palette
FALLBACK_COLORS = [0xAF7AA1, 0xFF9DA7, 0x9C755F, 0xBAB0AC, 0xEDC948, 0x59A14F]


class CategoryLayout:
    """Assigns each category an anchor on a centered grid.

    Categories keep their registration order. With four categories the
    grid is 2x2 and the anchors land on the four quadrants
    (-s/2, s/2), (s/2, s/2), (-s/2, -s/2), (s/2, -s/2). Registering a new
    category may widen the grid and move every anchor.
    """

    def __init__(self, categories: list[str] | None = None, spacing: float = 100.0) -> None:
        self.spacing = spacing
        self._categories: list[str] = []
        self._anchors: dict[str, Vector3] = {}
        for category in categories or []:
            self.register(category)

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    def register(self, category: str) -> bool:
        """Add a category. Returns False if it was already known."""
        if category in self._anchors:
            return False
        self._categories.append(category)
        self._recompute()
        logger.debug(f"Registered category {category!r} ({len(self._categories)} total)")
        return True

    def anchor(self, category: str) -> Vector3:
        if category not in self._anchors:
            self.register(category)
        return self._anchors[category]

    def _recompute(self) -> None:
        count = len(self._categories)
        cols = max(1, math.ceil(math.sqrt(count)))
        rows = max(1, math.ceil(count / cols))

        self._anchors = {}
        for idx, category in enumerate(self._categories):
            col = idx % cols
            row = idx // cols
            x = (col - cols / 2 + 0.5) * self.spacing
            y = -(row - rows / 2 + 0.5) * self.spacing  # first row on top
            self._anchors[category] = Vector3(x, y, 0.0)


class CategoryPalette:
    """Category to color lookup."""

    def __init__(self, colors: dict[str, int] | None = None) -> None:
        self.colors = dict(colors or {})

    def color_for(self, category: str) -> int:
        if category in self.colors:
            return self.colors[category]
        return FALLBACK_COLORS[zlib.crc32(category.encode("utf-8")) % len(FALLBACK_COLORS)]


def radius_for(
    engagement: float,
    base: float = 1.0,
    scale: float = 3.0,
    minimum: float = 1.0,
) -> float:
    """Sphere radius grows linearly with engagement; never below ``minimum``."""
    engagement = min(100.0, max(0.0, engagement))
    return max(minimum, base + engagement / 100 * scale)


class SpatialPlacement:
    """
    Places entities near their category anchor.

    Position = anchor + uniform jitter in [-r, r) on each axis. Persisting
    entities are re-jittered on every call unless ``stable_positions`` is set,
    in which case a supplied prior position is returned unchanged.
    """

    def __init__(
        self,
        layout: CategoryLayout,
        config: PlacementConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.layout = layout
        self.config = config or PlacementConfig()
        self.rng = rng or random.Random(self.config.seed)

    def place(self, entity: Entity, existing_position: Vector3 | None = None) -> Vector3:
        if existing_position is not None and self.config.stable_positions:
            return existing_position

        anchor = self.layout.anchor(entity.category)
        r = self.config.jitter_radius
        return anchor.translated(
            self.rng.random() * 2 * r - r,
            self.rng.random() * 2 * r - r,
            self.rng.random() * 2 * r - r,
        )

    def radius(self, entity: Entity) -> float:
        return radius_for(
            entity.engagement,
            base=self.config.base_radius,
            scale=self.config.radius_scale,
            minimum=self.config.min_radius,
        )
