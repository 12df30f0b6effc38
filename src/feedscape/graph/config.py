"""Configuration for placement and relation building."""

from dataclasses import dataclass, field

from feedscape.config import Settings, settings


@dataclass
class PlacementConfig:
    """Configuration for category anchors and jitter."""

    anchor_spacing: float = 100.0  # Distance between neighbouring anchors
    jitter_radius: float = 20.0  # Uniform jitter per axis: [-r, r)
    seed: int | None = None

    # Sphere radius from engagement: base + engagement/100 * scale
    base_radius: float = 1.0
    radius_scale: float = 3.0
    min_radius: float = 1.0

    stable_positions: bool = False  # Keep prior position for persisting entities


@dataclass
class RelationConfig:
    """Configuration for the relation graph."""

    calendar_timezone: str = "UTC"
    max_edges: int | None = None  # None = no cap


@dataclass
class GraphConfig:
    """Combined configuration for layout and relations."""

    placement: PlacementConfig = field(default_factory=PlacementConfig)
    relations: RelationConfig = field(default_factory=RelationConfig)

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "GraphConfig":
        cfg = cfg or settings
        return cls(
            placement=PlacementConfig(
                anchor_spacing=cfg.anchor_spacing,
                jitter_radius=cfg.jitter_radius,
                seed=cfg.placement_seed,
                base_radius=cfg.base_radius,
                radius_scale=cfg.radius_scale,
                min_radius=cfg.min_radius,
                stable_positions=cfg.stable_positions,
            ),
            relations=RelationConfig(
                calendar_timezone=cfg.calendar_timezone,
                max_edges=cfg.max_edges,
            ),
        )
