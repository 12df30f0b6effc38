"""Layout and relation graph for the scene.

Provides:
- Category anchors and jittered placement
- Engagement-derived sphere radius
- Relation edges between entities sharing a category or calendar day
"""

from feedscape.graph.config import GraphConfig, PlacementConfig, RelationConfig
from feedscape.graph.layout import CategoryLayout, CategoryPalette, SpatialPlacement, radius_for
from feedscape.graph.models import EdgeReason, RelationEdge, Vector3
from feedscape.graph.relations import build_edges, relation_reasons, resolve_timezone

__all__ = [
    # Config
    "GraphConfig",
    "PlacementConfig",
    "RelationConfig",
    # Models
    "EdgeReason",
    "RelationEdge",
    "Vector3",
    # Layout
    "CategoryLayout",
    "CategoryPalette",
    "SpatialPlacement",
    "radius_for",
    # Relations
    "build_edges",
    "relation_reasons",
    "resolve_timezone",
]
