"""Relation graph over the visible scene objects.

Two entities are related when they share a category or were published on the
same calendar day. Every pair is compared, so cost is quadratic in the visible
set; there is no cap unless ``max_edges`` is given.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from feedscape.graph.config import RelationConfig
from feedscape.graph.models import EdgeReason, RelationEdge
from feedscape.models import Entity

logger = logging.getLogger(__name__)


class HasEntityId(Protocol):
    entity_id: str


def resolve_timezone(name: str) -> tzinfo:
    """IANA name to tzinfo; "UTC" needs no tz database."""
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def relation_reasons(a: Entity, b: Entity, tz: tzinfo) -> frozenset[EdgeReason]:
    """Reasons two entities are related (empty if they are not)."""
    reasons = set()
    if a.category == b.category:
        reasons.add(EdgeReason.SHARED_CATEGORY)
    if a.calendar_date(tz) == b.calendar_date(tz):
        reasons.add(EdgeReason.SHARED_DAY)
    return frozenset(reasons)


def build_edges(
    scene_objects: Sequence[HasEntityId],
    entities: Mapping[str, Entity],
    config: RelationConfig | None = None,
) -> list[RelationEdge]:
    """Build one unordered edge per related pair of scene objects.

    Objects whose entity cannot be resolved are ignored.
    """
    config = config or RelationConfig()
    tz = resolve_timezone(config.calendar_timezone)

    resolved: list[tuple[Entity, date]] = []
    for obj in scene_objects:
        entity = entities.get(obj.entity_id)
        if entity is None:
            logger.debug(f"No entity for scene object {obj.entity_id}, skipping")
            continue
        resolved.append((entity, entity.calendar_date(tz)))

    edges: list[RelationEdge] = []
    seen: set[tuple[str, str]] = set()
    for i, (a, a_day) in enumerate(resolved):
        for b, b_day in resolved[i + 1:]:
            if a.id == b.id:
                continue
            reasons = set()
            if a.category == b.category:
                reasons.add(EdgeReason.SHARED_CATEGORY)
            if a_day == b_day:
                reasons.add(EdgeReason.SHARED_DAY)
            if not reasons:
                continue

            edge = RelationEdge.between(a.id, b.id, frozenset(reasons))
            if edge.key in seen:
                continue
            seen.add(edge.key)
            edges.append(edge)

            if config.max_edges is not None and len(edges) >= config.max_edges:
                logger.warning(
                    f"Edge cap reached ({config.max_edges}) with "
                    f"{len(resolved)} objects; remaining pairs skipped"
                )
                return edges

    return edges
