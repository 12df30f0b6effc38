"""Normalize raw feed items into Entities."""

import logging
import random
from collections.abc import Iterable
from typing import Any

from feedscape.exceptions import MalformedEntityError
from feedscape.models import Entity, SourceDescriptor, parse_datetime

logger = logging.getLogger(__name__)


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def normalize_item(
    item: dict[str, Any],
    descriptor: SourceDescriptor,
    rng: random.Random | None = None,
) -> Entity:
    """Build an Entity from one rss2json-style item.

    Identity is the guid, falling back to the link. Items without a usable
    identity or publication date are malformed. Engagement comes from the
    item when it carries a number, otherwise it is a random score 0-99.
    """
    if not isinstance(item, dict):
        raise MalformedEntityError("item", item)

    link = _text(item.get("link"))
    entity_id = _text(item.get("guid")) or link
    if entity_id is None:
        raise MalformedEntityError("guid/link", item)

    published_at = parse_datetime(item.get("pubDate") or item.get("published"))
    if published_at is None:
        raise MalformedEntityError("pubDate", item)

    engagement = item.get("engagement")
    if isinstance(engagement, bool) or not isinstance(engagement, (int, float)):
        engagement = (rng or random).randrange(100)

    title = item.get("title")
    return Entity(
        id=entity_id,
        title=title if isinstance(title, str) else None,
        link=link,
        published_at=published_at,
        category=descriptor.category,
        engagement=engagement,
    )


def normalize_items(
    items: Iterable[Any],
    descriptor: SourceDescriptor,
    rng: random.Random | None = None,
) -> list[Entity]:
    """Normalize a batch, dropping malformed items."""
    entities: list[Entity] = []
    dropped = 0
    for item in items:
        try:
            entities.append(normalize_item(item, descriptor, rng))
        except MalformedEntityError as e:
            dropped += 1
            logger.debug(f"Dropping malformed item from {descriptor.address}: {e}")
    if dropped:
        logger.info(f"Dropped {dropped} malformed items from {descriptor.address}")
    return entities
