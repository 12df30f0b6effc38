"""Entity storage."""

from feedscape.storage.entity_store import EntityDiff, EntityStore, dedupe_by_id

__all__ = ["EntityDiff", "EntityStore", "dedupe_by_id"]
