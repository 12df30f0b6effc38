"""Entity store - holds the current entity set and diffs successive batches."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from feedscape.models import Entity

logger = logging.getLogger(__name__)


@dataclass
class EntityDiff:
    """Difference between two consecutive batches, keyed by entity id."""

    entering: list[Entity] = field(default_factory=list)  # present now, absent before
    leaving: list[Entity] = field(default_factory=list)  # present before, absent now
    persisting: list[Entity] = field(default_factory=list)  # present in both (new instances)

    @property
    def is_empty(self) -> bool:
        return not (self.entering or self.leaving)

    def to_dict(self) -> dict:
        return {
            "entering": [e.id for e in self.entering],
            "leaving": [e.id for e in self.leaving],
            "persisting": [e.id for e in self.persisting],
        }


def dedupe_by_id(entities: Iterable[Entity]) -> dict[str, Entity]:
    """Index entities by id; on collision the later entity wins."""
    indexed: dict[str, Entity] = {}
    for entity in entities:
        if entity.id in indexed:
            logger.debug(f"Duplicate entity id in batch, keeping later: {entity.id}")
        indexed[entity.id] = entity
    return indexed


class EntityStore:
    """
    Canonical owner of the entity set.

    Every fetch cycle replaces the whole set. The diff only drives
    presentation decisions; entities themselves are never versioned.
    """

    def __init__(self) -> None:
        self._entities: dict[str, Entity] = {}

    def ingest(self, raw_batch: Iterable[Entity]) -> EntityDiff:
        """Replace the current set with ``raw_batch`` and return the diff."""
        incoming = dedupe_by_id(raw_batch)
        previous = self._entities

        diff = EntityDiff(
            entering=[e for eid, e in incoming.items() if eid not in previous],
            leaving=[e for eid, e in previous.items() if eid not in incoming],
            persisting=[e for eid, e in incoming.items() if eid in previous],
        )
        self._entities = incoming

        logger.debug(
            f"Ingested {len(incoming)} entities: +{len(diff.entering)} "
            f"-{len(diff.leaving)} ={len(diff.persisting)}"
        )
        return diff

    def get(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    @property
    def current(self) -> list[Entity]:
        """Current entity set in fetch order."""
        return list(self._entities.values())

    def clear(self) -> None:
        self._entities = {}

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities
