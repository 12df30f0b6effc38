"""Filter pipeline - maps the full entity set to the visible set.

Pure functions: the same entities, filter state and ``now`` always give
the same result, and the input order is preserved.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from feedscape.models import TIME_WINDOW_SPANS, Entity, FilterState, TimeWindow


def passes_time_window(entity: Entity, window: TimeWindow, now: datetime) -> bool:
    """True if the entity's age is strictly below the window span."""
    if window == TimeWindow.ALL:
        return True
    return now - entity.published_at < TIME_WINDOW_SPANS[window]


def passes_category(entity: Entity, category_visibility: dict[str, bool]) -> bool:
    """Absent categories count as hidden."""
    return bool(category_visibility.get(entity.category, False))


def passes_search(entity: Entity, search_term: str) -> bool:
    """Case-insensitive substring match on the title.

    An empty term matches everything; a missing title never matches a
    non-empty term.
    """
    if not search_term:
        return True
    if not isinstance(entity.title, str):
        return False
    return search_term.lower() in entity.title.lower()


def apply(
    entities: Iterable[Entity],
    filter_state: FilterState,
    now: datetime | None = None,
) -> list[Entity]:
    """Return the entities that pass all three tests."""
    now = now or datetime.now(timezone.utc)
    return [
        entity
        for entity in entities
        if passes_time_window(entity, filter_state.time_window, now)
        and passes_category(entity, filter_state.category_visibility)
        and passes_search(entity, filter_state.search_term)
    ]
