"""Filter state read by the filter pipeline."""

from dataclasses import dataclass, field, replace
from datetime import timedelta
from enum import Enum


class TimeWindow(str, Enum):
    """How far back an entity's publication may lie."""

    ALL = "all"
    LAST_HOUR = "last_hour"
    LAST_DAY = "last_day"
    LAST_WEEK = "last_week"


# Exclusive upper bound on entity age per window
TIME_WINDOW_SPANS: dict[TimeWindow, timedelta] = {
    TimeWindow.LAST_HOUR: timedelta(milliseconds=3_600_000),
    TimeWindow.LAST_DAY: timedelta(milliseconds=86_400_000),
    TimeWindow.LAST_WEEK: timedelta(milliseconds=604_800_000),
}


@dataclass(frozen=True)
class FilterState:
    """User-controlled criteria for the visible set.

    Replaced wholesale on every change; never mutated.
    """

    time_window: TimeWindow = TimeWindow.ALL
    category_visibility: dict[str, bool] = field(default_factory=dict)
    search_term: str = ""

    def with_changes(self, **changes) -> "FilterState":
        """Return a copy with the given fields replaced."""
        if "time_window" in changes and changes["time_window"] is not None:
            changes["time_window"] = TimeWindow(changes["time_window"])
        if "category_visibility" in changes and changes["category_visibility"] is not None:
            changes["category_visibility"] = dict(changes["category_visibility"])
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "time_window": self.time_window.value,
            "category_visibility": dict(self.category_visibility),
            "search_term": self.search_term,
        }
