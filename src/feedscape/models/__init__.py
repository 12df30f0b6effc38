"""feedscape data models."""

from feedscape.models.entity import Entity, SourceDescriptor, parse_datetime
from feedscape.models.filters import TIME_WINDOW_SPANS, FilterState, TimeWindow

__all__ = [
    "Entity",
    "SourceDescriptor",
    "parse_datetime",
    "FilterState",
    "TimeWindow",
    "TIME_WINDOW_SPANS",
]
