"""Filter pipeline for the visible set."""

from feedscape.filtering.pipeline import apply, passes_category, passes_search, passes_time_window

__all__ = ["apply", "passes_category", "passes_search", "passes_time_window"]
