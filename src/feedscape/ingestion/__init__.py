"""Feed ingestion: adapters, normalization and the polling scheduler."""

from feedscape.ingestion.feed_adapter import FeedAdapter, Rss2JsonFeedAdapter, StaticFeedAdapter
from feedscape.ingestion.normalizer import normalize_item, normalize_items
from feedscape.ingestion.scheduler import PollingScheduler

__all__ = [
    "FeedAdapter",
    "Rss2JsonFeedAdapter",
    "StaticFeedAdapter",
    "normalize_item",
    "normalize_items",
    "PollingScheduler",
]
