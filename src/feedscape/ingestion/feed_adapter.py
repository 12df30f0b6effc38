"""Feed source adapters.

An adapter turns a SourceDescriptor into a list of Entities and never raises:
any network or parse failure is logged and yields an empty list.
"""

import asyncio
import logging
import random
from collections.abc import Callable
from typing import Any, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from feedscape.config import settings
from feedscape.exceptions import SourceFetchError
from feedscape.ingestion.normalizer import normalize_items
from feedscape.models import Entity, SourceDescriptor

logger = logging.getLogger(__name__)


class FeedAdapter(Protocol):
    async def fetch_feed(self, descriptor: SourceDescriptor) -> list[Entity]: ...


class Rss2JsonFeedAdapter:
    """Fetches feeds through the rss2json API using requests in worker threads."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_concurrent: int | None = None,
        max_retries: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.base_url = base_url or settings.rss2json_url
        self.timeout = settings.feed_timeout if timeout is None else timeout
        self.max_concurrent = (
            settings.feed_max_concurrent if max_concurrent is None else max_concurrent
        )
        self.max_retries = settings.feed_max_retries if max_retries is None else max_retries
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {self.max_concurrent}")
        self.rng = rng or random.Random()

        self._semaphore = asyncio.Semaphore(self.max_concurrent)
        self._session: requests.Session | None = None

    def _get_session(self) -> requests.Session:
        """Get or create requests session with connection pooling."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"Accept": "application/json"})
            adapter = HTTPAdapter(
                pool_connections=self.max_concurrent,
                pool_maxsize=self.max_concurrent * 2,
                max_retries=Retry(total=self.max_retries, backoff_factor=0.5),
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def _sync_fetch(self, descriptor: SourceDescriptor) -> list[dict[str, Any]]:
        """Fetch raw items for one source (runs in thread)."""
        session = self._get_session()
        try:
            response = session.get(
                self.base_url,
                params={"rss_url": descriptor.address},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise SourceFetchError(descriptor.address, str(e)) from e
        except ValueError as e:
            raise SourceFetchError(descriptor.address, f"invalid JSON: {e}") from e

        if not isinstance(data, dict) or data.get("status") != "ok":
            status = data.get("status") if isinstance(data, dict) else type(data).__name__
            raise SourceFetchError(descriptor.address, f"bad status: {status}")
        items = data.get("items")
        if not isinstance(items, list):
            raise SourceFetchError(descriptor.address, "missing items list")
        return items

    async def fetch_feed(self, descriptor: SourceDescriptor) -> list[Entity]:
        """Fetch and normalize one source; empty list on failure."""
        async with self._semaphore:
            logger.debug(f"Fetching feed: {descriptor.address}")
            try:
                items = await asyncio.to_thread(self._sync_fetch, descriptor)
            except SourceFetchError as e:
                logger.warning(f"Feed fetch failed: {e}")
                return []

        entities = normalize_items(items, descriptor, self.rng)
        logger.debug(f"Fetched {len(entities)} entities from {descriptor.address}")
        return entities


class StaticFeedAdapter:
    """Serves preset entities per address. For tests and offline runs.

    ``feeds`` maps an address to a list of entities, or to a callable that
    returns one (called on every fetch).
    """

    def __init__(
        self,
        feeds: dict[str, list[Entity] | Callable[[], list[Entity]]] | None = None,
    ) -> None:
        self.feeds = dict(feeds or {})
        self.calls: list[SourceDescriptor] = []

    async def fetch_feed(self, descriptor: SourceDescriptor) -> list[Entity]:
        self.calls.append(descriptor)
        feed = self.feeds.get(descriptor.address, [])
        return list(feed() if callable(feed) else feed)
