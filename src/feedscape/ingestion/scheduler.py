"""Polling scheduler - periodic fetch across all sources.

Polls once on start, then every ``interval`` seconds or as soon as
``trigger()`` is called. A poll fetches every source concurrently and waits
for all of them before handing the flattened batch on; one failing source
contributes an empty list. Polls never overlap. ``stop()`` cancels the task
and any in-flight fetches; their results are dropped.
"""

import asyncio
import logging
from collections.abc import Callable

from feedscape.config import settings
from feedscape.ingestion.feed_adapter import FeedAdapter
from feedscape.models import Entity, SourceDescriptor

logger = logging.getLogger(__name__)


class PollingScheduler:
    """Drives fetch → ingest → reconcile on a timer."""

    def __init__(
        self,
        adapter: FeedAdapter,
        sources: Callable[[], list[SourceDescriptor]],
        on_batch: Callable[[list[Entity]], object],
        interval: float | None = None,
    ) -> None:
        self.adapter = adapter
        self.sources = sources
        self.on_batch = on_batch
        self.interval = settings.poll_interval_seconds if interval is None else interval
        if self.interval < 0:
            raise ValueError(f"interval must not be negative, got {self.interval}")

        self.polls = 0
        self._stopped = False
        self._trigger = asyncio.Event()
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch_all(self) -> list[Entity]:
        """Fetch every configured source concurrently and flatten in source order."""
        descriptors = list(self.sources())
        results = await asyncio.gather(
            *[self.adapter.fetch_feed(d) for d in descriptors],
            return_exceptions=True,
        )

        batch: list[Entity] = []
        for descriptor, result in zip(descriptors, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(f"Source {descriptor.address} failed: {result}")
                continue
            batch.extend(result)
        return batch

    async def poll_once(self) -> list[Entity] | None:
        """One poll cycle. Returns the batch, or None if it was abandoned."""
        async with self._lock:
            batch = await self.fetch_all()
            if self._stopped:
                logger.info("Scheduler stopped during fetch; dropping results")
                return None

            self.polls += 1
            logger.info(f"Poll {self.polls}: {len(batch)} entities")
            self.on_batch(batch)
            return batch

    def trigger(self) -> None:
        """Request a poll now instead of waiting for the next tick."""
        self._trigger.set()

    async def run(self) -> None:
        logger.info(f"Polling every {self.interval:g}s")
        while not self._stopped:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Poll cycle failed: {e}", exc_info=True)

            try:
                await asyncio.wait_for(self._trigger.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            self._trigger.clear()

    def start(self) -> asyncio.Task:
        self._stopped = False
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Tear down: cancel the timer and any in-flight poll."""
        self._stopped = True
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Polling stopped")
