"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from feedscape.config import Settings, get_test_settings
from feedscape.context import ReconciliationContext
from feedscape.ingestion import StaticFeedAdapter
from feedscape.models import Entity, SourceDescriptor
from feedscape.scene import InMemoryScene

# Fixed "now" for every time-dependent test
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

TECH_FEED = "https://example.com/tech.xml"
BUSINESS_FEED = "https://example.com/business.xml"


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_entity(
    entity_id: str,
    category: str = "Technology",
    published_at: datetime | None = None,
    title: str | None = "",
    engagement: float = 50.0,
) -> Entity:
    """Entity with sensible defaults; published five minutes before NOW."""
    return Entity(
        id=entity_id,
        title=f"Story {entity_id}" if title == "" else title,
        link=f"https://example.com/{entity_id}",
        published_at=published_at or NOW - timedelta(minutes=5),
        category=category,
        engagement=engagement,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def entity_factory() -> Callable[..., Entity]:
    return make_entity


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Test settings: seeded placement, two example sources."""
    cfg = get_test_settings()
    cfg.feed_sources = [
        {"address": TECH_FEED, "category": "Technology"},
        {"address": BUSINESS_FEED, "category": "Business"},
    ]
    return cfg


@pytest.fixture
def static_adapter() -> StaticFeedAdapter:
    return StaticFeedAdapter()


@pytest.fixture
def scene() -> InMemoryScene:
    return InMemoryScene()


@pytest.fixture
def context(
    test_settings: Settings,
    static_adapter: StaticFeedAdapter,
    scene: InMemoryScene,
    fake_clock: FakeClock,
) -> ReconciliationContext:
    """Reconciliation context wired to a static adapter and a fixed clock."""
    return ReconciliationContext(
        test_settings,
        adapter=static_adapter,
        scene=scene,
        clock=fake_clock,
        now=lambda: NOW,
    )


@pytest.fixture
def tech_source() -> SourceDescriptor:
    return SourceDescriptor(address=TECH_FEED, category="Technology")
