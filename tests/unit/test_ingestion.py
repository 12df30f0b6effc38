"""Unit tests for feed normalization and adapters."""

import random
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from feedscape.exceptions import MalformedEntityError
from feedscape.ingestion import (
    Rss2JsonFeedAdapter,
    StaticFeedAdapter,
    normalize_item,
    normalize_items,
)
from feedscape.models import SourceDescriptor

SOURCE = SourceDescriptor(address="https://example.com/tech.xml", category="Technology")


def rss_item(**overrides) -> dict:
    item = {
        "title": "Chip shortage eases",
        "pubDate": "2026-10-19 08:30:00",
        "link": "https://example.com/chips",
        "guid": "https://example.com/chips#1",
        "author": "",
        "description": "...",
    }
    item.update(overrides)
    return item


def ok_response(items: list) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"status": "ok", "feed": {}, "items": items}
    return response


class TestNormalizeItem:
    """Tests for normalize_item."""

    def test_full_item(self) -> None:
        entity = normalize_item(rss_item(), SOURCE, random.Random(0))

        assert entity.id == "https://example.com/chips#1"
        assert entity.title == "Chip shortage eases"
        assert entity.link == "https://example.com/chips"
        assert entity.category == "Technology"
        assert entity.published_at == datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
        assert 0 <= entity.engagement < 100

    def test_link_is_fallback_identity(self) -> None:
        entity = normalize_item(rss_item(guid=""), SOURCE)
        assert entity.id == "https://example.com/chips"

    def test_no_identity(self) -> None:
        with pytest.raises(MalformedEntityError) as exc:
            normalize_item(rss_item(guid=None, link=None), SOURCE)
        assert exc.value.field_name == "guid/link"

    def test_no_date(self) -> None:
        with pytest.raises(MalformedEntityError):
            normalize_item(rss_item(pubDate="yesterday-ish"), SOURCE)

    def test_published_fallback_field(self) -> None:
        item = rss_item()
        del item["pubDate"]
        item["published"] = "2026-10-19T09:00:00Z"
        assert normalize_item(item, SOURCE).published_at.hour == 9

    def test_numeric_engagement_kept(self) -> None:
        assert normalize_item(rss_item(engagement=73), SOURCE).engagement == 73

    def test_bool_engagement_ignored(self) -> None:
        rng = MagicMock()
        rng.randrange.return_value = 12
        assert normalize_item(rss_item(engagement=True), SOURCE, rng).engagement == 12

    def test_non_string_title(self) -> None:
        assert normalize_item(rss_item(title={"#text": "x"}), SOURCE).title is None

    def test_not_a_dict(self) -> None:
        with pytest.raises(MalformedEntityError):
            normalize_item(["nope"], SOURCE)


class TestNormalizeItems:
    def test_drops_malformed(self) -> None:
        items = [rss_item(), rss_item(guid=None, link=None), "junk", rss_item(guid="other")]
        entities = normalize_items(items, SOURCE)
        assert [e.id for e in entities] == ["https://example.com/chips#1", "other"]

    def test_out_of_range_timestamp_drops_one_item(self) -> None:
        items = [
            rss_item(guid="ok", pubDate="2026-10-19 10:00:00"),
            rss_item(guid="bad", pubDate=1e20),
        ]
        entities = normalize_items(items, SOURCE)
        assert [e.id for e in entities] == ["ok"]


class TestRss2JsonFeedAdapter:
    """Tests for the rss2json adapter with a mocked session."""

    @pytest.fixture
    def adapter(self) -> Rss2JsonFeedAdapter:
        adapter = Rss2JsonFeedAdapter(
            base_url="https://api.test/v1/api.json",
            timeout=1.0,
            max_concurrent=2,
            max_retries=0,
            rng=random.Random(0),
        )
        adapter._session = MagicMock()
        return adapter

    @pytest.mark.asyncio
    async def test_fetch_feed(self, adapter) -> None:
        adapter._session.get.return_value = ok_response([rss_item(), rss_item(guid="b")])

        entities = await adapter.fetch_feed(SOURCE)

        assert [e.id for e in entities] == ["https://example.com/chips#1", "b"]
        adapter._session.get.assert_called_once_with(
            "https://api.test/v1/api.json",
            params={"rss_url": SOURCE.address},
            timeout=1.0,
        )

    @pytest.mark.asyncio
    async def test_network_error_yields_empty(self, adapter) -> None:
        adapter._session.get.side_effect = requests.ConnectionError("unreachable")
        assert await adapter.fetch_feed(SOURCE) == []

    @pytest.mark.asyncio
    async def test_http_error_yields_empty(self, adapter) -> None:
        response = ok_response([rss_item()])
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        adapter._session.get.return_value = response
        assert await adapter.fetch_feed(SOURCE) == []

    @pytest.mark.asyncio
    async def test_invalid_json_yields_empty(self, adapter) -> None:
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        adapter._session.get.return_value = response
        assert await adapter.fetch_feed(SOURCE) == []

    @pytest.mark.asyncio
    async def test_error_status_yields_empty(self, adapter) -> None:
        response = MagicMock()
        response.json.return_value = {"status": "error", "message": "Cannot download feed"}
        adapter._session.get.return_value = response
        assert await adapter.fetch_feed(SOURCE) == []

    @pytest.mark.asyncio
    async def test_missing_items_yields_empty(self, adapter) -> None:
        response = MagicMock()
        response.json.return_value = {"status": "ok"}
        adapter._session.get.return_value = response
        assert await adapter.fetch_feed(SOURCE) == []

    @pytest.mark.asyncio
    async def test_close(self, adapter) -> None:
        session = adapter._session
        await adapter.close()
        session.close.assert_called_once()
        assert adapter._session is None

    def test_session_reused(self) -> None:
        adapter = Rss2JsonFeedAdapter(max_retries=0)
        assert adapter._get_session() is adapter._get_session()

    def test_explicit_limits_kept(self) -> None:
        adapter = Rss2JsonFeedAdapter(timeout=0.5, max_concurrent=1, max_retries=0)
        assert (adapter.timeout, adapter.max_concurrent, adapter.max_retries) == (0.5, 1, 0)

    @pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"max_concurrent": 0}])
    def test_zero_limits_rejected(self, kwargs) -> None:
        with pytest.raises(ValueError):
            Rss2JsonFeedAdapter(**kwargs)


class TestStaticFeedAdapter:
    @pytest.mark.asyncio
    async def test_lists_and_callables(self, entity_factory) -> None:
        counter = iter(range(100))
        adapter = StaticFeedAdapter(
            {
                "fixed": [entity_factory("a")],
                "live": lambda: [entity_factory(f"n{next(counter)}")],
            }
        )

        assert [e.id for e in await adapter.fetch_feed(SourceDescriptor("fixed", "Tech"))] == ["a"]
        assert [e.id for e in await adapter.fetch_feed(SourceDescriptor("live", "Tech"))] == ["n0"]
        assert [e.id for e in await adapter.fetch_feed(SourceDescriptor("live", "Tech"))] == ["n1"]
        assert await adapter.fetch_feed(SourceDescriptor("unknown", "Tech")) == []
        assert len(adapter.calls) == 4
