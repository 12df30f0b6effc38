"""Entity model - one normalized feed item shown in the scene."""

from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from email.utils import parsedate_to_datetime
from typing import Any


def parse_datetime(value: Any) -> datetime | None:
    """Parse datetime from the formats feeds hand us.

    Accepts native datetimes, ISO 8601, RFC 822 (raw RSS pubDate) and the
    rss2json ``YYYY-MM-DD HH:MM:SS`` form. Naive values are taken as UTC.
    Returns None when nothing matches.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # Epoch milliseconds
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError):
                return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class SourceDescriptor:
    """A feed address and the category its items are filed under."""

    address: str
    category: str

    def to_dict(self) -> dict:
        return {"address": self.address, "category": self.category}

    @classmethod
    def from_dict(cls, data: dict) -> "SourceDescriptor":
        return cls(address=data["address"], category=data["category"])


@dataclass(frozen=True)
class Entity:
    """
    A displayed feed item.

    Owned by the EntityStore; scene objects refer to it by ``id`` only.
    """

    id: str  # guid from the source, else the link URL
    title: str | None
    link: str | None
    published_at: datetime  # timezone-aware
    category: str
    engagement: float = 0.0  # 0 - 100

    def __post_init__(self) -> None:
        clamped = min(100.0, max(0.0, float(self.engagement)))
        if clamped != self.engagement:
            object.__setattr__(self, "engagement", clamped)

    def calendar_date(self, tz: tzinfo = timezone.utc) -> date:
        """Calendar day of publication in the given timezone."""
        return self.published_at.astimezone(tz).date()

    def to_dict(self) -> dict:
        """Convert to dictionary for the HTTP API."""
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "published_at": self.published_at.isoformat(),
            "category": self.category,
            "engagement": self.engagement,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entity":
        published_at = parse_datetime(data.get("published_at"))
        if published_at is None:
            raise ValueError("published_at is required")
        return cls(
            id=data["id"],
            title=data.get("title"),
            link=data.get("link"),
            published_at=published_at,
            category=data["category"],
            engagement=data.get("engagement", 0.0),
        )
