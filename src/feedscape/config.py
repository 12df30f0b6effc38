"""Configuration management using Pydantic Settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FEED_SOURCES: list[dict[str, str]] = [
    {"address": "https://rss.nytimes.com/services/xml/rss/nyt/Technology.xml", "category": "Technology"},
    {"address": "https://feeds.bbci.co.uk/news/business/rss.xml", "category": "Business"},
    {"address": "https://www.sciencedaily.com/rss/top.xml", "category": "Science"},
    {"address": "https://www.who.int/rss-feeds/news-english.xml", "category": "Health"},
]

DEFAULT_CATEGORY_COLORS: dict[str, int] = {
    "Technology": 0x4E79A7,
    "Business": 0xF28E2C,
    "Science": 0xE15759,
    "Health": 0x76B7B2,
}


class Environment(str, Enum):
    """Deployment environment presets."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Environment = Field(
        default=Environment.PROD,
        description="Preset applied by get_settings_for (dev, prod, test)",
    )

    # Feed sources
    feed_sources: list[dict[str, str]] = Field(
        default_factory=lambda: [dict(s) for s in DEFAULT_FEED_SOURCES],
        description="Initial source descriptors: [{address, category}, ...]",
    )
    rss2json_url: str = "https://api.rss2json.com/v1/api.json"
    feed_timeout: float = Field(
        default=30.0,
        description="Per-request timeout for one feed fetch (seconds)",
    )
    feed_max_concurrent: int = 8
    feed_max_retries: int = 2
    poll_interval_seconds: float = 60.0

    # Categories
    category_colors: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_COLORS)
    )

    # Spatial placement
    anchor_spacing: float = 100.0
    jitter_radius: float = 20.0
    placement_seed: int | None = Field(
        default=None,
        description="Seed for placement jitter (None = unseeded)",
    )
    stable_positions: bool = Field(
        default=False,
        description="Keep prior position for persisting entities instead of re-jittering",
    )
    base_radius: float = 1.0
    radius_scale: float = 3.0
    min_radius: float = 1.0

    # Relation graph
    calendar_timezone: str = Field(
        default="UTC",
        description="IANA timezone used to decide whether two entities share a calendar day",
    )
    edge_color: int = 0xCCCCCC
    edge_opacity: float = 0.3
    max_edges: int | None = Field(
        default=None,
        description="Optional cap on relation edges per reconciliation (None = unbounded)",
    )

    # Spawn effect
    spawn_effect_lifetime: float = 2.0
    spawn_particle_count: int = 100
    spawn_particle_spread: float = 10.0

    # Highlight
    highlight_color: int = 0x00FF00
    neutral_emissive: int = 0x000000

    # Render loop / camera
    render_fps: float = 60.0
    auto_rotate: bool = True
    auto_rotate_speed: float = 0.5
    pulse_amplitude: float = 0.1
    camera_fov: float = 75.0
    camera_near: float = 0.1
    camera_far: float = 1000.0
    camera_distance: float = 200.0
    viewport_width: int = 1280
    viewport_height: int = 720
    background_night_color: int = 0x001A33
    background_day_color: int = 0x001A33

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings(
        environment=Environment.DEV,
        poll_interval_seconds=30.0,
        render_fps=30.0,
    )


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        environment=Environment.TEST,
        feed_sources=[],
        placement_seed=1234,
        feed_timeout=5.0,
        feed_max_retries=0,
        poll_interval_seconds=3600.0,
        render_fps=120.0,
    )


def get_settings_for(environment: Environment | str) -> Settings:
    """Get settings for a deployment environment.

    Raises:
        ValueError: If the environment name is unknown
    """
    environment = Environment(environment)
    if environment == Environment.DEV:
        return get_dev_settings()
    if environment == Environment.TEST:
        return get_test_settings()
    return Settings(environment=environment)


# Global settings instance
settings = Settings()
