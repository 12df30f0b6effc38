"""Unit tests for settings presets."""

import pytest
from fastapi.testclient import TestClient

from feedscape.api.main import create_app
from feedscape.config import (
    Environment,
    Settings,
    get_dev_settings,
    get_settings_for,
    get_test_settings,
)


class TestPresets:
    def test_dev(self) -> None:
        cfg = get_dev_settings()
        assert cfg.environment == Environment.DEV
        assert cfg.poll_interval_seconds == 30.0

    def test_test(self) -> None:
        cfg = get_test_settings()
        assert cfg.environment == Environment.TEST
        assert cfg.feed_sources == []

    def test_env_var_selects_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "dev")
        assert Settings().environment == Environment.DEV


class TestGetSettingsFor:
    @pytest.mark.parametrize(
        "environment, interval",
        [(Environment.DEV, 30.0), ("test", 3600.0), ("prod", 60.0)],
    )
    def test_preset_by_name(self, environment, interval) -> None:
        cfg = get_settings_for(environment)
        assert cfg.environment == Environment(environment)
        assert cfg.poll_interval_seconds == interval

    def test_unknown_environment(self) -> None:
        with pytest.raises(ValueError):
            get_settings_for("staging")

    def test_app_builds_context_from_environment(self, monkeypatch) -> None:
        monkeypatch.setattr("feedscape.api.main.settings.environment", Environment.TEST)
        app = create_app(autostart=False)

        with TestClient(app):
            cfg = app.state.context.settings
            assert cfg.environment == Environment.TEST
            assert app.state.context.sources == []
            assert app.state.context.adapter.max_retries == 0
