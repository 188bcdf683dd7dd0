from __future__ import annotations

import importlib

import pytest

import pagewright.config.settings as settings_module


@pytest.fixture
def reload_settings(monkeypatch):
    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(settings_module).Settings()

    yield _reload
    monkeypatch.undo()
    importlib.reload(settings_module)


class TestSettings:
    def test_defaults(self, reload_settings, monkeypatch):
        for key in ("PAGEWRIGHT_TIMEOUT", "PAGEWRIGHT_POLL_INTERVAL", "BROWSER", "CAPTURE_URL"):
            monkeypatch.delenv(key, raising=False)
        config = reload_settings()

        assert config.timeout == 10
        assert config.poll_interval == 0.5
        assert config.browser == "chromium"
        assert config.capture_pool_size == 4
        assert config.capture_drain_timeout == 120

    def test_environment_overrides(self, reload_settings):
        config = reload_settings(
            PAGEWRIGHT_TIMEOUT="3",
            PAGEWRIGHT_FRAMEWORK_IDLE="off",
            HEADLESS="false",
            BROWSER="webkit",
        )

        assert config.timeout == 3.0
        assert config.framework_idle is False
        assert config.headless is False
        assert config.browser == "webkit"

    def test_capture_needs_url_and_system_under_test(self, reload_settings, monkeypatch):
        monkeypatch.delenv("SUT_VERSION", raising=False)
        config = reload_settings(CAPTURE_URL="http://capture.test", SUT_NAME="shop")
        assert config.capture_required is False

        config.sut_version = "1.0"
        assert config.capture_required is True
