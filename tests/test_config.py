"""Tests for runtime settings.

This module validates the Settings Pydantic model in eemaps.core.config:
default values, the ``EEMAPS_`` environment prefix, validation bounds and
get_settings caching.

See Also:
    - eemaps/core/config.py for the Settings implementation.
"""

from __future__ import annotations

import pydantic
import pytest

from eemaps.core import config


def test_settings_defaults() -> None:
    """Test that Settings has expected default values."""
    settings = config.Settings()
    assert settings.ee_project is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 0
    assert settings.default_lat == -14.235004
    assert settings.default_lon == -51.92528
    assert settings.default_zoom == 4
    assert settings.open_browser is False
    assert settings.bridge_timeout_seconds == 30.0


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that EEMAPS_-prefixed variables override defaults."""
    monkeypatch.setenv("EEMAPS_EE_PROJECT", "my-gcp-project")
    monkeypatch.setenv("EEMAPS_PORT", "8765")
    monkeypatch.setenv("EEMAPS_OPEN_BROWSER", "true")
    settings = config.Settings()
    assert settings.ee_project == "my-gcp-project"
    assert settings.port == 8765
    assert settings.open_browser is True


def test_settings_reject_invalid_port() -> None:
    """Test that an out-of-range port is rejected."""
    with pytest.raises(pydantic.ValidationError):
        config.Settings(port=70000)


def test_settings_reject_non_positive_timeout() -> None:
    """Test that bridge timeouts must be positive."""
    with pytest.raises(pydantic.ValidationError):
        config.Settings(bridge_timeout_seconds=0)


def test_get_settings_cached() -> None:
    """Test that get_settings returns cached instance."""
    settings1 = config.get_settings()
    settings2 = config.get_settings()
    assert settings1 is settings2
