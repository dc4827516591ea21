"""Configuration tests."""

import pytest

from core.config import Settings, get_settings
from core.hash import Algorithm


def test_settings_defaults():
    """Test default settings load correctly."""
    settings = Settings()

    assert settings.memoization_enabled is True
    assert settings.maximum_component_depth == 50
    assert settings.fingerprint_algorithm == Algorithm.XXHASH64
    assert settings.reactive_wrapping is True
    assert settings.cache_version == "v1"
    assert "picsum.photos" in settings.approved_image_domains


def test_settings_from_environment(monkeypatch):
    """Environment variables use the SWIFTUI_ prefix."""
    monkeypatch.setenv("SWIFTUI_MAXIMUM_COMPONENT_DEPTH", "7")
    monkeypatch.setenv("SWIFTUI_FINGERPRINT_ALGORITHM", "sha256")
    monkeypatch.setenv("SWIFTUI_LOG_LEVEL", "warning")

    settings = Settings()

    assert settings.maximum_component_depth == 7
    assert settings.fingerprint_algorithm == Algorithm.SHA256
    assert settings.log_level == "WARNING"


def test_settings_validation():
    """Test settings validation."""
    assert Settings(fragment_cache_size=10).fragment_cache_size == 10

    with pytest.raises(Exception):
        Settings(maximum_component_depth=0)

    with pytest.raises(Exception):
        Settings(fragment_cache_ttl=-1)


def test_get_settings_is_cached():
    """get_settings returns one shared instance."""
    assert get_settings() is get_settings()
