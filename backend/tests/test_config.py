"""
Tests for engine settings.
"""

from kpi_dashboard.core.config import Settings, get_settings, settings


def test_defaults():
    """Test the documented default limits."""
    defaults = Settings()
    assert defaults.TOP_CATEGORIES == 12
    assert defaults.TOP_CORRELATIONS == 8
    assert defaults.GROWTH_WINDOW_DAYS == 30
    assert defaults.DATE_SNIFF_THRESHOLD == 0.6


def test_environment_overrides(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("TOP_CATEGORIES", "5")
    monkeypatch.setenv("CURRENCY_SYMBOL", "$")

    overridden = Settings()

    assert overridden.TOP_CATEGORIES == 5
    assert overridden.CURRENCY_SYMBOL == "$"


def test_get_settings_is_cached():
    """Test that the module-level settings are the cached instance."""
    assert get_settings() is get_settings()
    assert settings is get_settings()
