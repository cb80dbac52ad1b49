"""Tests for settings, the error taxonomy and logging setup."""
import logging

import structlog

from bd_scoring.config import Settings, get_settings
from bd_scoring.errors import (
    CalculationError,
    ConfigurationError,
    InvalidDataError,
    MissingRequiredFieldError,
    ScoringError,
)
from bd_scoring.logging_config import configure_logging


class TestSettings:
    def test_defaults(self, settings):
        assert settings.cache_ttl_scoring == 1800
        assert settings.model_accuracy == 0.85
        assert settings.cache_eviction_ratio == 0.8

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SCORING", "60")
        monkeypatch.setenv("THRESHOLD_SCORING", "1.5")
        settings = Settings(_env_file=None)
        assert settings.cache_ttl_scoring == 60
        assert settings.performance_thresholds()["scoring"] == 1.5

    def test_cache_namespaces(self, settings):
        namespaces = settings.cache_namespaces()
        assert namespaces["scoring"] == (500, 1800)
        assert namespaces["default"] == (1000, 300)
        assert set(namespaces) == {"default", "comparables", "company_data", "reports", "scoring"}

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestErrors:
    def test_str_includes_kind(self):
        assert str(InvalidDataError("no programs")) == "invalid_data: no programs"
        assert str(ConfigurationError("bad weights")) == "configuration_error: bad weights"
        assert str(CalculationError("overflow")) == "calculation_error: overflow"

    def test_missing_field_is_invalid_data(self):
        error = MissingRequiredFieldError("financials.burn_rate")
        assert isinstance(error, InvalidDataError)
        assert error.field == "financials.burn_rate"
        assert error.reason == "Required field 'financials.burn_rate' is missing"

    def test_hierarchy(self):
        for cls in (InvalidDataError, CalculationError, ConfigurationError):
            assert issubclass(cls, ScoringError)


class TestLogging:
    def test_configure_logging(self):
        configure_logging("debug")
        assert structlog.is_configured()
        structlog.get_logger("bd_scoring.test").info("configured", check=True)
    def test_level_defaults_to_settings(self, monkeypatch):
        calls = []
        monkeypatch.setattr("logging.basicConfig", lambda **kwargs: calls.append(kwargs))
        monkeypatch.setenv("LOG_LEVEL", "warning")
        get_settings.cache_clear()
        try:
            configure_logging()
        finally:
            get_settings.cache_clear()
        assert calls[0]["level"] == logging.WARNING
