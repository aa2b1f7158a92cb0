"""Tests for startup validation checks."""

from __future__ import annotations

import logging

import pytest

from simcase.core.config import AppSettings, GenerationConfig
from simcase.core.startup_checks import validate_settings


def _warnings(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]


class TestRetryLimits:
    def test_rejects_max_delay_below_base(self):
        settings = AppSettings(generation=GenerationConfig(api_key="k", retry_base_delay=5.0, retry_max_delay=1.0))
        with pytest.raises(ValueError, match="RETRY_MAX_DELAY"):
            validate_settings(settings)

    def test_equal_delays_accepted(self):
        settings = AppSettings(generation=GenerationConfig(api_key="k", retry_base_delay=2.0, retry_max_delay=2.0))
        validate_settings(settings)

    def test_unreachable_total_ceiling_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="simcase.core.startup_checks")
        settings = AppSettings(generation=GenerationConfig(api_key="k", max_retries=0, max_total_attempts=3))
        validate_settings(settings)
        assert any("max_total_attempts=3" in r.getMessage() for r in caplog.records)


class TestApiKeyCheck:
    """A missing key warns instead of failing: requests degrade to fallback cases."""

    def test_warns_without_key(self, caplog):
        caplog.set_level(logging.WARNING, logger="simcase.core.startup_checks")
        validate_settings(AppSettings(generation=GenerationConfig(provider="openai", api_key="")))
        assert any("SIMCASE_GENERATION_API_KEY" in m for m in _warnings(caplog))

    def test_quiet_with_key(self, caplog):
        caplog.set_level(logging.WARNING, logger="simcase.core.startup_checks")
        validate_settings(AppSettings(generation=GenerationConfig(provider="openai", api_key="sk-real")))
        assert _warnings(caplog) == []

    def test_ollama_needs_no_key(self, caplog):
        """Ollama is local, no API key needed."""
        caplog.set_level(logging.WARNING, logger="simcase.core.startup_checks")
        validate_settings(AppSettings(generation=GenerationConfig(provider="ollama", api_key="")))
        assert _warnings(caplog) == []

    def test_test_mode_needs_no_key(self, caplog):
        caplog.set_level(logging.WARNING, logger="simcase.core.startup_checks")
        validate_settings(AppSettings(generation=GenerationConfig(api_key="", test_mode=True)))
        assert _warnings(caplog) == []
