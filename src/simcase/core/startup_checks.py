"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from simcase.core.config import AppSettings

log = logging.getLogger(__name__)

# Providers that use local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama"})


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig."""
    _check_retry_limits(settings)
    _check_api_key(settings)


def _check_retry_limits(settings: AppSettings) -> None:
    """Reject backoff settings that could never allow a single attempt to finish."""
    gen = settings.generation
    if gen.retry_max_delay < gen.retry_base_delay:
        raise ValueError(
            "SIMCASE_GENERATION_RETRY_MAX_DELAY must be >= SIMCASE_GENERATION_RETRY_BASE_DELAY "
            f"(got {gen.retry_max_delay} < {gen.retry_base_delay})."
        )
    if gen.max_total_attempts > gen.max_retries + 1 and not gen.fallback_model:
        log.info(
            "max_total_attempts=%d exceeds max_retries+1=%d with no fallback model; "
            "the retry ceiling will be reached first",
            gen.max_total_attempts, gen.max_retries + 1,
        )


def _check_api_key(settings: AppSettings) -> None:
    """Warn when a keyed provider has no key; generation will fall back to offline cases."""
    gen = settings.generation
    if gen.test_mode or gen.provider in _NO_KEY_PROVIDERS:
        return
    if not gen.api_key:
        log.warning(
            "SIMCASE_GENERATION_API_KEY is not set for provider '%s'. "
            "Generation requests will fail with MissingCredentialError and "
            "fall back to synthesized cases.",
            gen.provider,
        )
