"""Resilient generation client: timeout racing, bounded backoff, provider fallback.

Retry state travels in the frozen :class:`GenerationRequest`; each attempt
builds the next request with :meth:`GenerationRequest.next_attempt`.

Policy:

- Timeout or 5xx: back off ``min(base * 2**retry_count, max_delay)`` and
  retry with the timeout grown by ``timeout_growth``.
- 429: switch to the next provider when one exists, else surface
  ``RateLimitedError``.
- Anything else non-retryable propagates on the first failure.
- ``max_retries`` and ``max_total_attempts`` both bound the loop; hitting
  either raises ``AttemptsExhaustedError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Sequence

from simcase.core.config import GenerationConfig
from simcase.exceptions import (
    AttemptsExhaustedError,
    GenerationError,
    GenerationTimeoutError,
    RateLimitedError,
)
from simcase.generation.protocols import ITextProvider
from simcase.generation.providers import build_providers
from simcase.models import GenerationRequest, GenerationResult

log = logging.getLogger(__name__)

TEST_PROVIDER = "test"

Sleep = Callable[[float], Awaitable[None]]


class ResilientGenerationClient:
    """Calls an ordered chain of text providers under a shared attempt ceiling."""

    def __init__(
        self,
        config: GenerationConfig,
        providers: Sequence[ITextProvider] | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self._providers = list(providers) if providers is not None else build_providers(config)
        if not self._providers:
            raise ValueError("ResilientGenerationClient needs at least one provider")
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: GenerationConfig) -> ResilientGenerationClient:
        return cls(config)

    @property
    def providers(self) -> list[ITextProvider]:
        return list(self._providers)

    def new_request(self, prompt: str, *, system: str | None = None) -> GenerationRequest:
        """First-attempt request carrying the configured defaults."""
        return GenerationRequest(
            prompt=prompt,
            system=system,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            timeout=self._config.timeout,
            test_mode=self._config.test_mode,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Return generated text or raise a ``GenerationError`` subclass."""
        if request.test_mode or self._config.test_mode:
            return self._test_result(request)

        while True:
            provider = self._providers[min(request.provider_index, len(self._providers) - 1)]
            attempt = request.total_attempts + 1
            started = time.monotonic()
            try:
                provider.check_credentials()
                reply = await asyncio.wait_for(provider.complete(request), timeout=request.timeout)
            except asyncio.TimeoutError:
                error: GenerationError = GenerationTimeoutError(
                    f"{provider.name} did not respond within {request.timeout:.1f}s",
                    status_code=408,
                )
            except GenerationError as e:
                error = e
            else:
                self._log_attempt(attempt, provider, started, "success")
                return GenerationResult(text=reply.text, provider=provider.name, model=reply.model)

            self._log_attempt(attempt, provider, started, type(error).__name__, error)
            request, delay = self._plan_next(request, error)
            if delay > 0:
                await self._sleep(delay)

    def _plan_next(self, request: GenerationRequest, error: GenerationError) -> tuple[GenerationRequest, float]:
        """Next request and the delay before it, or raise when the error is final."""
        attempts_made = request.total_attempts + 1
        ceiling_reached = attempts_made >= self._config.max_total_attempts

        if isinstance(error, RateLimitedError):
            next_index = request.provider_index + 1
            if next_index < len(self._providers) and not ceiling_reached:
                log.warning(
                    "Rate limited by %s; switching to %s",
                    self._providers[request.provider_index].name, self._providers[next_index].name,
                )
                return request.next_attempt(retry=False, provider_index=next_index), 0.0
            raise error

        if not error.retryable:
            raise error

        if request.retry_count >= self._config.max_retries or ceiling_reached:
            raise AttemptsExhaustedError(
                f"Generation failed after {attempts_made} attempt(s): {error}",
                attempts=attempts_made,
                last_error=str(error),
            ) from error

        delay = min(
            self._config.retry_base_delay * 2 ** request.retry_count,
            self._config.retry_max_delay,
        )
        log.warning(
            "Generation retry %d/%d: %s (wait=%.1fs)",
            request.retry_count + 1, self._config.max_retries, error, delay,
        )
        return request.next_attempt(retry=True, timeout_growth=self._config.timeout_growth), delay

    def _log_attempt(
        self,
        attempt: int,
        provider: ITextProvider,
        started: float,
        outcome: str,
        error: Exception | None = None,
    ) -> None:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        extra = {
            "attempt": attempt,
            "max_attempts": self._config.max_total_attempts,
            "provider": provider.name,
            "elapsed_ms": elapsed_ms,
            "outcome": outcome,
        }
        if error is None:
            log.info("Generation attempt %d succeeded in %dms", attempt, elapsed_ms, extra=extra)
        else:
            log.warning("Generation attempt %d failed in %dms: %s", attempt, elapsed_ms, error, extra=extra)

    def _test_result(self, request: GenerationRequest) -> GenerationResult:
        provider = self._providers[0].name
        log.info("Generation test mode: no upstream call made", extra={"provider": TEST_PROVIDER, "outcome": "test"})
        return GenerationResult(
            text=(
                f'This is a test response to: "{request.prompt}"\n\n'
                "No actual AI API was called. This is a mock response for testing purposes."
            ),
            provider=TEST_PROVIDER,
            model=f"{provider}-test-mode",
        )
