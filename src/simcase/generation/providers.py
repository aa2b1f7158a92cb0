"""LiteLLM-backed text provider.

Supports ``anthropic/``, ``openai/``, ``perplexity/`` and ``ollama/`` model
prefixes transparently; upstream failures are mapped onto the
``GenerationError`` hierarchy by HTTP status.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from simcase.core.config import GenerationConfig
from simcase.exceptions import (
    GenerationError,
    GenerationTimeoutError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitedError,
    UpstreamRequestError,
    UpstreamServerError,
)
from simcase.generation.protocols import ProviderReply
from simcase.models import GenerationRequest

log = logging.getLogger(__name__)

# Providers that use local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama"})


def provider_name_for(model: str, default: str) -> str:
    """``"anthropic/claude-3"`` -> ``"anthropic"``; unprefixed models use ``default``."""
    if "/" in model:
        return model.split("/", 1)[0]
    return default


def map_upstream_error(exc: Exception, provider: str) -> GenerationError:
    """Translate a LiteLLM (or transport) exception into a ``GenerationError``."""
    from litellm.exceptions import Timeout as LiteLLMTimeout

    if isinstance(exc, GenerationError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, LiteLLMTimeout)):
        return GenerationTimeoutError(f"{provider} request timed out: {exc}", status_code=408)

    status = getattr(exc, "status_code", None)
    if not isinstance(status, int):
        # Connection resets and other transport failures carry no status.
        return UpstreamServerError(f"{provider} transport error: {exc}")
    if status == 429:
        return RateLimitedError(f"{provider} rate limit exceeded: {exc}", status_code=status)
    if status in (401, 403):
        return MissingCredentialError(f"{provider} rejected the API key: {exc}", status_code=status)
    if status == 408:
        return GenerationTimeoutError(f"{provider} request timed out: {exc}", status_code=status)
    if status >= 500:
        return UpstreamServerError(f"{provider} server error {status}: {exc}", status_code=status)
    return UpstreamRequestError(f"{provider} rejected the request ({status}): {exc}", status_code=status)


def _reply_text(response: Any, provider: str) -> str:
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, KeyError, TypeError) as e:
        raise MalformedResponseError(f"{provider} response has no message content: {e}") from e
    if not isinstance(content, str):
        raise MalformedResponseError(f"{provider} response content is {type(content).__name__}, expected text")
    return content


class LiteLLMProvider:
    """One model reached through ``litellm.acompletion()``."""

    def __init__(self, model: str, *, api_key: str = "", name: str | None = None) -> None:
        self.model = model
        self.name = name or provider_name_for(model, "litellm")
        self._api_key = api_key

    def __repr__(self) -> str:
        return f"LiteLLMProvider(name={self.name!r}, model={self.model!r})"

    @property
    def requires_key(self) -> bool:
        return self.name not in _NO_KEY_PROVIDERS

    def check_credentials(self) -> None:
        if self.requires_key and not self._api_key:
            raise MissingCredentialError(f"No API key configured for provider '{self.name}'")

    async def complete(self, request: GenerationRequest) -> ProviderReply:
        """Single completion; the caller owns the timeout race."""
        from litellm import acompletion

        messages: list[dict[str, Any]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "timeout": request.timeout,
            # Retries are owned by ResilientGenerationClient.
            "num_retries": 0,
        }
        if self._api_key:
            kwargs["api_key"] = self._api_key

        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            raise map_upstream_error(e, self.name) from e

        text = _reply_text(response, self.name)
        reason = getattr(response.choices[0], "finish_reason", None)
        model = getattr(response, "model", None)
        return ProviderReply(
            text=text,
            model=model if isinstance(model, str) and model else self.model,
            finish_reason="max_output_reached" if reason == "length" else "finished",
        )


def build_providers(config: GenerationConfig) -> list[LiteLLMProvider]:
    """Primary provider followed by the optional fallback provider."""
    providers = [LiteLLMProvider(config.model, api_key=config.api_key, name=config.provider)]
    if config.fallback_model:
        providers.append(LiteLLMProvider(
            config.fallback_model,
            api_key=config.fallback_api_key or config.api_key,
        ))
        log.debug("Generation fallback provider: %s", providers[-1])
    return providers
