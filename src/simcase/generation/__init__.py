"""Generative text layer.

Usage::

    from simcase.generation import ResilientGenerationClient

    client = ResilientGenerationClient.from_config(settings.generation)
    result = await client.generate(client.new_request(prompt, system=system))
"""

from __future__ import annotations

from simcase.generation.client import ResilientGenerationClient
from simcase.generation.fallback import build_fallback_case
from simcase.generation.protocols import ITextProvider, ProviderReply
from simcase.generation.providers import LiteLLMProvider, build_providers, map_upstream_error

__all__ = [
    "ITextProvider",
    "LiteLLMProvider",
    "ProviderReply",
    "ResilientGenerationClient",
    "build_fallback_case",
    "build_providers",
    "map_upstream_error",
]
