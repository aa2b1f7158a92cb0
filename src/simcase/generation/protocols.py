"""Text provider protocol: the contract every generation backend implements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from simcase.models import GenerationRequest


@dataclass
class ProviderReply:
    """Text returned by a single provider call."""

    text: str
    model: str
    finish_reason: str = "finished"


@runtime_checkable
class ITextProvider(Protocol):
    """Protocol for generative text backends.

    ``complete`` raises a :class:`~simcase.exceptions.GenerationError`
    subclass on failure; the resilient client decides whether to retry,
    switch provider or give up.
    """

    name: str
    model: str

    def check_credentials(self) -> None:
        """Raise ``MissingCredentialError`` when the provider cannot authenticate."""
        ...

    async def complete(self, request: GenerationRequest) -> ProviderReply:
        """Run one completion for ``request``."""
        ...
