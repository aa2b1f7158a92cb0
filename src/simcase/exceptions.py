"""Exception hierarchy for simcase.

Only the generation layer raises. Structuring, classification and parameter
mapping are total functions and represent missing data with empty values.
"""

from __future__ import annotations


class SimCaseError(Exception):
    """Base exception for all simcase errors."""


class GenerationError(SimCaseError):
    """Raised when the generative text service cannot produce a result.

    ``user_message`` is the short text safe to show an end user; the full
    message (``str(exc)``) may carry upstream detail and is only logged.
    """

    retryable: bool = False
    user_message: str = "Case generation failed. Please try again."

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryableGenerationError(GenerationError):
    """Timeouts and 5xx responses: retried with exponential backoff."""

    retryable = True


class GenerationTimeoutError(RetryableGenerationError):
    """The upstream call did not finish before its timeout."""

    user_message = "The case generator took too long to respond. Please try again."


class UpstreamServerError(RetryableGenerationError):
    """The upstream service answered with a 5xx status or dropped the connection."""

    user_message = "The case generator is temporarily unavailable. Please try again."


class RateLimitedError(GenerationError):
    """The upstream service answered 429; surfaced distinctly, not backed off."""

    retryable = True
    user_message = "The case generator is busy right now. Please wait a moment and retry."


class NonRetryableGenerationError(GenerationError):
    """Permanent failures that propagate immediately."""


class MissingCredentialError(NonRetryableGenerationError):
    """No API key configured for the provider, or the key was rejected."""

    user_message = "The case generator is not configured. Contact an administrator."


class MalformedResponseError(NonRetryableGenerationError):
    """The upstream payload did not contain the expected text field."""

    user_message = "The case generator returned an unreadable response. Please try again."


class UpstreamRequestError(NonRetryableGenerationError):
    """The upstream rejected the request with a 4xx status other than 429."""


class AttemptsExhaustedError(GenerationError):
    """Retry or total-attempt ceiling reached; carries the last underlying error."""

    retryable = True

    def __init__(self, message: str, *, attempts: int, last_error: str = "") -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


__all__ = [
    "SimCaseError",
    "GenerationError",
    "RetryableGenerationError",
    "GenerationTimeoutError",
    "UpstreamServerError",
    "RateLimitedError",
    "NonRetryableGenerationError",
    "MissingCredentialError",
    "MalformedResponseError",
    "UpstreamRequestError",
    "AttemptsExhaustedError",
]
