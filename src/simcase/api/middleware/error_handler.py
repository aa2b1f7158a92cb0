"""Global exception handlers mapping domain exceptions to HTTP responses.

Responses carry the short ``user_message`` only; upstream detail is logged.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from simcase.exceptions import (
    AttemptsExhaustedError,
    GenerationError,
    GenerationTimeoutError,
    MissingCredentialError,
    RateLimitedError,
    SimCaseError,
)

log = logging.getLogger(__name__)


def _generation_response(status_code: int, kind: str, exc: GenerationError) -> JSONResponse:
    log.warning("Generation request failed with %d (%s): %s", status_code, kind, exc)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.user_message, "type": kind, "retryable": exc.retryable},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(RateLimitedError)
    async def handle_rate_limited(request: Request, exc: RateLimitedError) -> JSONResponse:
        return _generation_response(429, "rate_limited", exc)

    @app.exception_handler(GenerationTimeoutError)
    async def handle_timeout(request: Request, exc: GenerationTimeoutError) -> JSONResponse:
        return _generation_response(504, "timeout", exc)

    @app.exception_handler(AttemptsExhaustedError)
    async def handle_attempts_exhausted(request: Request, exc: AttemptsExhaustedError) -> JSONResponse:
        # Retries that all timed out surface as a timeout.
        if isinstance(exc.__cause__, GenerationTimeoutError):
            return _generation_response(504, "timeout", exc.__cause__)
        return _generation_response(502, "generation_error", exc)

    @app.exception_handler(MissingCredentialError)
    async def handle_missing_credential(request: Request, exc: MissingCredentialError) -> JSONResponse:
        return _generation_response(503, "missing_credential", exc)

    @app.exception_handler(GenerationError)
    async def handle_generation_error(request: Request, exc: GenerationError) -> JSONResponse:
        return _generation_response(502, "generation_error", exc)

    @app.exception_handler(SimCaseError)
    async def handle_generic_error(request: Request, exc: SimCaseError) -> JSONResponse:
        log.error("Unhandled simcase error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal error.", "type": "simcase_error", "retryable": False},
        )
