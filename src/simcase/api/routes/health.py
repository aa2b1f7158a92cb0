"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: always returns 200 if the process is up."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    """Readiness probe: reports which generation mode the service runs in."""
    settings = request.app.state.settings
    mode = "test" if settings.generation.test_mode else settings.generation.provider
    return {"status": "ready", "generation": mode}
