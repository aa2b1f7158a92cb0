"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from simcase.api.middleware.error_handler import register_error_handlers
from simcase.api.routes import cases, health, parameters
from simcase.core.config import APIConfig, AppSettings
from simcase.core.startup_checks import validate_settings
from simcase.hooks import setup_logging
from simcase.services.case_service import CaseGenerationService


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("simcase")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup/shutdown lifecycle."""
    settings = AppSettings()
    validate_settings(settings)
    setup_logging(settings.observability)

    app.state.settings = settings
    app.state.case_service = CaseGenerationService(settings)
    yield


_api_config = APIConfig()

app = FastAPI(
    title=_api_config.title,
    description=_api_config.description,
    version=_get_version(),
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(cases.router, prefix="/api")
app.include_router(parameters.router, prefix="/api")
