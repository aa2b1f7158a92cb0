"""Tests for the HTTP surface: routes and exception-to-status mapping."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from simcase.api.middleware.error_handler import register_error_handlers
from simcase.api.routes import cases, health, parameters
from simcase.core.config import AppSettings
from simcase.exceptions import (
    AttemptsExhaustedError,
    GenerationTimeoutError,
    MissingCredentialError,
    RateLimitedError,
    SimCaseError,
)
from simcase.generation.client import ResilientGenerationClient
from simcase.parameters.models import ParameterQuestion
from simcase.services.case_service import CaseGenerationService
from tests.fakes.fake_provider import FakeTextProvider, SleepRecorder


def _build_app(settings: AppSettings, service: Any) -> FastAPI:
    """Build a FastAPI app with the production routers and handlers."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        app.state.settings = settings
        app.state.case_service = service
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(cases.router, prefix="/api")
    app.include_router(parameters.router, prefix="/api")
    return app


def _real_service(settings: AppSettings, provider: FakeTextProvider) -> CaseGenerationService:
    client = ResilientGenerationClient(settings.generation, [provider], sleep=SleepRecorder())
    return CaseGenerationService(settings, client=client)


class _RaisingService:
    """Service stub whose generate_case always raises ``error``."""

    def __init__(self, error: Exception) -> None:
        self._error = error

    async def generate_case(self, params: Any, **kwargs: Any) -> Any:
        raise self._error


# ── Health ───────────────────────────────────────────────────────────


class TestHealth:
    def test_health(self, settings: AppSettings) -> None:
        with TestClient(_build_app(settings, None)) as client:
            resp = client.get("/health")
            assert resp.status_code == 200
            assert resp.json() == {"status": "ok"}

    def test_ready_reports_provider(self, settings: AppSettings) -> None:
        with TestClient(_build_app(settings, None)) as client:
            assert client.get("/ready").json() == {"status": "ready", "generation": "anthropic"}

    def test_ready_reports_test_mode(self, settings: AppSettings) -> None:
        test_settings = AppSettings(generation=settings.generation.model_copy(update={"test_mode": True}))
        with TestClient(_build_app(test_settings, None)) as client:
            assert client.get("/ready").json()["generation"] == "test"


# ── Cases ────────────────────────────────────────────────────────────


class TestCaseRoutes:
    def test_structure(self, settings: AppSettings, copd_case_text: str) -> None:
        app = _build_app(settings, _real_service(settings, FakeTextProvider()))
        with TestClient(app) as client:
            resp = client.post("/api/cases/structure", json={"raw_text": copd_case_text})
            assert resp.status_code == 200
            body = resp.json()
            assert body["title"].startswith("Acute Respiratory Distress")
            assert len(body["overview"]["learning_objectives"]) == 4
            assert len(body["findings"]["vital_signs"]) == 6

    def test_structure_requires_raw_text(self, settings: AppSettings) -> None:
        app = _build_app(settings, _real_service(settings, FakeTextProvider()))
        with TestClient(app) as client:
            assert client.post("/api/cases/structure", json={"title": "x"}).status_code == 422

    def test_generate(self, settings: AppSettings, copd_case_text: str) -> None:
        provider = FakeTextProvider("anthropic", default_text=copd_case_text)
        app = _build_app(settings, _real_service(settings, provider))
        with TestClient(app) as client:
            resp = client.post(
                "/api/cases/generate",
                json={"parameters": {"complexity": {"primary_condition": "COPD exacerbation"}}},
            )
            body = resp.json()
            assert resp.status_code == 200
            assert body["degraded"] is False
            assert body["provider"] == "anthropic"
            assert "Primary Condition: COPD exacerbation" in provider.calls[0].prompt

    def test_generate_degraded(self, settings: AppSettings) -> None:
        provider = FakeTextProvider(script=[RateLimitedError("busy", status_code=429)])
        app = _build_app(settings, _real_service(settings, provider))
        with TestClient(app) as client:
            body = client.post("/api/cases/generate", json={}).json()
            assert body["degraded"] is True
            assert body["retryable"] is True
            assert body["user_message"] == RateLimitedError.user_message
            assert body["document"]["title"] == "Simulation Case: Medical Condition"

    def test_generate_without_fallback_maps_error(self, settings: AppSettings) -> None:
        provider = FakeTextProvider(script=[RateLimitedError("busy", status_code=429)])
        app = _build_app(settings, _real_service(settings, provider))
        with TestClient(app) as client:
            resp = client.post("/api/cases/generate", json={"allow_fallback": False})
            assert resp.status_code == 429
            assert resp.json()["type"] == "rate_limited"


# ── Parameters ───────────────────────────────────────────────────────


class TestParameterRoutes:
    def test_map(self, settings: AppSettings, parameter_questions: list[ParameterQuestion]) -> None:
        app = _build_app(settings, _real_service(settings, FakeTextProvider()))
        payload = {
            "questions": [q.model_dump() for q in parameter_questions],
            "selections": {"q1": "q1-2", "q3": "q3-2", "q4": "q4-1"},
        }
        with TestClient(app) as client:
            resp = client.post("/api/parameters/map", json=payload)
            assert resp.status_code == 200
            oxygen = resp.json()["recommended_vital_signs"]["oxygen_saturation"]
            assert (oxygen["min"], oxygen["max"]) == (74, 88)


# ── Error mapping ────────────────────────────────────────────────────


class TestErrorMapping:
    @pytest.mark.parametrize(
        "error,status,kind",
        [
            (RateLimitedError("429 from upstream", status_code=429), 429, "rate_limited"),
            (GenerationTimeoutError("took 30s"), 504, "timeout"),
            (MissingCredentialError("no key"), 503, "missing_credential"),
            (AttemptsExhaustedError("gave up", attempts=3), 502, "generation_error"),
        ],
    )
    def test_generation_errors(self, settings: AppSettings, error: Exception, status: int, kind: str) -> None:
        with TestClient(_build_app(settings, _RaisingService(error))) as client:
            resp = client.post("/api/cases/generate", json={})
            assert resp.status_code == status
            body = resp.json()
            assert body["type"] == kind
            assert body["error"] == error.user_message
            assert body["retryable"] == error.retryable

    def test_exhausted_timeouts_map_to_timeout(self, settings: AppSettings) -> None:
        cause = GenerationTimeoutError("took 30s", status_code=408)
        error = AttemptsExhaustedError("gave up", attempts=3)
        error.__cause__ = cause
        with TestClient(_build_app(settings, _RaisingService(error))) as client:
            resp = client.post("/api/cases/generate", json={})
            assert resp.status_code == 504
            assert resp.json() == {"error": cause.user_message, "type": "timeout", "retryable": True}

    def test_provider_timeouts_through_retries(self, settings: AppSettings) -> None:
        provider = FakeTextProvider(script=[GenerationTimeoutError("slow", status_code=408)] * 10)
        app = _build_app(settings, _real_service(settings, provider))
        with TestClient(app) as client:
            resp = client.post("/api/cases/generate", json={"allow_fallback": False})
            assert resp.status_code == 504
            assert resp.json()["type"] == "timeout"

    def test_upstream_detail_not_leaked(self, settings: AppSettings) -> None:
        error = MissingCredentialError("key sk-secret rejected")
        with TestClient(_build_app(settings, _RaisingService(error))) as client:
            assert "sk-secret" not in client.post("/api/cases/generate", json={}).text

    def test_generic_error(self, settings: AppSettings) -> None:
        with TestClient(_build_app(settings, _RaisingService(SimCaseError("bug")))) as client:
            resp = client.post("/api/cases/generate", json={})
            assert resp.status_code == 500
            assert resp.json() == {"error": "Internal error.", "type": "simcase_error", "retryable": False}
