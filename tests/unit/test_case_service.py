"""Tests for the case generation service."""

from __future__ import annotations

import pytest

from simcase.core.config import AppSettings, StructuringConfig
from simcase.exceptions import MissingCredentialError, RateLimitedError, UpstreamServerError
from simcase.generation.client import ResilientGenerationClient
from simcase.parameters.models import (
    CaseParameters,
    LearningObjective,
    PatientDemographics,
    PresentationComplexity,
)
from simcase.prompts.case_generation import CASE_SYSTEM_PROMPT
from simcase.services.case_service import FALLBACK_PROVIDER, CaseGenerationService
from tests.fakes.fake_provider import FakeTextProvider, SleepRecorder


def _service(settings: AppSettings, provider: FakeTextProvider) -> CaseGenerationService:
    client = ResilientGenerationClient(settings.generation, [provider], sleep=SleepRecorder())
    return CaseGenerationService(settings, client=client)


@pytest.fixture
def copd_params() -> CaseParameters:
    return CaseParameters(
        demographics=PatientDemographics(age_range="71+ years", gender="Male"),
        complexity=PresentationComplexity(
            primary_condition="COPD exacerbation",
            primary_condition_severity="Severe",
            comorbidities=["Hypertension"],
        ),
        learning_objectives=[LearningObjective(text="Titrate oxygen safely")],
    )


class TestGenerateCase:
    @pytest.mark.asyncio
    async def test_generated_text_is_structured(
        self, settings: AppSettings, copd_case_text: str, copd_params: CaseParameters
    ) -> None:
        provider = FakeTextProvider("anthropic", default_text=copd_case_text)
        outcome = await _service(settings, provider).generate_case(copd_params)

        assert not outcome.degraded
        assert outcome.provider == "anthropic"
        assert outcome.model == "fake-model"
        assert outcome.document.title.startswith("Acute Respiratory Distress")
        assert len(outcome.document.findings.vital_signs) == 6

    @pytest.mark.asyncio
    async def test_prompt_and_system(self, settings: AppSettings, copd_params: CaseParameters) -> None:
        provider = FakeTextProvider()
        await _service(settings, provider).generate_case(copd_params)

        request = provider.calls[0]
        assert request.system == CASE_SYSTEM_PROMPT
        assert "- Primary Condition: COPD exacerbation" in request.prompt
        assert "1. Titrate oxygen safely" in request.prompt

    @pytest.mark.asyncio
    async def test_title_override(
        self, settings: AppSettings, copd_case_text: str, copd_params: CaseParameters
    ) -> None:
        provider = FakeTextProvider(default_text=copd_case_text)
        outcome = await _service(settings, provider).generate_case(copd_params, title="COPD Sim 1")
        assert outcome.document.title == "COPD Sim 1"


class TestFallback:
    @pytest.mark.asyncio
    async def test_missing_credentials_degrade(self, settings: AppSettings, copd_params: CaseParameters) -> None:
        provider = FakeTextProvider(credentials_error=MissingCredentialError("no key"))
        outcome = await _service(settings, provider).generate_case(copd_params)

        assert outcome.degraded
        assert outcome.provider == FALLBACK_PROVIDER
        assert outcome.error_type == "MissingCredentialError"
        assert outcome.user_message == MissingCredentialError.user_message
        assert not outcome.retryable
        assert outcome.document.title == "Simulation Case: COPD exacerbation"

    @pytest.mark.asyncio
    async def test_fallback_case_fills_every_bucket(
        self, settings: AppSettings, copd_params: CaseParameters
    ) -> None:
        provider = FakeTextProvider(script=[RateLimitedError("busy", status_code=429)])
        outcome = await _service(settings, provider).generate_case(copd_params)
        doc = outcome.document

        assert outcome.retryable
        assert doc.overview.learning_objectives == ["Titrate oxygen safely"]
        assert doc.background.patient.name == "Sarah Johnson"
        assert doc.background.patient.age == "71+ years"
        assert len(doc.findings.vital_signs) == 6
        assert len(doc.care_plan.progression_scenarios) == 3
        assert len(doc.instruction.debrief_questions) == 5
        assert doc.all_dynamic_sections() == []

    @pytest.mark.asyncio
    async def test_exhausted_retries_degrade(self, settings: AppSettings, copd_params: CaseParameters) -> None:
        provider = FakeTextProvider(script=[UpstreamServerError("down") for _ in range(3)])
        outcome = await _service(settings, provider).generate_case(copd_params)
        assert outcome.degraded
        assert outcome.error_type == "AttemptsExhaustedError"

    @pytest.mark.asyncio
    async def test_fallback_disabled(self, settings: AppSettings, copd_params: CaseParameters) -> None:
        provider = FakeTextProvider(script=[RateLimitedError("busy", status_code=429)])
        with pytest.raises(RateLimitedError):
            await _service(settings, provider).generate_case(copd_params, allow_fallback=False)


class TestStructureAndMap:
    def test_structure_uses_configured_default_title(self, settings: AppSettings) -> None:
        custom = AppSettings(
            generation=settings.generation,
            structuring=StructuringConfig(default_title="Untitled Case"),
        )
        doc = _service(custom, FakeTextProvider()).structure("no headings here")
        assert doc.title == "Untitled Case"

    def test_map_parameters(self, settings: AppSettings, parameter_questions: list) -> None:
        params = _service(settings, FakeTextProvider()).map_parameters(parameter_questions, {"q2": "q2-2"})
        assert params.demographics.gender == "Female"
