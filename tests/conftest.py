"""Shared fixtures for simcase tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from simcase.core.config import AppSettings, GenerationConfig
from simcase.parameters.models import LearningObjective, ParameterOption, ParameterQuestion

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def copd_case_text() -> str:
    """Full generated case for a 72-year-old with a COPD exacerbation."""
    return (FIXTURES / "copd_case.md").read_text(encoding="utf-8")


@pytest.fixture
def generation_config() -> GenerationConfig:
    """Keyed config; client tests inject a recording sleep instead of waiting."""
    return GenerationConfig(
        provider="anthropic",
        model="anthropic/claude-3-7-sonnet-20250219",
        api_key="test-key",
        retry_base_delay=2.0,
        retry_max_delay=30.0,
    )


@pytest.fixture
def settings(generation_config: GenerationConfig) -> AppSettings:
    return AppSettings(generation=generation_config)


def _question(qid: str, text: str, *options: str) -> ParameterQuestion:
    return ParameterQuestion(
        id=qid,
        question=text,
        options=[ParameterOption(id=f"{qid}-{i}", text=option) for i, option in enumerate(options, start=1)],
    )


@pytest.fixture
def parameter_questions() -> list[ParameterQuestion]:
    """A question set covering demographics, context, complexity and education."""
    return [
        _question("q1", "What age range should the patient be in?", "18-30 years", "71+ years"),
        _question("q2", "What is the patient's gender?", "Male", "Female"),
        _question("q3", "What severity should the primary condition have?", "Mild", "Severe"),
        _question("q4", "Which comorbidities should the patient have?", "COPD", "Hypertension"),
        _question("q5", "What clinical setting should the case take place in?", "Emergency Department", "Rural clinic"),
        _question("q6", "Which documentation should learners review?", "Nursing flowsheets", "All of the above"),
        _question("q7", "What is the primary diagnosis?", "COPD exacerbation", "Community-acquired pneumonia"),
        _question("q8", "Pick your favourite colour", "Blue", "Green"),
    ]


@pytest.fixture
def learning_objectives() -> list[LearningObjective]:
    return [
        LearningObjective(id="lo1", text="Recognize signs of respiratory failure"),
        LearningObjective(id="lo2", text="Titrate oxygen safely in COPD", category="technical"),
    ]
