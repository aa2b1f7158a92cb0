"""Pydantic data models for simcase.

Generation request/result contracts and the ``StructuredDocument`` produced
by the structuring pipeline.  The five bucket names and their field names
are the contract a presentation layer pattern-matches on; keep them stable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ── Generation ───────────────────────────────────────────────────────


class GenerationRequest(BaseModel):
    """A single attempt's worth of input to the generative text service.

    Frozen: each retry builds a new request via :meth:`next_attempt`.
    """

    model_config = ConfigDict(frozen=True)

    prompt: str
    system: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=4000, gt=0)
    timeout: float = Field(default=30.0, gt=0.0)
    retry_count: int = Field(default=0, ge=0)
    total_attempts: int = Field(default=0, ge=0)
    provider_index: int = Field(default=0, ge=0)
    test_mode: bool = False

    def next_attempt(
        self,
        *,
        retry: bool,
        timeout_growth: float = 1.0,
        provider_index: int | None = None,
    ) -> GenerationRequest:
        """Return the request for the following attempt.

        ``retry=True`` counts against the per-provider retry ceiling and grows
        the timeout; a provider switch resets the retry counter.
        """
        if retry:
            return self.model_copy(update={
                "retry_count": self.retry_count + 1,
                "total_attempts": self.total_attempts + 1,
                "timeout": self.timeout * timeout_growth,
            })
        return self.model_copy(update={
            "retry_count": 0,
            "total_attempts": self.total_attempts + 1,
            "provider_index": self.provider_index if provider_index is None else provider_index,
        })


class GenerationResult(BaseModel):
    """Text returned by one successful generation call."""

    model_config = ConfigDict(frozen=True)

    text: str
    provider: str
    model: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ── Structured document ──────────────────────────────────────────────


class Category(str, Enum):
    """The five topical buckets of a structured case."""

    OVERVIEW = "overview"
    BACKGROUND = "background"
    FINDINGS = "findings"
    CARE_PLAN = "care_plan"
    INSTRUCTION = "instruction"


class ContentKind(str, Enum):
    TEXT = "text"
    BULLET_LIST = "bullet_list"
    ORDERED_STEPS = "ordered_steps"


class DynamicSection(BaseModel):
    """A titled fragment no specialized extractor recognized."""

    title: str
    content: Union[str, list[str]]
    content_kind: ContentKind = ContentKind.TEXT

    @model_validator(mode="after")
    def _kind_matches_content(self) -> DynamicSection:
        is_list = isinstance(self.content, list)
        if is_list == (self.content_kind == ContentKind.TEXT):
            raise ValueError(
                f"content_kind={self.content_kind.value} does not match "
                f"{'list' if is_list else 'string'} content"
            )
        return self


class Medication(BaseModel):
    name: str
    dosage: str = ""


class Allergy(BaseModel):
    allergen: str
    reaction: str = ""


class PatientBackground(BaseModel):
    """Subject background fields; empty values mean "not found"."""

    name: str = ""
    age: str = ""
    gender: str = ""
    occupation: str = ""
    chief_complaint: str = ""
    history_of_present_illness: str = ""
    conditions: list[str] = Field(default_factory=list)
    medications: list[Medication] = Field(default_factory=list)
    allergies: list[Allergy] = Field(default_factory=list)
    living_situation: str = ""
    smoking_history: str = ""
    alcohol_use: str = ""
    drug_use: str = ""
    family_history: list[str] = Field(default_factory=list)

    def populated_fields(self) -> int:
        """Number of fields holding a non-empty value."""
        return sum(1 for name in type(self).model_fields if getattr(self, name))

    def fill_missing(self, other: PatientBackground) -> PatientBackground:
        """Return a copy where every empty field takes ``other``'s value."""
        update = {
            name: getattr(other, name)
            for name in type(self).model_fields
            if getattr(other, name) and not getattr(self, name)
        }
        return self.model_copy(update=update, deep=True)


class VitalSign(BaseModel):
    name: str
    value: str
    unit: str = ""
    normal_range: str = ""
    qualifier: str = ""
    is_abnormal: bool = False


class LabResult(BaseModel):
    name: str
    value: str
    unit: str = ""
    reference_range: str = ""
    flag: str = ""
    is_abnormal: bool = False


class PhysicalExamFinding(BaseModel):
    system: str
    findings: str
    is_abnormal: bool = False


class ClinicalNote(BaseModel):
    """A sample documentation artifact (ED note, MAR, therapy note)."""

    title: str
    content: str


class ProgressionScenario(BaseModel):
    title: str
    intervention: str = ""
    response: str = ""
    vital_sign_changes: str = ""
    additional_notes: list[str] = Field(default_factory=list)


class OverviewSection(BaseModel):
    summary: str = ""
    learning_objectives: list[str] = Field(default_factory=list)
    dynamic_sections: list[DynamicSection] = Field(default_factory=list)


class BackgroundSection(BaseModel):
    patient: PatientBackground = Field(default_factory=PatientBackground)
    dynamic_sections: list[DynamicSection] = Field(default_factory=list)


class FindingsSection(BaseModel):
    vital_signs: list[VitalSign] = Field(default_factory=list)
    physical_exam: list[PhysicalExamFinding] = Field(default_factory=list)
    initial_assessment: str = ""
    lab_results: list[LabResult] = Field(default_factory=list)
    clinical_notes: list[ClinicalNote] = Field(default_factory=list)
    dynamic_sections: list[DynamicSection] = Field(default_factory=list)


class CarePlanSection(BaseModel):
    progression_scenarios: list[ProgressionScenario] = Field(default_factory=list)
    dynamic_sections: list[DynamicSection] = Field(default_factory=list)


class InstructionSection(BaseModel):
    teaching_points: list[str] = Field(default_factory=list)
    common_pitfalls: list[str] = Field(default_factory=list)
    decision_points: list[str] = Field(default_factory=list)
    debrief_questions: list[str] = Field(default_factory=list)
    expected_outcomes: list[str] = Field(default_factory=list)
    reflection_areas: list[str] = Field(default_factory=list)
    dynamic_sections: list[DynamicSection] = Field(default_factory=list)


class StructuredDocument(BaseModel):
    """A generated case re-homed into five topical buckets.

    ``raw_text`` is kept verbatim so the document can always be re-derived.
    """

    title: str
    raw_text: str
    overview: OverviewSection = Field(default_factory=OverviewSection)
    background: BackgroundSection = Field(default_factory=BackgroundSection)
    findings: FindingsSection = Field(default_factory=FindingsSection)
    care_plan: CarePlanSection = Field(default_factory=CarePlanSection)
    instruction: InstructionSection = Field(default_factory=InstructionSection)

    def bucket(
        self, category: Category
    ) -> OverviewSection | BackgroundSection | FindingsSection | CarePlanSection | InstructionSection:
        return getattr(self, category.value)

    def all_dynamic_sections(self) -> list[DynamicSection]:
        sections: list[DynamicSection] = []
        for category in Category:
            sections.extend(self.bucket(category).dynamic_sections)
        return sections
