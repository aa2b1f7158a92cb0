"""Pydantic models for case parameters and derived clinical ranges."""

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

# question id -> chosen option id
ParameterSelection = Dict[str, str]


# ── Questions ────────────────────────────────────────────────────────


class ParameterOption(BaseModel):
    id: str
    text: str


class ParameterQuestion(BaseModel):
    """One multiple-choice question shown while configuring a case.

    ``category`` is informational only; the mapper routes answers by the
    wording of ``question``.
    """

    id: str
    question: str
    category: str = ""
    options: list[ParameterOption] = Field(default_factory=list)
    rationale: str = ""

    def option(self, option_id: str) -> ParameterOption | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class ParameterQuestionSet(BaseModel):
    questions: list[ParameterQuestion] = Field(default_factory=list)


class LearningObjective(BaseModel):
    id: str = ""
    text: str
    category: Literal["clinical", "technical", "teamwork", "communication"] = "clinical"
    is_refined: bool = False
    ai_suggested: bool = False


# ── Ranges ───────────────────────────────────────────────────────────


class VitalSignRange(BaseModel):
    """Closed ``[min, max]`` interval for one vital sign."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    def shifted(self, low: float, high: float) -> VitalSignRange:
        return VitalSignRange(min=self.min + low, max=self.max + high)

    def clamped(self, floor: float, ceiling: float) -> VitalSignRange:
        return VitalSignRange(min=max(floor, self.min), max=min(ceiling, self.max))

    def describe(self) -> str:
        return f"{self.min:g}-{self.max:g}"


class BloodPressureRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    systolic: VitalSignRange
    diastolic: VitalSignRange

    def describe(self) -> str:
        return f"{self.systolic.describe()}/{self.diastolic.describe()}"


class ClinicalRangeSet(BaseModel):
    """Target vital-sign ranges for a case.

    Always computed by :func:`simcase.parameters.ranges.compute_ranges`;
    frozen so a computed set cannot drift from its inputs.
    """

    model_config = ConfigDict(frozen=True)

    heart_rate: VitalSignRange = VitalSignRange(min=60, max=100)
    respiratory_rate: VitalSignRange = VitalSignRange(min=12, max=20)
    blood_pressure: BloodPressureRange = BloodPressureRange(
        systolic=VitalSignRange(min=120, max=140),
        diastolic=VitalSignRange(min=70, max=85),
    )
    temperature: VitalSignRange = VitalSignRange(min=36.5, max=37.5)
    oxygen_saturation: VitalSignRange = VitalSignRange(min=95, max=100)
    consciousness: str = "Alert"


# ── Case parameters ──────────────────────────────────────────────────


class PatientDemographics(BaseModel):
    age_range: str = ""
    gender: str = ""
    occupation: str = ""
    social_context: str = ""
    relevant_history: list[str] = Field(default_factory=list)


class ClinicalContext(BaseModel):
    setting: str = ""
    acuity_level: str = ""
    available_resources: list[str] = Field(default_factory=list)
    timeline_span: str = ""


class PresentationComplexity(BaseModel):
    primary_condition: str = ""
    primary_condition_severity: str = ""
    comorbidities: list[str] = Field(default_factory=list)
    communication_challenges: list[str] = Field(default_factory=list)
    abnormal_findings: list[str] = Field(default_factory=list)


class EducationalElements(BaseModel):
    documentation_types: list[str] = Field(default_factory=list)
    learner_decision_points: list[str] = Field(default_factory=list)
    critical_actions: list[str] = Field(default_factory=list)
    assessment_focus: list[str] = Field(default_factory=list)


class CaseParameters(BaseModel):
    """Everything the case prompt is built from."""

    demographics: PatientDemographics = Field(default_factory=PatientDemographics)
    clinical_context: ClinicalContext = Field(default_factory=ClinicalContext)
    complexity: PresentationComplexity = Field(default_factory=PresentationComplexity)
    educational_elements: EducationalElements = Field(default_factory=EducationalElements)
    recommended_vital_signs: ClinicalRangeSet = Field(default_factory=ClinicalRangeSet)
    learning_objectives: list[LearningObjective] = Field(default_factory=list)
