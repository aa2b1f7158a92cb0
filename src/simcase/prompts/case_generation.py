"""Case generation prompt templates.

The requested section headings are the ones the structuring router
recognizes, so a well-behaved response routes without dynamic sections.
"""

from __future__ import annotations

from typing import Iterable

from simcase.parameters.models import CaseParameters

CASE_SYSTEM_PROMPT = (
    "You are an expert in healthcare simulation design with years of experience "
    "creating realistic, educationally sound simulation scenarios for healthcare education."
)

CASE_GENERATION_PROMPT = """
You are an expert in healthcare simulation case design. Create a comprehensive simulation case based on the following parameters:

LEARNING OBJECTIVES:
{objectives}

PATIENT DEMOGRAPHICS:
{demographics}

CLINICAL CONTEXT:
{clinical_context}

PRESENTATION COMPLEXITY:
{complexity}

VITAL SIGNS RANGE:
{vital_signs}

EDUCATIONAL ELEMENTS:
{educational_elements}

Create a detailed simulation case document formatted in Markdown with the following sections:

1. ## Case Title
   - Create a descriptive and educational title for the case

2. ## Learning Objectives
   - List the learning objectives

3. ## Patient Information
   - Name (fictional): Create a realistic fictional full name (first and last name) appropriate for the demographics
   - Age, gender, occupation
   - Chief complaint
   - Brief history of present illness
   - Past medical history
   - Medications
   - Allergies
   - Social history
   - Family history

4. ## Initial Presentation
   - Vital signs (within the ranges specified)
   - Physical examination findings
   - Initial assessment

5. ## Progression Scenarios
   - Include at least 3 possible progression points
   - For each progression, describe changes in condition, vital signs, and appropriate interventions

6. ## Case Documentation
   - Include sample documentation based on the specified documentation types
   - Laboratory results (if applicable)
   - Diagnostic findings (if applicable)

7. ## Educational Notes
   - Specific teaching points related to the case
   - Common pitfalls or challenges
   - Key decision points and critical actions

8. ## Debriefing Guide
   - Questions to discuss with learners
   - Expected outcomes
   - Areas for reflection

The case should be medically accurate, educationally sound, and highly detailed to support simulation-based education.
Make sure the case is realistic and reflects the complexity level specified in the parameters."""


def _lines(pairs: Iterable[tuple[str, str]]) -> str:
    """``- Label: value`` lines, skipping empty values."""
    rendered = [f"- {label}: {value}" for label, value in pairs if value]
    return "\n".join(rendered) or "- Not specified"


def _joined(items: list[str]) -> str:
    return ", ".join(items)


def build_case_prompt(params: CaseParameters) -> str:
    """Render the case-generation prompt for ``params``."""
    demographics = params.demographics
    context = params.clinical_context
    complexity = params.complexity
    elements = params.educational_elements
    vitals = params.recommended_vital_signs

    objectives = "\n".join(
        f"{i}. {objective.text}" for i, objective in enumerate(params.learning_objectives, start=1)
    ) or "1. Not specified"

    clinical_context = _lines([
        ("Setting", context.setting),
        ("Acuity Level", context.acuity_level),
        ("Timeline", context.timeline_span),
    ])
    if context.available_resources:
        resources = "\n".join(f"  * {resource}" for resource in context.available_resources)
        clinical_context = f"{clinical_context}\n- Available Resources:\n{resources}"

    vital_signs = "\n".join([
        f"- Heart Rate: {vitals.heart_rate.describe()} bpm",
        f"- Respiratory Rate: {vitals.respiratory_rate.describe()} /min",
        f"- Blood Pressure: {vitals.blood_pressure.describe()} mmHg",
        f"- Temperature: {vitals.temperature.describe()}°C",
        f"- Oxygen Saturation: {vitals.oxygen_saturation.describe()}%",
        f"- Consciousness: {vitals.consciousness}",
    ])

    return CASE_GENERATION_PROMPT.format(
        objectives=objectives,
        demographics=_lines([
            ("Age Range", demographics.age_range),
            ("Gender", demographics.gender),
            ("Occupation", demographics.occupation),
            ("Social Context", demographics.social_context),
            ("Relevant History", _joined(demographics.relevant_history)),
        ]),
        clinical_context=clinical_context,
        complexity=_lines([
            ("Primary Condition", complexity.primary_condition),
            ("Primary Condition Severity", complexity.primary_condition_severity),
            ("Comorbidities", _joined(complexity.comorbidities)),
            ("Communication Challenges", _joined(complexity.communication_challenges)),
            ("Abnormal Findings", _joined(complexity.abnormal_findings)),
        ]),
        vital_signs=vital_signs,
        educational_elements=_lines([
            ("Documentation Types", _joined(elements.documentation_types)),
            ("Decision Points", _joined(elements.learner_decision_points)),
            ("Critical Actions", _joined(elements.critical_actions)),
            ("Assessment Focus", _joined(elements.assessment_focus)),
        ]),
    ).strip()
