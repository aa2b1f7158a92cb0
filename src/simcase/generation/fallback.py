"""Offline fallback case used when generation fails.

The text uses the same headings the router recognizes, so a degraded
result still structures into every bucket.
"""

from __future__ import annotations

from simcase.parameters.models import CaseParameters

DEFAULT_CONDITION = "Medical Condition"
FALLBACK_PATIENT_NAME = "Sarah Johnson"

DEBRIEF_QUESTIONS = (
    "What was your initial approach to this case?",
    "What were the key findings that influenced your decision-making?",
    "How did you prioritize interventions?",
    "What would you do differently next time?",
    "How does this case relate to your clinical practice?",
)


def _optional(label: str, value: str) -> list[str]:
    return [f"- {label}: {value}"] if value else []


def build_fallback_case(params: CaseParameters) -> tuple[str, str]:
    """Return ``(markdown, title)`` for a minimal case built from ``params`` alone."""
    condition = params.complexity.primary_condition or DEFAULT_CONDITION
    title = f"Simulation Case: {condition}"
    demographics = params.demographics
    vitals = params.recommended_vital_signs
    elements = params.educational_elements

    objectives = [
        f"{i}. {objective.text}" for i, objective in enumerate(params.learning_objectives, start=1)
    ] or ["1. Assess and manage a patient presenting with " + condition]

    lines = [
        f"# {title}",
        "",
        "## Learning Objectives",
        *objectives,
        "",
        "## Patient Information",
        f"- Name: {FALLBACK_PATIENT_NAME}",
        f"- Age: {demographics.age_range or 'Adult'}",
        f"- Gender: {demographics.gender or 'Not specified'}",
        *_optional("Occupation", demographics.occupation),
        f"- Chief Complaint: Symptoms related to {condition}",
        f"- History of Present Illness: Recent onset of symptoms consistent with {condition}",
        f"- Past Medical History: {', '.join(params.complexity.comorbidities) or 'None significant'}",
        "- Medications: Appropriate for existing conditions",
        "- Allergies: None known",
        *_optional("Social History", demographics.social_context),
        "",
        "## Initial Presentation",
        "- Vital Signs:",
        f"  - Heart Rate: {vitals.heart_rate.min:g} bpm",
        f"  - Respiratory Rate: {vitals.respiratory_rate.min:g} /min",
        f"  - Blood Pressure: {vitals.blood_pressure.systolic.min:g}/{vitals.blood_pressure.diastolic.min:g} mmHg",
        f"  - Temperature: {vitals.temperature.min:g}°C",
        f"  - Oxygen Saturation: {vitals.oxygen_saturation.min:g}%",
        f"  - Consciousness: {vitals.consciousness}",
        "- Physical Examination Findings: Normal examination with findings consistent with the presenting condition.",
        "- Initial Assessment: Patient is stable and requires further evaluation.",
        "",
        "## Progression Scenarios",
        "1. Improvement Scenario",
        "   - The patient shows improvement with appropriate interventions.",
        "   - Vital signs normalize.",
        "2. Deterioration Scenario",
        "   - If appropriate interventions are not taken, the patient's condition worsens.",
        "   - Vital signs deteriorate.",
        "3. Complication Scenario",
        "   - A complication develops related to the primary condition.",
        "   - Requires additional interventions.",
        "",
        "## Case Documentation",
        "- Basic documentation templates provided",
        "- Laboratory results: Within normal ranges except those relevant to the condition",
        "- Diagnostic findings: Consistent with the condition",
        "",
        "## Educational Notes",
        "- This case addresses the specified learning objectives",
        "- Key decision points: "
        + (", ".join(elements.learner_decision_points) or "assessment, diagnosis, and treatment"),
        "- Critical actions: " + (", ".join(elements.critical_actions) or "proper assessment and management"),
        "",
        "## Debriefing Guide",
        *(f"- {question}" for question in DEBRIEF_QUESTIONS),
    ]
    return "\n".join(lines) + "\n", title
