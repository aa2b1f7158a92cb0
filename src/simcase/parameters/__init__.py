"""Case parameter models and the clinical range mapper.

Usage::

    from simcase.parameters import map_selections

    params = map_selections(questions, {"q-age": "elderly"}, objectives)
    params.recommended_vital_signs.oxygen_saturation
"""

from __future__ import annotations

from simcase.parameters.mapper import map_selections, selected_option_text
from simcase.parameters.models import (
    BloodPressureRange,
    CaseParameters,
    ClinicalContext,
    ClinicalRangeSet,
    EducationalElements,
    LearningObjective,
    ParameterOption,
    ParameterQuestion,
    ParameterQuestionSet,
    ParameterSelection,
    PatientDemographics,
    PresentationComplexity,
    VitalSignRange,
)
from simcase.parameters.ranges import compute_ranges

__all__ = [
    "BloodPressureRange",
    "CaseParameters",
    "ClinicalContext",
    "ClinicalRangeSet",
    "EducationalElements",
    "LearningObjective",
    "ParameterOption",
    "ParameterQuestion",
    "ParameterQuestionSet",
    "ParameterSelection",
    "PatientDemographics",
    "PresentationComplexity",
    "VitalSignRange",
    "compute_ranges",
    "map_selections",
    "selected_option_text",
]
