"""Pure, total extractors: each takes a block of text and never raises."""

from __future__ import annotations

from simcase.structuring.extractors.background import (
    MIN_PRECISE_FIELDS,
    extract_background,
    parse_allergy,
    parse_medication,
)
from simcase.structuring.extractors.labs import extract_lab_results
from simcase.structuring.extractors.narrative import (
    extract_clinical_notes,
    extract_objectives,
    extract_progression,
    parse_debrief,
    parse_education,
)
from simcase.structuring.extractors.presentation import extract_presentation
from simcase.structuring.extractors.vitals import extract_vital_signs

__all__ = [
    "MIN_PRECISE_FIELDS",
    "extract_background",
    "extract_clinical_notes",
    "extract_lab_results",
    "extract_objectives",
    "extract_presentation",
    "extract_progression",
    "extract_vital_signs",
    "parse_allergy",
    "parse_debrief",
    "parse_education",
    "parse_medication",
]
