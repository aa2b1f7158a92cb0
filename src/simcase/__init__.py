"""simcase: simulation case generation and structuring.

Usage::

    from simcase import AppSettings, CaseGenerationService, route

    doc = route(raw_markdown)
    service = CaseGenerationService(AppSettings())
    outcome = await service.generate_case(params)
"""

from __future__ import annotations

from simcase.core.config import AppSettings
from simcase.generation import ResilientGenerationClient
from simcase.models import (
    Category,
    DynamicSection,
    GenerationRequest,
    GenerationResult,
    StructuredDocument,
)
from simcase.parameters import CaseParameters, ClinicalRangeSet, map_selections
from simcase.services.case_service import CaseGenerationOutcome, CaseGenerationService
from simcase.structuring import classify, route, split

__all__ = [
    "AppSettings",
    "CaseGenerationOutcome",
    "CaseGenerationService",
    "CaseParameters",
    "Category",
    "ClinicalRangeSet",
    "DynamicSection",
    "GenerationRequest",
    "GenerationResult",
    "ResilientGenerationClient",
    "StructuredDocument",
    "classify",
    "map_selections",
    "route",
    "split",
]
