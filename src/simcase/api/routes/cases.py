"""Case structuring and generation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from simcase.models import StructuredDocument
from simcase.parameters.models import CaseParameters
from simcase.services.case_service import CaseGenerationOutcome, CaseGenerationService

router = APIRouter(prefix="/cases", tags=["cases"])


class StructureRequest(BaseModel):
    """Raw generated text to structure."""

    raw_text: str
    title: str = ""


class GenerateRequest(BaseModel):
    """Parameters for a new case.

    With ``allow_fallback`` False a generation failure is returned as an
    error response instead of a degraded fallback case.
    """

    parameters: CaseParameters = Field(default_factory=CaseParameters)
    title: str | None = None
    allow_fallback: bool = True


def _service(req: Request) -> CaseGenerationService:
    return req.app.state.case_service


@router.post("/structure", response_model=StructuredDocument)
async def structure_case(request: StructureRequest, req: Request) -> StructuredDocument:
    """Structure already-generated case text; never fails on content."""
    return _service(req).structure(request.raw_text, request.title)


@router.post("/generate", response_model=CaseGenerationOutcome)
async def generate_case(request: GenerateRequest, req: Request) -> CaseGenerationOutcome:
    """Generate a case from parameters and return it structured."""
    return await _service(req).generate_case(
        request.parameters,
        title=request.title,
        allow_fallback=request.allow_fallback,
    )
