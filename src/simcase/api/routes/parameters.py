"""Parameter mapping endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from simcase.parameters.models import CaseParameters, LearningObjective, ParameterQuestion

router = APIRouter(prefix="/parameters", tags=["parameters"])


class MapParametersRequest(BaseModel):
    """Answered questions to map onto case parameters."""

    questions: list[ParameterQuestion]
    selections: dict[str, str] = Field(default_factory=dict)
    objectives: list[LearningObjective] = Field(default_factory=list)


@router.post("/map", response_model=CaseParameters)
async def map_parameters(request: MapParametersRequest, req: Request) -> CaseParameters:
    """Map selections to case parameters with computed vital-sign ranges."""
    service = req.app.state.case_service
    return service.map_parameters(request.questions, request.selections, request.objectives)
