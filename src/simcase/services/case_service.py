"""Case generation service: prompt -> generation client -> structuring router."""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel

from simcase.core.config import AppSettings
from simcase.exceptions import GenerationError
from simcase.generation.client import ResilientGenerationClient
from simcase.generation.fallback import build_fallback_case
from simcase.models import StructuredDocument
from simcase.parameters.mapper import Questions, map_selections
from simcase.parameters.models import CaseParameters, LearningObjective, ParameterSelection
from simcase.prompts.case_generation import CASE_SYSTEM_PROMPT, build_case_prompt
from simcase.structuring.router import route

log = logging.getLogger(__name__)

FALLBACK_PROVIDER = "fallback"


class CaseGenerationOutcome(BaseModel):
    """A structured case plus how it was obtained.

    ``degraded`` is True when generation failed and the document was built
    from the offline fallback case; ``user_message`` then says why.
    """

    document: StructuredDocument
    degraded: bool = False
    user_message: str = ""
    retryable: bool = False
    error_type: str = ""
    provider: str = ""
    model: str = ""


class CaseGenerationService:
    """Turns case parameters into a ``StructuredDocument``."""

    def __init__(self, settings: AppSettings, client: ResilientGenerationClient | None = None) -> None:
        self._settings = settings
        self._client = client or ResilientGenerationClient.from_config(settings.generation)

    def map_parameters(
        self,
        questions: Questions,
        selections: ParameterSelection,
        objectives: Iterable[LearningObjective] = (),
    ) -> CaseParameters:
        return map_selections(questions, selections, objectives)

    def structure(self, raw_text: str, title: str = "") -> StructuredDocument:
        structuring = self._settings.structuring
        return route(
            raw_text,
            title,
            summary_max_chars=structuring.summary_max_chars,
            default_title=structuring.default_title,
        )

    async def generate_case(
        self,
        params: CaseParameters,
        *,
        title: str | None = None,
        allow_fallback: bool = True,
    ) -> CaseGenerationOutcome:
        """Generate and structure a case.

        Generation failures degrade to the fallback case unless
        ``allow_fallback`` is False, in which case the ``GenerationError``
        propagates.
        """
        request = self._client.new_request(build_case_prompt(params), system=CASE_SYSTEM_PROMPT)
        try:
            result = await self._client.generate(request)
        except GenerationError as e:
            if not allow_fallback:
                raise
            log.error("Case generation failed (%s): %s; using fallback case", type(e).__name__, e)
            text, fallback_title = build_fallback_case(params)
            return CaseGenerationOutcome(
                document=self.structure(text, title or fallback_title),
                degraded=True,
                user_message=e.user_message,
                retryable=e.retryable,
                error_type=type(e).__name__,
                provider=FALLBACK_PROVIDER,
            )

        document = self.structure(result.text, title or "")
        log.info(
            "Generated case '%s' via %s (%d chars)",
            document.title, result.provider, len(result.text),
        )
        return CaseGenerationOutcome(document=document, provider=result.provider, model=result.model)
