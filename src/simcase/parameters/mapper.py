"""Map answered parameter questions onto ``CaseParameters``.

Each answer is filed by keywords in the question wording, checked against
``_ROUTES`` in order; the question's declared category is ignored.
Unanswered or unroutable questions are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Pattern, Sequence, Union

from simcase.parameters.models import (
    CaseParameters,
    LearningObjective,
    ParameterQuestion,
    ParameterQuestionSet,
    ParameterSelection,
)
from simcase.parameters.ranges import ALL_DOCUMENTATION_TYPES, SETTING_PROFILES, compute_ranges, setting_key

log = logging.getLogger(__name__)

Questions = Union[ParameterQuestionSet, Sequence[ParameterQuestion]]

_ALL_RE = re.compile(r"\ball\b", re.IGNORECASE)


def _set_age(params: CaseParameters, text: str) -> None:
    params.demographics.age_range = text


def _set_gender(params: CaseParameters, text: str) -> None:
    params.demographics.gender = text


def _set_occupation(params: CaseParameters, text: str) -> None:
    params.demographics.occupation = text


def _set_severity(params: CaseParameters, text: str) -> None:
    params.complexity.primary_condition_severity = text


def _set_condition(params: CaseParameters, text: str) -> None:
    params.complexity.primary_condition = text


def _add_comorbidity(params: CaseParameters, text: str) -> None:
    params.complexity.comorbidities.append(text)


def _add_communication(params: CaseParameters, text: str) -> None:
    params.complexity.communication_challenges.append(text)


def _add_finding(params: CaseParameters, text: str) -> None:
    params.complexity.abnormal_findings.append(text)


def _set_setting(params: CaseParameters, text: str) -> None:
    context = params.clinical_context
    context.setting = text
    profile = SETTING_PROFILES[setting_key(text)]
    extra = [item for item in context.available_resources if item not in profile.resources]
    context.available_resources = [*profile.resources, *extra]


def _set_acuity(params: CaseParameters, text: str) -> None:
    params.clinical_context.acuity_level = text


def _add_resource(params: CaseParameters, text: str) -> None:
    params.clinical_context.available_resources.append(text)


def _set_timeline(params: CaseParameters, text: str) -> None:
    params.clinical_context.timeline_span = text


def _add_documentation(params: CaseParameters, text: str) -> None:
    if _ALL_RE.search(text):
        params.educational_elements.documentation_types = list(ALL_DOCUMENTATION_TYPES)
    else:
        params.educational_elements.documentation_types.append(text)


def _add_decision_point(params: CaseParameters, text: str) -> None:
    params.educational_elements.learner_decision_points.append(text)


def _add_critical_action(params: CaseParameters, text: str) -> None:
    params.educational_elements.critical_actions.append(text)


def _add_assessment_focus(params: CaseParameters, text: str) -> None:
    params.educational_elements.assessment_focus.append(text)


def _set_social(params: CaseParameters, text: str) -> None:
    params.demographics.social_context = text


def _add_history(params: CaseParameters, text: str) -> None:
    params.demographics.relevant_history.append(text)


@dataclass(frozen=True)
class _Route:
    pattern: Pattern[str]
    apply: Callable[[CaseParameters, str], None]


def _route(regex: str, apply: Callable[[CaseParameters, str], None]) -> _Route:
    return _Route(re.compile(regex, re.IGNORECASE), apply)


_ROUTES: list[_Route] = [
    _route(r"\bage\b", _set_age),
    _route(r"\b(?:gender|sex)\b", _set_gender),
    _route(r"\boccupation", _set_occupation),
    _route(r"\bseverity\b", _set_severity),
    _route(r"\bcomorbid|\badditional\s+conditions?\b", _add_comorbidity),
    _route(r"\bprimary\s+(?:condition|diagnosis)\b|\bdiagnosis\b", _set_condition),
    _route(r"\bcommunication\b|\bbarriers?\b", _add_communication),
    _route(r"\babnormal|\bfindings?\b", _add_finding),
    _route(r"\bsetting\b|\blocation\b", _set_setting),
    _route(r"\bacuity\b|\burgency\b", _set_acuity),
    _route(r"\bresources?\b|\bequipment\b", _add_resource),
    _route(r"\btimeline\b|\bduration\b", _set_timeline),
    _route(r"\bdocumentation\b|\brecords?\b", _add_documentation),
    _route(r"\bdecision\b|\bintervention\s+points?\b", _add_decision_point),
    _route(r"\bcritical\b|\bactions?\b", _add_critical_action),
    _route(r"\bassessment\b|\bevaluat", _add_assessment_focus),
    _route(r"\bsocial\b|\bliving\b", _set_social),
    _route(r"\bhistory\b|\bbackground\b", _add_history),
]


def _route_for(question_text: str) -> _Route | None:
    for route in _ROUTES:
        if route.pattern.search(question_text):
            return route
    return None


def _question_list(questions: Questions) -> Sequence[ParameterQuestion]:
    if isinstance(questions, ParameterQuestionSet):
        return questions.questions
    return questions


def selected_option_text(
    questions: Questions,
    selections: ParameterSelection,
    question_id: str,
) -> str | None:
    """Text of the option chosen for ``question_id``, or None when unanswered."""
    for question in _question_list(questions):
        if question.id != question_id:
            continue
        option_id = selections.get(question_id)
        if not option_id:
            return None
        option = question.option(option_id)
        return option.text if option is not None else None
    return None


def map_selections(
    questions: Questions,
    selections: ParameterSelection,
    objectives: Iterable[LearningObjective] = (),
) -> CaseParameters:
    """Build ``CaseParameters`` from answered questions and compute vital ranges."""
    params = CaseParameters(learning_objectives=list(objectives))

    for question in _question_list(questions):
        option_id = selections.get(question.id)
        if not option_id:
            continue
        option = question.option(option_id)
        if option is None:
            log.debug("Question %s has no option %s; skipped", question.id, option_id)
            continue
        route = _route_for(question.question)
        if route is None:
            log.info("No parameter field for question %s (%r); skipped", question.id, question.question)
            continue
        route.apply(params, option.text)

    context = params.clinical_context
    elements = params.educational_elements
    if context.setting and not elements.documentation_types:
        elements.documentation_types = list(SETTING_PROFILES[setting_key(context.setting)].documents)

    complexity = params.complexity
    params.recommended_vital_signs = compute_ranges(
        params.demographics.age_range,
        complexity.primary_condition_severity,
        complexity.comorbidities,
    )
    return params
