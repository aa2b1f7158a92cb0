"""Extractors for the list-shaped blocks of a case.

Objectives, progression scenarios, sample documentation, educational notes
and the debriefing guide.  Each ``parse_*`` function returns its record plus
the text it did not claim, which the router re-homes as dynamic sections.
"""

from __future__ import annotations

import re
from typing import Pattern

from simcase.models import ClinicalNote, InstructionSection, ProgressionScenario
from simcase.structuring.text_utils import (
    MARKER_RE,
    Entry,
    clean_inline,
    entries,
    list_items,
    split_label,
    split_list,
    strip_marker,
    subsections,
)

_INTERVENTION_RE = re.compile(r"^(?:interventions?|treatment|management|actions?|corrective\s+actions?)\b", re.IGNORECASE)
_RESPONSE_RE = re.compile(r"^(?:(?:patient\s+)?response|outcome|result)\b", re.IGNORECASE)
_VITAL_CHANGES_RE = re.compile(r"^vital(?:\s+sign)?s?(?:\s+changes?)?\b", re.IGNORECASE)

_TEACHING_RE = re.compile(r"\b(?:teaching|key\s+(?:learning\s+)?points|learning\s+points|clinical\s+pearls)\b", re.IGNORECASE)
_PITFALL_RE = re.compile(r"\b(?:pitfalls?|common\s+(?:errors|mistakes)|challenges)\b", re.IGNORECASE)
_DECISION_RE = re.compile(r"\b(?:decision\s+points?|critical\s+actions?)\b", re.IGNORECASE)

_QUESTIONS_RE = re.compile(r"\b(?:questions?|discussion)\b", re.IGNORECASE)
_OUTCOMES_RE = re.compile(r"\boutcomes?\b", re.IGNORECASE)
_REFLECTION_RE = re.compile(r"\breflect", re.IGNORECASE)


def _entry_lines(entry: Entry) -> list[str]:
    return [clean_inline(strip_marker(entry.raw[0])), *entry.children]


# ── Objectives ───────────────────────────────────────────────────────


def extract_objectives(text: str) -> list[str]:
    """One objective per top-level list item (or per line without markers)."""
    return list_items(text)


# ── Progression ──────────────────────────────────────────────────────


def _scenario(title: str, lines: list[str]) -> ProgressionScenario:
    fields: dict[str, str] = {}
    notes: list[str] = []
    for line in lines:
        parts = split_label(line)
        if parts is None or not parts[1]:
            cleaned = clean_inline(strip_marker(line))
            if cleaned:
                notes.append(cleaned)
            continue
        label, value = parts
        if _INTERVENTION_RE.search(label) and "intervention" not in fields:
            fields["intervention"] = value
        elif _RESPONSE_RE.search(label) and "response" not in fields:
            fields["response"] = value
        elif _VITAL_CHANGES_RE.search(label) and "vital_sign_changes" not in fields:
            fields["vital_sign_changes"] = value
        else:
            notes.append(f"{label}: {value}")
    return ProgressionScenario(title=title, additional_notes=notes, **fields)


def parse_progression(text: str) -> tuple[list[ProgressionScenario], str]:
    """Scenarios from ``###`` sub-headings or from top-level items with children."""
    scenarios: list[ProgressionScenario] = []
    leftover: list[str] = []
    for heading, body in subsections(text):
        if heading:
            scenarios.append(_scenario(heading, body.splitlines()))
            continue
        for entry in entries(body):
            is_item = bool(MARKER_RE.match(entry.raw[0]))
            if is_item and not entry.label and entry.children:
                scenarios.append(_scenario(entry.value, entry.children))
            elif is_item and entry.label and not entry.value and entry.children:
                scenarios.append(_scenario(entry.label, entry.children))
            else:
                leftover.extend(entry.raw)
    return scenarios, "\n".join(leftover)


def extract_progression(text: str) -> list[ProgressionScenario]:
    return parse_progression(text)[0]


# ── Documentation ────────────────────────────────────────────────────


def extract_clinical_notes(text: str, *, title: str = "Case Documentation") -> list[ClinicalNote]:
    """Each sub-heading becomes a note; text before the first one is titled ``title``."""
    notes: list[ClinicalNote] = []
    for heading, body in subsections(text):
        if body or heading:
            notes.append(ClinicalNote(title=heading or title, content=body))
    return notes


# ── Educational notes ────────────────────────────────────────────────

_EDUCATION_TARGETS: list[tuple[str, Pattern[str]]] = [
    ("common_pitfalls", _PITFALL_RE),
    ("decision_points", _DECISION_RE),
    ("teaching_points", _TEACHING_RE),
]

_DEBRIEF_TARGETS: list[tuple[str, Pattern[str]]] = [
    ("debrief_questions", _QUESTIONS_RE),
    ("expected_outcomes", _OUTCOMES_RE),
    ("reflection_areas", _REFLECTION_RE),
]


def _target_for(heading: str, targets: list[tuple[str, Pattern[str]]]) -> str | None:
    for name, pattern in targets:
        if pattern.search(heading):
            return name
    return None


def parse_education(text: str) -> tuple[InstructionSection, str]:
    """Teaching points, pitfalls and decision points from educational notes."""
    values: dict[str, list[str]] = {name: [] for name, _ in _EDUCATION_TARGETS}
    leftover: list[str] = []
    for heading, body in subsections(text):
        if heading:
            target = _target_for(heading, _EDUCATION_TARGETS)
            if target is None:
                leftover.extend([f"{heading}:", body, ""])
            else:
                values[target].extend(list_items(body))
            continue
        for entry in entries(body):
            target = _target_for(entry.label, _EDUCATION_TARGETS) if entry.label else None
            if target is not None and entry.value:
                values[target].extend(split_list(entry.value))
                values[target].extend(entry.children)
            elif target is not None:
                values[target].extend(entry.children)
            else:
                values["teaching_points"].append("; ".join(_entry_lines(entry)))
    return InstructionSection(**values), "\n".join(leftover).strip()


# ── Debrief ──────────────────────────────────────────────────────────


def parse_debrief(text: str) -> tuple[InstructionSection, str]:
    """Discussion questions, expected outcomes and reflection areas."""
    values: dict[str, list[str]] = {name: [] for name, _ in _DEBRIEF_TARGETS}
    leftover: list[str] = []
    for heading, body in subsections(text):
        if heading:
            target = _target_for(heading, _DEBRIEF_TARGETS)
            if target is None:
                leftover.extend([f"{heading}:", body, ""])
            else:
                values[target].extend(list_items(body))
            continue
        for entry in entries(body):
            target = _target_for(entry.label, _DEBRIEF_TARGETS) if entry.label else None
            if target is not None:
                values[target].extend(split_list(entry.value) if entry.value else [])
                values[target].extend(entry.children)
            elif entry.value.rstrip().endswith("?"):
                values["debrief_questions"].append(entry.value.strip())
            else:
                leftover.extend(entry.raw)
    return InstructionSection(**values), "\n".join(leftover).strip()
