"""Route a generated case into a ``StructuredDocument``.

Top-level headings (``#``/``##``, or a standalone bold / all-caps line that
names a known label) cut the text into blocks.  Known blocks go to their
extractor; everything else is classified and split into dynamic sections,
so every authored line lands somewhere.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from pydantic import BaseModel

from simcase.models import Category, StructuredDocument
from simcase.structuring import patterns
from simcase.structuring.classifier import classify
from simcase.structuring.extractors.background import parse_background_with_fallback
from simcase.structuring.extractors.labs import extract_lab_results
from simcase.structuring.extractors.narrative import (
    extract_clinical_notes,
    extract_objectives,
    parse_debrief,
    parse_education,
    parse_progression,
)
from simcase.structuring.extractors.presentation import parse_presentation
from simcase.structuring.splitter import split
from simcase.structuring.text_utils import BOLD_LINE_RE, clean_inline, is_all_caps_title, strip_marker

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Healthcare Simulation Case"
DEFAULT_SUMMARY_CHARS = 500

_TITLE = "title"
_CASE_TITLE = "case-title"

_MD_HEADING_RE = re.compile(r"^\s{0,3}(#{1,2})\s+(?:\d+[.)]\s*)?(.+?)\s*#*\s*$")
_H1_RE = re.compile(r"^\s{0,3}#\s+(.+?)\s*#*\s*$", re.MULTILINE)
_CASE_TITLE_RE = re.compile(
    r"^\s{0,3}#{1,3}\s*(?:\d+[.)]\s*)?case\s+title\s*:?\s*\n(?:\s*\n)*\s*(.+?)\s*$",
    re.MULTILINE | re.IGNORECASE,
)
_MARKUP_RE = re.compile(r"^\s*#+\s*|\*\*|__|`")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class _Block:
    heading: str
    label: str | None
    lines: list[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(self.lines).strip()


def _heading_of(
    line: str,
    *,
    title_open: bool = True,
    in_documentation: bool = False,
) -> tuple[str, str | None] | None:
    """Return ``(heading, label)`` when ``line`` opens a top-level block.

    Only the first unrecognized ``#`` heading is the document title; later
    ones stay unknown headings.  Bold and all-caps lines must name a label
    in full and never open a block inside sample documentation, where they
    are note sub-labels (``OBJECTIVE:``, ``PLAN:``).
    """
    match = _MD_HEADING_RE.match(line)
    if match is not None:
        text = clean_inline(match.group(2)).rstrip(":").strip()
        if patterns.CASE_TITLE_PATTERN.match(text):
            return text, _CASE_TITLE
        label = patterns.match_heading(text)
        if label is None and title_open and len(match.group(1)) == 1:
            return text, _TITLE
        return text, label

    if in_documentation:
        return None
    bold = BOLD_LINE_RE.match(line)
    candidate = None
    if bold is not None:
        candidate = clean_inline(bold.group(1)).rstrip(":").strip()
    elif is_all_caps_title(line):
        candidate = line.strip().rstrip(":").strip()
    if candidate:
        label = patterns.match_standalone_heading(candidate)
        if label is not None:
            return candidate, label
    return None


def _blocks(raw_text: str) -> list[_Block]:
    blocks = [_Block(heading="", label=None)]
    title_open = True
    for line in raw_text.splitlines():
        heading = _heading_of(
            line,
            title_open=title_open,
            in_documentation=blocks[-1].label == patterns.DOCUMENTATION,
        )
        if heading is None:
            blocks[-1].lines.append(line)
            continue
        if heading[1] == _CASE_TITLE or _H1_RE.match(line):
            title_open = False
        blocks.append(_Block(heading=heading[0], label=heading[1]))
    return blocks


def extract_title(raw_text: str, *, default: str = DEFAULT_TITLE) -> str:
    """First ``#`` heading or the line after ``## Case Title``, whichever comes first."""
    candidates = [
        match
        for match in (_H1_RE.search(raw_text), _CASE_TITLE_RE.search(raw_text))
        if match is not None
    ]
    for match in sorted(candidates, key=lambda m: m.start()):
        title = clean_inline(strip_marker(match.group(1))).strip("# ")
        if title and not patterns.CASE_TITLE_PATTERN.match(title):
            return title
    return default


def _flatten(text: str) -> str:
    """Join non-title lines into one line with heading markup stripped."""
    parts = []
    for line in text.splitlines():
        if _H1_RE.match(line):
            continue
        cleaned = _MARKUP_RE.sub("", line).strip()
        if cleaned:
            parts.append(cleaned)
    return _WHITESPACE_RE.sub(" ", " ".join(parts)).strip()


def summarize(text: str, max_chars: int = DEFAULT_SUMMARY_CHARS) -> str:
    """Leading ``max_chars`` of ``text`` with heading markup stripped."""
    flat = _flatten(text)
    if len(flat) <= max_chars:
        return flat
    cut = flat[:max_chars].rsplit(" ", 1)[0].rstrip(" ,;:")
    return f"{cut}..."


# ── Filing ───────────────────────────────────────────────────────────


def _merge(target: BaseModel, source: BaseModel) -> None:
    """Extend list fields and fill empty scalar fields of ``target`` in place."""
    for name in type(source).model_fields:
        incoming = getattr(source, name)
        current = getattr(target, name)
        if isinstance(current, list):
            current.extend(incoming)
        elif incoming and not current:
            setattr(target, name, incoming)


def _rehome(doc: StructuredDocument, category: Category, text: str, title: str = "") -> None:
    if not text.strip() and not title:
        return
    doc.bucket(category).dynamic_sections.extend(split(text, title=title or None))


def _file_objectives(doc: StructuredDocument, heading: str, body: str) -> None:
    doc.overview.learning_objectives.extend(extract_objectives(body))


def _file_background(doc: StructuredDocument, heading: str, body: str) -> None:
    background, leftover = parse_background_with_fallback(body)
    doc.background.patient = doc.background.patient.fill_missing(background)
    _rehome(doc, Category.BACKGROUND, leftover)


def _file_findings(doc: StructuredDocument, heading: str, body: str) -> None:
    findings, leftover = parse_presentation(body)
    _merge(doc.findings, findings)
    _rehome(doc, Category.FINDINGS, leftover)


def _file_progression(doc: StructuredDocument, heading: str, body: str) -> None:
    scenarios, leftover = parse_progression(body)
    doc.care_plan.progression_scenarios.extend(scenarios)
    _rehome(doc, Category.CARE_PLAN, leftover)


def _file_documentation(doc: StructuredDocument, heading: str, body: str) -> None:
    doc.findings.clinical_notes.extend(extract_clinical_notes(body, title=heading))
    doc.findings.lab_results.extend(extract_lab_results(body))


def _file_education(doc: StructuredDocument, heading: str, body: str) -> None:
    section, leftover = parse_education(body)
    _merge(doc.instruction, section)
    _rehome(doc, Category.INSTRUCTION, leftover)


def _file_debrief(doc: StructuredDocument, heading: str, body: str) -> None:
    section, leftover = parse_debrief(body)
    _merge(doc.instruction, section)
    _rehome(doc, Category.INSTRUCTION, leftover)


def _file_summary(doc: StructuredDocument, heading: str, body: str) -> None:
    if doc.overview.summary:
        _rehome(doc, Category.OVERVIEW, body, heading)
        return
    doc.overview.summary = _flatten(body)


_HANDLERS: dict[str, Callable[[StructuredDocument, str, str], None]] = {
    patterns.OBJECTIVES: _file_objectives,
    patterns.SUBJECT_INFORMATION: _file_background,
    patterns.INITIAL_FINDINGS: _file_findings,
    patterns.PROGRESSION: _file_progression,
    patterns.DOCUMENTATION: _file_documentation,
    patterns.EDUCATIONAL_NOTES: _file_education,
    patterns.DEBRIEF: _file_debrief,
    patterns.SUMMARY: _file_summary,
}


def _dedupe_labs(doc: StructuredDocument) -> None:
    seen: set[str] = set()
    unique = []
    for lab in doc.findings.lab_results:
        key = lab.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(lab)
    doc.findings.lab_results = unique


def route(
    raw_text: str,
    title: str = "",
    *,
    summary_max_chars: int = DEFAULT_SUMMARY_CHARS,
    default_title: str = DEFAULT_TITLE,
) -> StructuredDocument:
    """Structure ``raw_text`` into the five topical buckets.

    Never raises.  A blank ``title`` is derived with :func:`extract_title`.
    """
    raw_text = raw_text or ""
    doc = StructuredDocument(
        title=(title or "").strip() or extract_title(raw_text, default=default_title),
        raw_text=raw_text,
    )

    filed = 0
    for block in _blocks(raw_text):
        body = block.body
        if block.label == _CASE_TITLE:
            # First line is the title itself.
            body = "\n".join(body.splitlines()[1:]).strip()
            _rehome(doc, classify(body), body)
            continue
        handler = _HANDLERS.get(block.label or "")
        if handler is not None:
            handler(doc, block.heading, body)
            filed += 1
            continue
        heading = block.heading if block.label is None else ""
        if body or heading:
            _rehome(doc, classify(f"{heading}\n{body}"), body, heading)

    _dedupe_labs(doc)
    if not doc.overview.summary:
        doc.overview.summary = summarize(raw_text, summary_max_chars)

    log.debug(
        "Routed '%s': %d known blocks, %d dynamic sections",
        doc.title, filed, len(doc.all_dynamic_sections()),
    )
    return doc
