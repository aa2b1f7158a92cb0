"""Initial presentation: vitals, physical exam, initial assessment, labs."""

from __future__ import annotations

from simcase.models import FindingsSection, PhysicalExamFinding
from simcase.structuring.abnormality import is_likely_abnormal
from simcase.structuring.extractors.labs import parse_lab_results
from simcase.structuring.extractors.vitals import extract_vital_signs, parse_vital_signs
from simcase.structuring.patterns import (
    ASSESSMENT_HEADING_PATTERN,
    EXAM_HEADING_PATTERN,
    LAB_HEADING_PATTERN,
    VITALS_HEADING_PATTERN,
)
from simcase.structuring.text_utils import clean_inline, entries, split_label, strip_marker, subsections


def parse_exam_findings(lines: list[str], *, default_system: str = "General") -> list[PhysicalExamFinding]:
    """Turn ``System: findings`` lines into exam findings."""
    findings: list[PhysicalExamFinding] = []
    for line in lines:
        parts = split_label(line)
        if parts is not None and parts[1]:
            system, text = parts
        else:
            system, text = default_system, clean_inline(strip_marker(line))
        if text:
            findings.append(PhysicalExamFinding(
                system=system,
                findings=text,
                is_abnormal=is_likely_abnormal(text),
            ))
    return findings


class _Collector:
    """Accumulates presentation parts before building the section."""

    def __init__(self) -> None:
        self.vitals_lines: list[str] = []
        self.exam: list[PhysicalExamFinding] = []
        self.assessment: list[str] = []
        self.lab_lines: list[str] = []
        self.leftover: list[str] = []

    def dispatch(self, heading: str, value: str, children: list[str]) -> bool:
        """File one labeled group; returns False when the label is unknown."""
        if VITALS_HEADING_PATTERN.search(heading):
            self.vitals_lines.extend([value, *children] if value else children)
        elif EXAM_HEADING_PATTERN.search(heading):
            if children:
                self.exam.extend(parse_exam_findings(children))
            if value:
                self.exam.extend(parse_exam_findings([value]))
        elif ASSESSMENT_HEADING_PATTERN.search(heading):
            self.assessment.append(" ".join(part for part in [value, *children] if part))
        elif LAB_HEADING_PATTERN.search(heading):
            self.lab_lines.extend([value, *children] if value else children)
        else:
            return False
        return True

    def build(self) -> tuple[FindingsSection, str]:
        vitals, unused_vitals = parse_vital_signs("\n".join(self.vitals_lines))
        labs, unused_labs = parse_lab_results("\n".join(self.lab_lines), lab_block=True)
        section = FindingsSection(
            vital_signs=vitals,
            physical_exam=self.exam,
            initial_assessment=" ".join(part for part in self.assessment if part),
            lab_results=labs,
        )
        leftover = list(self.leftover)
        for unused in (unused_vitals, unused_labs):
            if unused:
                leftover.extend(["", *unused])
        return section, "\n".join(leftover).strip()


def parse_presentation(text: str) -> tuple[FindingsSection, str]:
    """Extract presentation findings; returns the section and unclaimed text."""
    collector = _Collector()
    for heading, body in subsections(text):
        if heading:
            lines = [line for line in body.splitlines() if line.strip()]
            if not collector.dispatch(heading, "", lines):
                collector.leftover.extend([f"{heading}:", *lines, ""])
            continue
        for entry in entries(body):
            if entry.label and collector.dispatch(entry.label, entry.value, entry.children):
                continue
            # A bare vital outside a "Vital signs" group still counts.
            if extract_vital_signs(entry.raw[0], include_generic=False):
                collector.vitals_lines.extend(entry.raw)
                continue
            collector.leftover.extend(entry.raw)
    return collector.build()


def extract_presentation(text: str) -> FindingsSection:
    """Extract vitals, exam findings, initial assessment and labs from ``text``."""
    return parse_presentation(text)[0]
