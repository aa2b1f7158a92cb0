"""Regex tables for heading detection and content classification.

``HEADING_PATTERNS`` maps the router's known block labels to the heading
texts that name them.  ``CATEGORY_PATTERNS`` drives ``classify``; both
dicts are evaluated in insertion order and the first hit wins.
"""

from __future__ import annotations

import re
from typing import Pattern

from simcase.models import Category


def _terms(*words: str) -> list[Pattern[str]]:
    """Compile word-prefix patterns; spaces inside a term match any whitespace."""
    return [
        re.compile(r"\b" + r"\s+".join(re.escape(part) for part in word.split()), re.IGNORECASE)
        for word in words
    ]


# ── Block labels ─────────────────────────────────────────────────────

OBJECTIVES = "objectives"
SUBJECT_INFORMATION = "subject-information"
INITIAL_FINDINGS = "initial-findings"
PROGRESSION = "progression"
DOCUMENTATION = "documentation"
EDUCATIONAL_NOTES = "educational-notes"
DEBRIEF = "debrief"
SUMMARY = "summary"

HEADING_PATTERNS: dict[str, list[Pattern[str]]] = {
    OBJECTIVES: [
        re.compile(r"\blearning\s+objectives?\b", re.IGNORECASE),
        re.compile(r"\bobjectives?\b", re.IGNORECASE),
        re.compile(r"\blearning\s+goals?\b", re.IGNORECASE),
    ],
    SUBJECT_INFORMATION: [
        re.compile(r"\bpatient\s+(?:information|info|background|profile|details|history)\b", re.IGNORECASE),
        re.compile(r"\bsubject\s+information\b", re.IGNORECASE),
        re.compile(r"\bdemographics\b", re.IGNORECASE),
    ],
    INITIAL_FINDINGS: [
        re.compile(r"\binitial\s+(?:presentation|findings|assessment)\b", re.IGNORECASE),
        re.compile(r"\bclinical\s+(?:presentation|findings)\b", re.IGNORECASE),
        re.compile(r"\bpresentation\b", re.IGNORECASE),
    ],
    PROGRESSION: [
        re.compile(r"\bprogression\b", re.IGNORECASE),
        re.compile(r"\bscenario\s+(?:flow|timeline)\b", re.IGNORECASE),
    ],
    DOCUMENTATION: [
        re.compile(r"\b(?:case|clinical|sample)\s+documentation\b", re.IGNORECASE),
        re.compile(r"\bdocumentation\b", re.IGNORECASE),
    ],
    EDUCATIONAL_NOTES: [
        re.compile(r"\beducational\s+notes?\b", re.IGNORECASE),
        re.compile(r"\bteaching\s+notes?\b", re.IGNORECASE),
        re.compile(r"\beducator\s+notes?\b", re.IGNORECASE),
    ],
    DEBRIEF: [
        re.compile(r"\bdebrief(?:ing)?\b", re.IGNORECASE),
    ],
    SUMMARY: [
        re.compile(r"\b(?:case\s+)?summary\b", re.IGNORECASE),
        re.compile(r"\b(?:case\s+)?overview\b", re.IGNORECASE),
    ],
}

CASE_TITLE_PATTERN: Pattern[str] = re.compile(r"^\s*case\s+title\s*$", re.IGNORECASE)


# Bold or all-caps lines only open a block when the whole line is one of
# these phrases; "OBJECTIVE:" or "PATIENT HISTORY:" inside a note stay put.
STANDALONE_HEADING_PATTERNS: dict[str, Pattern[str]] = {
    OBJECTIVES: re.compile(r"(?:learning\s+)?objectives|learning\s+goals", re.IGNORECASE),
    SUBJECT_INFORMATION: re.compile(
        r"patient\s+(?:information|info|background|profile|details)|subject\s+information|demographics",
        re.IGNORECASE,
    ),
    INITIAL_FINDINGS: re.compile(r"(?:initial|clinical)\s+(?:presentation|findings)", re.IGNORECASE),
    PROGRESSION: re.compile(r"(?:case\s+)?progression(?:\s+scenarios?)?|scenario\s+(?:flow|timeline)", re.IGNORECASE),
    DOCUMENTATION: re.compile(r"(?:case|clinical|sample)\s+documentation", re.IGNORECASE),
    EDUCATIONAL_NOTES: re.compile(r"(?:educational|teaching|educator)\s+notes?", re.IGNORECASE),
    DEBRIEF: re.compile(r"debriefing(?:\s+guide)?|debrief\s+guide", re.IGNORECASE),
    SUMMARY: re.compile(r"case\s+(?:summary|overview)", re.IGNORECASE),
}


def match_heading(text: str) -> str | None:
    """Return the first block label whose pattern matches ``text``."""
    for label, patterns in HEADING_PATTERNS.items():
        for pattern in patterns:
            if pattern.search(text):
                return label
    return None


def match_standalone_heading(text: str) -> str | None:
    """Return the block label ``text`` names in full, or None."""
    for label, pattern in STANDALONE_HEADING_PATTERNS.items():
        if pattern.fullmatch(text.strip()):
            return label
    return None


# ── Content categories ───────────────────────────────────────────────
# Priority order: instruction, care plan, background, findings.
# "assessment" appears in both instruction and findings; instruction wins.

CATEGORY_PATTERNS: dict[Category, list[Pattern[str]]] = {
    Category.INSTRUCTION: _terms(
        "simulation",
        "learning",
        "education",
        "competenc",
        "objective",
        "skill",
        "training",
        "assessment",
        "evaluation",
        "scenario",
        "debrief",
        "teaching",
        "pitfall",
        "reflection",
    ),
    Category.CARE_PLAN: _terms(
        "treatment",
        "medication",
        "therapy",
        "prescri",
        "dosage",
        "intervention",
        "management",
        "care plan",
        "drug",
        "administer",
        "dose",
        "regimen",
    ),
    Category.BACKGROUND: _terms(
        "history",
        "demographic",
        "allerg",
        "past medical",
        "family history",
        "social",
        "living situation",
        "occupation",
        "patient background",
    ),
    Category.FINDINGS: _terms(
        "vital sign",
        "lab",
        "diagnostic",
        "symptom",
        "physical exam",
        "finding",
        "presentation",
        "chief complaint",
        "imaging",
        "result",
    ),
}

# ── Sub-headings inside known blocks ─────────────────────────────────

LAB_HEADING_PATTERN: Pattern[str] = re.compile(
    r"\b(?:lab(?:oratory)?(?:\s+(?:results?|values|data|studies|findings))?|labs|blood\s+work|"
    r"chemistry|hematology|CBC|BMP|CMP|ABG|arterial\s+blood\s+gas)\b",
    re.IGNORECASE,
)
VITALS_HEADING_PATTERN: Pattern[str] = re.compile(r"\bvital(?:\s+signs?|s)?\b", re.IGNORECASE)
EXAM_HEADING_PATTERN: Pattern[str] = re.compile(
    r"\b(?:physical\s+exam(?:ination)?|exam(?:ination)?\s+findings|physical\s+findings)\b",
    re.IGNORECASE,
)
ASSESSMENT_HEADING_PATTERN: Pattern[str] = re.compile(
    r"\b(?:initial\s+assessment|assessment|impression|working\s+diagnosis)\b",
    re.IGNORECASE,
)
