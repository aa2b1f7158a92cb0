"""Keyword heuristic for abnormal clinical findings.

Last-resort signal only: numeric comparisons in the vitals and labs
extractors take precedence wherever a number and a threshold exist.
Matching is word-prefix containment with no negation handling, so
"no edema" counts as abnormal.
"""

from __future__ import annotations

import re

ABNORMAL_TERMS: tuple[str, ...] = (
    "abnormal",
    "absent",
    "accessory muscle",
    "acute",
    "agitat",
    "altered",
    "anxious",
    "arrhythmi",
    "bradycardi",
    "bradypne",
    "confus",
    "crackle",
    "critical",
    "cyanos",
    "cyanotic",
    "decreased",
    "deteriorat",
    "diaphore",
    "diminished",
    "distended",
    "distension",
    "distress",
    "drowsy",
    "dyspne",
    "edema",
    "elevated",
    "fever",
    "febrile",
    "guarding",
    "hypercapni",
    "hyperglycemi",
    "hypertens",
    "hypoglycemi",
    "hypotens",
    "hypox",
    "increased",
    "irregular",
    "jaundice",
    "labored",
    "letharg",
    "murmur",
    "nasal flaring",
    "obtunded",
    "pain",
    "pale",
    "pallor",
    "positive",
    "prolonged",
    "rales",
    "retraction",
    "rhonchi",
    "rigid",
    "severe",
    "somnolen",
    "stridor",
    "tachycardi",
    "tachypne",
    "tender",
    "unresponsive",
    "weak",
    "wheez",
)

_ABNORMAL_RE = re.compile(
    r"\b(?:" + "|".join(r"\s+".join(map(re.escape, term.split())) for term in ABNORMAL_TERMS) + ")",
    re.IGNORECASE,
)


def is_likely_abnormal(text: str) -> bool:
    """Return True when ``text`` mentions any clinical abnormality term."""
    if not text:
        return False
    return _ABNORMAL_RE.search(text) is not None
