"""Subject background extraction: labeled pass with a keyword fallback.

The labeled pass reads ``Label: value`` entries (``- Age: 72 years``) and is
trusted.  When it fills fewer than ``MIN_PRECISE_FIELDS`` fields the text
probably uses unfamiliar labels or prose, so a looser keyword pass over
paragraph sections fills whatever is still missing.
"""

from __future__ import annotations

import logging
import re
from typing import Pattern

from simcase.models import Allergy, ContentKind, Medication, PatientBackground
from simcase.structuring.splitter import split
from simcase.structuring.text_utils import entries, sentences, split_list, strip_quotes

log = logging.getLogger(__name__)

MIN_PRECISE_FIELDS = 3

_SCALAR_FIELDS = frozenset({
    "name",
    "age",
    "gender",
    "occupation",
    "chief_complaint",
    "history_of_present_illness",
    "living_situation",
    "smoking_history",
    "alcohol_use",
    "drug_use",
})

# Field -> label pattern, first match wins.
_FIELD_LABELS: list[tuple[str, Pattern[str]]] = [
    ("name", re.compile(r"^(?:patient\s+|full\s+)?name\b", re.IGNORECASE)),
    ("age", re.compile(r"^age\b", re.IGNORECASE)),
    ("gender", re.compile(r"^(?:gender|sex)\b", re.IGNORECASE)),
    ("occupation", re.compile(r"^(?:occupation|profession|job|employment)\b", re.IGNORECASE)),
    ("chief_complaint", re.compile(
        r"^(?:chief\s+complaint|presenting\s+(?:complaint|concern|problem)|reason\s+for\s+visit)\b",
        re.IGNORECASE,
    )),
    ("history_of_present_illness", re.compile(
        r"(?:history\s+of\s+(?:the\s+)?present(?:ing)?\s+illness|\bHPI\b)", re.IGNORECASE,
    )),
    ("conditions", re.compile(
        r"^(?:past\s+medical\s+history|medical\s+history|PMH|prior\s+conditions|comorbidities|past\s+history)\b",
        re.IGNORECASE,
    )),
    ("medications", re.compile(r"^(?:current\s+|home\s+)?(?:medications?|meds)\b", re.IGNORECASE)),
    ("allergies", re.compile(r"^(?:drug\s+)?allerg(?:y|ies)\b", re.IGNORECASE)),
    ("social_history", re.compile(r"^social\s+(?:history|context)\b", re.IGNORECASE)),
    ("living_situation", re.compile(r"^(?:living\s+situation|living\s+arrangements?|home\s+situation|housing)\b", re.IGNORECASE)),
    ("smoking_history", re.compile(r"^(?:smoking(?:\s+history)?|tobacco(?:\s+use)?)\b", re.IGNORECASE)),
    ("alcohol_use", re.compile(r"^(?:alcohol(?:\s+use)?|EtOH)\b", re.IGNORECASE)),
    ("drug_use", re.compile(r"^(?:drug\s+use|substance\s+use|illicit\s+drugs?|recreational\s+drugs?)\b", re.IGNORECASE)),
    ("family_history", re.compile(r"^(?:family\s+history|FHx|FH)\b", re.IGNORECASE)),
]

# Social-history sentences are routed by keyword, first match wins.
_SOCIAL_KEYWORDS: list[tuple[str, Pattern[str]]] = [
    ("smoking_history", re.compile(r"\b(?:smok|tobacco|cigar|vap|pack[\s-]+years?|packs?\s+per)", re.IGNORECASE)),
    ("alcohol_use", re.compile(r"\b(?:alcohol|drinks?|drinking|EtOH|beer|wine|liquor)", re.IGNORECASE)),
    ("drug_use", re.compile(r"\b(?:drugs?|substance|illicit|marijuana|cannabis|cocaine|opioid|heroin)", re.IGNORECASE)),
]

# A dose token is a number (optionally a ratio like 250/50) followed by a unit.
_DOSE_RE = re.compile(
    r"(?<![\w.])\d+(?:\.\d+)?(?:/\d+(?:\.\d+)?)*\s*"
    r"(?:mcg|mg|g|kg|mL|ml|L|units?|IU|mEq|mmol|puffs?|tabs?|tablets?|caps?|capsules?|drops?|sprays?|patch(?:es)?|%)"
    r"(?![A-Za-z])",
    re.IGNORECASE,
)
_DOSE_GAP_RE = re.compile(r"^[\s/,+&x-]*$")
_ALLERGY_RE = re.compile(r"^(?P<allergen>.*?)\s*\((?P<reaction>[^()]*)\)\s*\.?$")

_AGE_RE = re.compile(r"\b(\d{1,3})[\s-]*(?:years?|yrs?|y/?o)\b(?:[\s-]*old)?", re.IGNORECASE)
_GENDER_RE = re.compile(r"\b(male|female|man|woman|boy|girl)\b", re.IGNORECASE)
_NAME_RE = re.compile(r"\b(?:named|name\s+is)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)")
_GENDER_NORMAL = {"man": "Male", "boy": "Male", "male": "Male", "woman": "Female", "girl": "Female", "female": "Female"}

# Keyword fallback: section title pattern -> field.
_FALLBACK_SECTIONS: list[tuple[str, Pattern[str]]] = [
    ("medications", re.compile(r"\bmedication|\bmeds\b", re.IGNORECASE)),
    ("allergies", re.compile(r"\ballerg", re.IGNORECASE)),
    ("family_history", re.compile(r"\bfamily\b", re.IGNORECASE)),
    ("social_history", re.compile(r"\bsocial\b", re.IGNORECASE)),
    ("history_of_present_illness", re.compile(r"\bpresent\s+illness|\bHPI\b|\bhistory\s+of\s+present", re.IGNORECASE)),
    ("conditions", re.compile(r"\b(?:medical\s+history|past\s+history|conditions|diagnos)", re.IGNORECASE)),
    ("chief_complaint", re.compile(r"\bcomplaint|\bpresenting", re.IGNORECASE)),
    ("occupation", re.compile(r"\boccupation|\bjob\b|\bwork", re.IGNORECASE)),
]


def parse_medication(line: str) -> Medication:
    """Split a medication line at the start of its last run of dose tokens."""
    text = line.strip().rstrip(".")
    matches = list(_DOSE_RE.finditer(text))
    if not matches:
        return Medication(name=text)
    run_start = matches[-1].start()
    for previous, current in zip(reversed(matches[:-1]), reversed(matches)):
        if not _DOSE_GAP_RE.match(text[previous.end():current.start()]):
            break
        run_start = previous.start()
    name = text[:run_start].strip(" ,-")
    if not name:
        return Medication(name=text)
    return Medication(name=name, dosage=text[run_start:].strip())


def parse_allergy(text: str) -> Allergy:
    """Split ``Penicillin (rash)`` into allergen and reaction."""
    match = _ALLERGY_RE.match(text.strip())
    if match is None or not match.group("allergen"):
        return Allergy(allergen=text.strip().rstrip("."))
    return Allergy(allergen=match.group("allergen").strip(), reaction=match.group("reaction").strip())


def _field_for(label: str) -> str | None:
    for name, pattern in _FIELD_LABELS:
        if pattern.search(label):
            return name
    return None


def _split_social(text: str) -> dict[str, str]:
    """Route social-history sentences to smoking, alcohol, drug or living fields."""
    buckets: dict[str, list[str]] = {}
    for sentence in sentences(text):
        target = "living_situation"
        for name, pattern in _SOCIAL_KEYWORDS:
            if pattern.search(sentence):
                target = name
                break
        buckets.setdefault(target, []).append(sentence)
    return {name: " ".join(parts) for name, parts in buckets.items()}


def _apply(values: dict, field_name: str, entry_value: str, children: list[str]) -> None:
    """Merge one labeled value into ``values``; first value wins for scalars."""
    if field_name == "social_history":
        for name, text in _split_social(" ".join([entry_value, *children]).strip()).items():
            values.setdefault(name, text)
        return
    if field_name in _SCALAR_FIELDS:
        text = strip_quotes(" ".join(part for part in [entry_value, *children] if part))
        if text:
            values.setdefault(field_name, text)
        return

    items = split_list(entry_value) if entry_value else []
    items.extend(child.strip().rstrip(".") for child in children if child.strip())
    if field_name == "medications":
        parsed: list = [parse_medication(item) for item in items]
    elif field_name == "allergies":
        parsed = [parse_allergy(item) for item in items]
    else:
        parsed = items
    values.setdefault(field_name, []).extend(parsed)


def parse_background(text: str) -> tuple[PatientBackground, str]:
    """Labeled pass; returns the record and the raw lines it did not recognize."""
    values: dict = {}
    leftover: list[str] = []
    for entry in entries(text):
        field_name = _field_for(entry.label) if entry.label else None
        if field_name is None:
            leftover.extend(entry.raw)
            continue
        _apply(values, field_name, entry.value, entry.children)
    return PatientBackground(**values), "\n".join(leftover)


def _fallback_background(text: str) -> PatientBackground:
    """Keyword pass over paragraph sections plus free-text identity patterns."""
    values: dict = {}
    for section in split(text):
        for field_name, pattern in _FALLBACK_SECTIONS:
            if not pattern.search(section.title):
                continue
            if section.content_kind == ContentKind.TEXT:
                _apply(values, field_name, str(section.content), [])
            else:
                _apply(values, field_name, "", list(section.content))
            break

    match = _AGE_RE.search(text)
    if match:
        values.setdefault("age", f"{match.group(1)} years")
    match = _GENDER_RE.search(text)
    if match:
        values.setdefault("gender", _GENDER_NORMAL[match.group(1).lower()])
    match = _NAME_RE.search(text)
    if match:
        values.setdefault("name", match.group(1))
    return PatientBackground(**values)


def extract_background(text: str) -> PatientBackground:
    """Extract the subject background from ``text``; never raises."""
    return parse_background_with_fallback(text)[0]


def parse_background_with_fallback(text: str) -> tuple[PatientBackground, str]:
    background, leftover = parse_background(text)
    populated = background.populated_fields()
    if populated < MIN_PRECISE_FIELDS:
        log.debug("Labeled pass found %d fields; running keyword fallback", populated)
        background = background.fill_missing(_fallback_background(text))
    return background, leftover


__all__ = [
    "MIN_PRECISE_FIELDS",
    "extract_background",
    "parse_allergy",
    "parse_background",
    "parse_background_with_fallback",
    "parse_medication",
]
