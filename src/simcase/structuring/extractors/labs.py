"""Laboratory result extraction.

A lab line carries a name, a numeric result with an optional unit, an
optional bracketed reference range and an optional flag token::

    Glucose: 110 mg/dL [Reference: 70-99 mg/dL]
    WBC 12.5 (H)
    Potassium 5.9 mmol/L Critical

Abnormality comes from the flag when present, then from comparing the
result to a numeric range, then from the keyword heuristic.
"""

from __future__ import annotations

import re

from simcase.models import LabResult
from simcase.structuring.abnormality import is_likely_abnormal
from simcase.structuring.patterns import LAB_HEADING_PATTERN
from simcase.structuring.text_utils import clean_inline, split_label, strip_marker, subheading_of

KNOWN_LABS = frozenset({
    "a1c", "abg", "albumin", "alk phos", "alkaline phosphatase", "alt", "ammonia", "amylase",
    "anion gap", "aptt", "ast", "base excess", "bicarbonate", "bilirubin", "bnp", "bun",
    "calcium", "chloride", "ck", "co2", "cortisol", "creatinine", "crp", "d-dimer", "esr",
    "ferritin", "fibrinogen", "glucose", "hba1c", "hco3", "hct", "hematocrit", "hemoglobin",
    "hgb", "inr", "lactate", "ldh", "lipase", "magnesium", "nt-probnp", "paco2", "pao2",
    "pco2", "ph", "phosphorus", "platelets", "plt", "po2", "potassium", "procalcitonin",
    "pt", "ptt", "rbc", "sodium", "total bilirubin", "troponin", "tsh", "wbc",
})

_FLAG_TRUE = frozenset({"H", "L", "HH", "LL", "A", "C", "HIGH", "LOW", "ABNORMAL", "CRITICAL", "*"})

_RANGE_RE = re.compile(
    r"\[\s*(?:(?:reference|ref|normal)(?:\s+range)?\s*:?\s*)?(?P<range>[^\]]*)\]",
    re.IGNORECASE,
)
_RESULT_RE = re.compile(
    r"^(?P<name>[A-Za-z][A-Za-z0-9 ,'()/+\-]*?)\s*(?:[:=]\s*|\s+)"
    r"(?P<value>[<>]?\d+(?:,\d{3})*(?:\.\d+)?)(?P<star>\*)?\s*(?P<rest>.*)$"
)
_UNIT_RE = re.compile(r"^(?P<unit>[A-Za-zµμ%][A-Za-z0-9µμ%^]*(?:/[A-Za-z0-9µμ.^]+)*)")
_BARE_UNITS = frozenset({
    "%", "g", "mg", "mcg", "ng", "pg", "ml", "l", "u", "iu", "units", "mmhg", "meq", "mmol",
    "sec", "seconds", "s", "fl", "ratio", "k", "mm",
})
_PAREN_FLAG_RE = re.compile(r"\(\s*(HH|LL|H|L|A|C|N)\s*\)")
_WORD_FLAG_RE = re.compile(r"\b(high|low|abnormal|critical|normal)\b", re.IGNORECASE)
_STAR_FLAG_RE = re.compile(r"(?:^|\s)\*+(?:\s|$)")
_RANGE_SPAN_RE = re.compile(r"(?P<low>\d+(?:\.\d+)?)\s*(?:-|–|to)\s*(?P<high>\d+(?:\.\d+)?)")
_RANGE_BOUND_RE = re.compile(r"(?P<op>[<>]=?|≤|≥)\s*(?P<bound>\d+(?:\.\d+)?)")
_PART_SPLIT_RE = re.compile(r",\s*(?!\d)(?![^\[]*\])")


def _parse_flag(rest: str, star: bool) -> str:
    match = _PAREN_FLAG_RE.search(rest)
    if match:
        return match.group(1)
    match = _WORD_FLAG_RE.search(rest)
    if match:
        return match.group(1).capitalize()
    if star or _STAR_FLAG_RE.search(rest):
        return "*"
    return ""


def compare_to_range(value: str, reference_range: str) -> bool | None:
    """True/False when the result falls outside/inside a numeric range; None if unparseable."""
    try:
        number = float(value.lstrip("<>").replace(",", ""))
    except ValueError:
        return None
    span = _RANGE_SPAN_RE.search(reference_range)
    if span:
        return number < float(span.group("low")) or number > float(span.group("high"))
    bound = _RANGE_BOUND_RE.search(reference_range)
    if bound:
        limit = float(bound.group("bound"))
        op = bound.group("op")
        if op in ("<", "<=", "≤"):
            return number >= limit if op == "<" else number > limit
        return number <= limit if op == ">" else number < limit
    return None


def _is_known_lab(name: str) -> bool:
    key = name.lower().strip()
    if key in KNOWN_LABS:
        return True
    first = key.split(" ")[0] if key else ""
    return first in KNOWN_LABS


def parse_lab_line(line: str) -> LabResult | None:
    """Parse one ``name value [range] flag`` fragment; None when it has no numeric result."""
    text = clean_inline(strip_marker(line))
    reference_range = ""
    range_match = _RANGE_RE.search(text)
    if range_match:
        reference_range = range_match.group("range").strip()
        text = (text[:range_match.start()] + " " + text[range_match.end():]).strip()

    match = _RESULT_RE.match(text)
    if match is None:
        return None
    name = match.group("name").strip(" ,")
    if not name or not any(char.isalpha() for char in name):
        return None
    value = match.group("value")
    rest = match.group("rest").strip()

    unit = ""
    unit_match = _UNIT_RE.match(rest)
    if unit_match:
        token = unit_match.group("unit")
        if "/" in token or "%" in token or token.lower() in _BARE_UNITS:
            unit = token
            rest = rest[unit_match.end():].strip()

    flag = _parse_flag(rest, bool(match.group("star")))
    if flag:
        is_abnormal = flag.upper() in _FLAG_TRUE
    else:
        by_range = compare_to_range(value, reference_range) if reference_range else None
        is_abnormal = by_range if by_range is not None else is_likely_abnormal(rest)

    return LabResult(
        name=name,
        value=value,
        unit=unit,
        reference_range=reference_range,
        flag=flag,
        is_abnormal=is_abnormal,
    )


def _parse_fragments(line: str) -> tuple[list[LabResult], bool]:
    """Parse a line that may hold several comma-separated results.

    The flag is False when some fragment of a multi-result line did not parse.
    """
    whole = parse_lab_line(line)
    parts = _PART_SPLIT_RE.split(clean_inline(strip_marker(line)))
    if len(parts) == 1:
        return ([whole] if whole else []), whole is not None
    results = [lab for lab in (parse_lab_line(part) for part in parts) if lab is not None]
    if results:
        return results, len(results) == len([part for part in parts if part.strip()])
    return ([whole] if whole else []), whole is not None


def parse_lab_results(text: str, *, lab_block: bool = False) -> tuple[list[LabResult], list[str]]:
    """Extract lab results and return them with the lines they did not consume.

    Inside a lab-headed block (``lab_block=True`` or under a lab sub-heading)
    every line with a numeric result counts.  Elsewhere only known lab names
    or lines carrying a bracketed reference range are accepted.  Names are
    deduplicated, first wins; a line with a repeated name, an unparsed
    fragment or no accepted result is handed back unconsumed.
    """
    results: list[LabResult] = []
    unconsumed: list[str] = []
    seen: set[str] = set()
    in_labs = lab_block
    for raw_line in text.splitlines():
        if not raw_line.strip():
            continue
        heading = subheading_of(raw_line)
        parts = split_label(raw_line)
        if heading is None and parts is not None and not parts[1]:
            heading = parts[0]
        if heading is not None:
            in_labs = lab_block or bool(LAB_HEADING_PATTERN.search(heading))
            continue

        candidates, complete = _parse_fragments(raw_line)
        if not candidates and parts is not None:
            candidates, complete = _parse_fragments(parts[1])
            label_is_lab = bool(LAB_HEADING_PATTERN.search(parts[0]))
        else:
            label_is_lab = False

        taken = 0
        for lab in candidates:
            accepted = in_labs or label_is_lab or _is_known_lab(lab.name) or bool(lab.reference_range)
            key = lab.name.lower()
            if accepted and key not in seen:
                seen.add(key)
                results.append(lab)
                taken += 1
        if not complete or taken < len(candidates) or not candidates:
            unconsumed.append(clean_inline(strip_marker(raw_line)))
    return results, unconsumed


def extract_lab_results(text: str, *, lab_block: bool = False) -> list[LabResult]:
    """Extract lab results from ``text``; see :func:`parse_lab_results`."""
    return parse_lab_results(text, lab_block=lab_block)[0]
