"""Vital-sign extraction with fixed adult clinical thresholds."""

from __future__ import annotations

import re
from typing import Callable, NamedTuple, Pattern

from simcase.models import VitalSign
from simcase.structuring.abnormality import is_likely_abnormal
from simcase.structuring.text_utils import clean_inline, split_label, strip_marker

HEART_RATE = "Heart Rate"
RESPIRATORY_RATE = "Respiratory Rate"
BLOOD_PRESSURE = "Blood Pressure"
TEMPERATURE = "Temperature"
OXYGEN_SATURATION = "Oxygen Saturation"
CONSCIOUSNESS = "Consciousness"
EARLY_WARNING_SCORE = "Early Warning Score"

# Unitless temperatures above this are read as Fahrenheit.
FAHRENHEIT_CUTOFF = 45.0
EWS_ALERT_THRESHOLD = 5


class _VitalRule(NamedTuple):
    name: str
    pattern: Pattern[str]
    default_range: str


_RULES: list[_VitalRule] = [
    _VitalRule(
        HEART_RATE,
        re.compile(
            r"\b(?:heart\s+rate|pulse(?:\s+rate)?|HR)\b\s*[:=]?\s*(?P<value>\d{2,3})\s*"
            r"(?P<unit>bpm|beats?\s*(?:/|per)\s*min(?:ute)?)?",
            re.IGNORECASE,
        ),
        "60-100 bpm",
    ),
    _VitalRule(
        RESPIRATORY_RATE,
        re.compile(
            r"\b(?:respiratory\s+rate|resp(?:iratory)?(?:irations)?|RR)\b\s*[:=]?\s*(?P<value>\d{1,2})\s*"
            r"(?P<unit>breaths?\s*(?:/|per)\s*min(?:ute)?|/\s*min|bpm)?",
            re.IGNORECASE,
        ),
        "12-20 breaths/min",
    ),
    _VitalRule(
        BLOOD_PRESSURE,
        re.compile(
            r"\b(?:blood\s+pressure|BP)\b\s*[:=]?\s*(?P<value>\d{2,3}\s*/\s*\d{2,3})\s*(?P<unit>mm\s*Hg)?",
            re.IGNORECASE,
        ),
        "90-140/60-90 mmHg",
    ),
    _VitalRule(
        TEMPERATURE,
        re.compile(
            r"\b(?:temperature|temp)\b\.?\s*[:=]?\s*(?P<value>\d{2,3}(?:\.\d+)?)\s*"
            r"(?P<unit>[°º]\s*[CF]|degrees?\s*[CF]|[CF](?![A-Za-z]))?",
            re.IGNORECASE,
        ),
        "36.0-38.0 °C",
    ),
    _VitalRule(
        OXYGEN_SATURATION,
        re.compile(
            r"\b(?:oxygen\s+saturation|O2\s*sat(?:uration)?|SpO2|SaO2|sat(?:uration)?s?)\b\s*[:=]?\s*"
            r"(?P<value>\d{2,3})\s*(?P<unit>%)?",
            re.IGNORECASE,
        ),
        "95-100%",
    ),
    _VitalRule(
        CONSCIOUSNESS,
        re.compile(
            r"\b(?:level\s+of\s+consciousness|consciousness|LOC|mental\s+status|AVPU)\b\s*:\s*"
            r"(?P<value>[^,;\n]+)",
            re.IGNORECASE,
        ),
        "Alert",
    ),
    _VitalRule(
        EARLY_WARNING_SCORE,
        re.compile(
            r"\b(?:(?:national\s+)?early\s+warning\s+score|NEWS2?|MEWS|PEWS|EWS)\b\s*[:=]?\s*(?P<value>\d{1,2})",
            re.IGNORECASE,
        ),
        "0-4",
    ),
]

_GENERIC_VALUE_RE = re.compile(r"^(?P<value>[<>]?\d+(?:\.\d+)?(?:\s*/\s*\d+(?:\.\d+)?)?)\s*(?P<unit>.*)$")
_QUALIFIER_STRIP = " ,;.-"


def _to_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _rate_check(low: float, high: float) -> Callable[[str, str], bool]:
    def check(value: str, unit: str) -> bool:
        number = _to_float(value)
        return number is not None and (number > high or number < low)

    return check


def _blood_pressure_abnormal(value: str, unit: str) -> bool:
    systolic, _, diastolic = value.replace(" ", "").partition("/")
    sys_value, dia_value = _to_float(systolic), _to_float(diastolic)
    if sys_value is None or dia_value is None:
        return False
    return sys_value > 140 or sys_value < 90 or dia_value > 90 or dia_value < 60


def is_fahrenheit(value: float, unit: str) -> bool:
    unit = unit.upper()
    if "F" in unit:
        return True
    if "C" in unit:
        return False
    return value > FAHRENHEIT_CUTOFF


def _temperature_abnormal(value: str, unit: str) -> bool:
    number = _to_float(value)
    if number is None:
        return False
    if is_fahrenheit(number, unit):
        return number > 100.4 or number < 96.8
    return number > 38.0 or number < 36.0


def _consciousness_abnormal(value: str, unit: str) -> bool:
    text = value.strip()
    return not text.lower().startswith("alert") or is_likely_abnormal(text)


def _ews_abnormal(value: str, unit: str) -> bool:
    number = _to_float(value)
    return number is not None and number >= EWS_ALERT_THRESHOLD


_CHECKS: dict[str, Callable[[str, str], bool]] = {
    HEART_RATE: _rate_check(60, 100),
    RESPIRATORY_RATE: _rate_check(12, 20),
    BLOOD_PRESSURE: _blood_pressure_abnormal,
    TEMPERATURE: _temperature_abnormal,
    OXYGEN_SATURATION: _rate_check(95, 100),
    CONSCIOUSNESS: _consciousness_abnormal,
    EARLY_WARNING_SCORE: _ews_abnormal,
}


def _normal_range(rule: _VitalRule, value: str, unit: str) -> str:
    if rule.name == TEMPERATURE:
        number = _to_float(value)
        if number is not None and is_fahrenheit(number, unit):
            return "96.8-100.4 °F"
    return rule.default_range


def _normalize_unit(name: str, unit: str) -> str:
    unit = re.sub(r"\s+", "", unit or "")
    if name == TEMPERATURE and unit:
        return "°F" if "F" in unit.upper() else "°C"
    if name == BLOOD_PRESSURE and unit:
        return "mmHg"
    return unit


def _known_vitals(line: str) -> list[VitalSign]:
    """All recognized vitals on one line, left to right, overlaps dropped."""
    found: list[tuple[int, int, _VitalRule, re.Match[str]]] = []
    for rule in _RULES:
        for match in rule.pattern.finditer(line):
            found.append((match.start(), match.end(), rule, match))
    found.sort(key=lambda item: item[0])

    accepted: list[tuple[int, int, _VitalRule, re.Match[str]]] = []
    for item in found:
        if accepted and item[0] < accepted[-1][1]:
            continue
        accepted.append(item)

    vitals: list[VitalSign] = []
    for index, (_, end, rule, match) in enumerate(accepted):
        value = match.group("value").strip()
        unit = _normalize_unit(rule.name, match.groupdict().get("unit") or "")
        next_start = accepted[index + 1][0] if index + 1 < len(accepted) else len(line)
        qualifier = line[end:next_start].strip(_QUALIFIER_STRIP)
        if rule.name == BLOOD_PRESSURE:
            value = value.replace(" ", "")
        vitals.append(VitalSign(
            name=rule.name,
            value=value,
            unit=unit,
            normal_range=_normal_range(rule, value, unit),
            qualifier=qualifier if rule.name != CONSCIOUSNESS else "",
            is_abnormal=_CHECKS[rule.name](value, unit),
        ))
    return vitals


def _generic_vital(line: str) -> VitalSign | None:
    parts = split_label(line)
    if parts is None or not parts[1]:
        return None
    label, raw_value = parts
    match = _GENERIC_VALUE_RE.match(raw_value)
    if match is not None:
        value, unit = match.group("value"), match.group("unit").strip()
    else:
        value, unit = raw_value, ""
    return VitalSign(name=label, value=value, unit=unit, is_abnormal=is_likely_abnormal(raw_value))


def parse_vital_signs(text: str, *, include_generic: bool = True) -> tuple[list[VitalSign], list[str]]:
    """Extract vital signs and return them with the lines they did not consume.

    Several vitals on one line are all captured.  The first reading of each
    recognized vital wins; a line carrying a repeat reading is handed back
    with the unconsumed lines so the repeat is not lost.  With
    ``include_generic``, any other ``label: value`` line becomes a generic
    vital flagged by the abnormality heuristic.
    """
    vitals: list[VitalSign] = []
    unconsumed: list[str] = []
    seen: set[str] = set()
    for raw_line in text.splitlines():
        line = clean_inline(strip_marker(raw_line))
        if not line:
            continue
        known = _known_vitals(line)
        if known:
            repeated = False
            for vital in known:
                if vital.name in seen:
                    repeated = True
                    continue
                seen.add(vital.name)
                vitals.append(vital)
            if repeated:
                unconsumed.append(line)
            continue
        generic = _generic_vital(line) if include_generic else None
        if generic is not None and generic.name.lower() not in seen:
            seen.add(generic.name.lower())
            vitals.append(generic)
        else:
            unconsumed.append(line)
    return vitals, unconsumed


def extract_vital_signs(text: str, *, include_generic: bool = True) -> list[VitalSign]:
    """Extract vital signs from ``text``; see :func:`parse_vital_signs`."""
    return parse_vital_signs(text, include_generic=include_generic)[0]
