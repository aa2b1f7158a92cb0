"""Vital-sign range tables and the additive adjustments applied to them.

A baseline is picked by age band, shifted by condition severity, then
shifted once per recognized comorbidity.  Oxygen saturation is clamped to
[70, 100] last.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from simcase.parameters.models import BloodPressureRange, ClinicalRangeSet, VitalSignRange

PEDIATRIC = "pediatric"
YOUNG_ADULT = "young-adult"
MIDDLE_AGED = "middle-aged"
ELDERLY = "elderly"

DEFAULT_AGE_BAND = MIDDLE_AGED
DEFAULT_SEVERITY = "mild"
DEFAULT_SETTING = "primary-care"

O2_FLOOR = 70
O2_CEILING = 100


def _ranges(
    hr: tuple[float, float],
    rr: tuple[float, float],
    systolic: tuple[float, float],
    diastolic: tuple[float, float],
    temp: tuple[float, float],
    o2: tuple[float, float],
) -> ClinicalRangeSet:
    return ClinicalRangeSet(
        heart_rate=VitalSignRange(min=hr[0], max=hr[1]),
        respiratory_rate=VitalSignRange(min=rr[0], max=rr[1]),
        blood_pressure=BloodPressureRange(
            systolic=VitalSignRange(min=systolic[0], max=systolic[1]),
            diastolic=VitalSignRange(min=diastolic[0], max=diastolic[1]),
        ),
        temperature=VitalSignRange(min=temp[0], max=temp[1]),
        oxygen_saturation=VitalSignRange(min=o2[0], max=o2[1]),
    )


AGE_BASELINES: Mapping[str, ClinicalRangeSet] = MappingProxyType({
    PEDIATRIC: _ranges((70, 120), (20, 30), (90, 110), (55, 75), (36.5, 37.5), (95, 100)),
    YOUNG_ADULT: _ranges((60, 100), (12, 20), (110, 130), (70, 80), (36.5, 37.5), (95, 100)),
    MIDDLE_AGED: _ranges((60, 100), (12, 20), (120, 140), (70, 90), (36.5, 37.5), (95, 100)),
    ELDERLY: _ranges((60, 90), (12, 20), (130, 150), (70, 90), (36.0, 37.5), (92, 95)),
})


@dataclass(frozen=True)
class SeverityAdjustment:
    """Offsets added to ``(min, max)`` of each affected range."""

    heart_rate: tuple[float, float]
    respiratory_rate: tuple[float, float]
    oxygen_saturation: tuple[float, float]
    consciousness: str | None = None


SEVERITY_ADJUSTMENTS: Mapping[str, SeverityAdjustment] = MappingProxyType({
    "mild": SeverityAdjustment((0, 10), (0, 2), (-2, 0)),
    "moderate": SeverityAdjustment((10, 20), (2, 6), (-5, -2)),
    "severe": SeverityAdjustment((20, 40), (6, 12), (-15, -5)),
    "critical": SeverityAdjustment((30, 60), (10, 20), (-30, -10), consciousness="Altered"),
})


@dataclass(frozen=True)
class SettingProfile:
    resources: tuple[str, ...]
    documents: tuple[str, ...]


SETTING_PROFILES: Mapping[str, SettingProfile] = MappingProxyType({
    "primary-care": SettingProfile(
        resources=(
            "Basic vital sign equipment",
            "Basic medication administration",
            "Limited diagnostic testing",
            "Referral capabilities",
        ),
        documents=(
            "Outpatient progress notes",
            "Medication list",
            "Basic lab results",
            "Referral forms",
        ),
    ),
    "emergency-department": SettingProfile(
        resources=(
            "Advanced monitoring equipment",
            "Emergency medications",
            "Rapid diagnostic testing",
            "Resuscitation equipment",
            "Specialist consultation",
        ),
        documents=(
            "Emergency department notes",
            "Triage assessment",
            "Diagnostic imaging reports",
            "EKG results",
            "Consultant notes",
        ),
    ),
    "inpatient-ward": SettingProfile(
        resources=(
            "Continuous monitoring",
            "IV medication administration",
            "Nursing support",
            "Daily physician rounds",
            "Rehabilitation services",
        ),
        documents=(
            "Admission history and physical",
            "Progress notes",
            "Nursing flowsheets",
            "Medication administration records",
            "Discharge planning",
        ),
    ),
    "intensive-care": SettingProfile(
        resources=(
            "Advanced continuous monitoring",
            "Ventilator support",
            "Invasive hemodynamic monitoring",
            "Vasoactive medications",
            "Continuous specialist care",
        ),
        documents=(
            "ICU flowsheets",
            "Ventilator settings",
            "Hourly assessments",
            "Invasive monitoring data",
            "Multidisciplinary notes",
        ),
    ),
    "rural-setting": SettingProfile(
        resources=(
            "Limited diagnostic equipment",
            "Basic emergency supplies",
            "Telehealth capabilities",
            "Limited specialist access",
            "Transfer protocols",
        ),
        documents=(
            "Basic clinical notes",
            "Transfer forms",
            "Telehealth consultation notes",
            "Limited diagnostic results",
        ),
    ),
})

ALL_DOCUMENTATION_TYPES: tuple[str, ...] = (
    "History and Physical",
    "Progress Notes",
    "Nursing Assessment",
    "Medication Administration Record",
    "Laboratory Results",
    "Diagnostic Imaging Reports",
    "Consultant Notes",
)

# Checked in order; first keyword hit wins.
_AGE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    (PEDIATRIC, ("pediatric", "child", "0-18")),
    (YOUNG_ADULT, ("young", "18-30", "20-40")),
    (MIDDLE_AGED, ("middle", "30-50", "40-65")),
    (ELDERLY, ("elder", "senior", "65+", "70+")),
]

_SETTING_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("primary-care", ("primary",)),
    ("emergency-department", ("emergency",)),
    ("inpatient-ward", ("inpatient", "hospital")),
    ("intensive-care", ("icu", "intensive")),
    ("rural-setting", ("rural",)),
]

_NUMBER_RE = re.compile(r"\d+")


def _first_keyword(text: str, table: list[tuple[str, tuple[str, ...]]]) -> str | None:
    lowered = text.lower()
    for key, keywords in table:
        if any(keyword in lowered for keyword in keywords):
            return key
    return None


def age_band(age_text: str) -> str:
    """Age band for free-form age text such as ``"71+ years"`` or ``"Young adult"``."""
    band = _first_keyword(age_text, _AGE_KEYWORDS)
    if band is not None:
        return band
    match = _NUMBER_RE.search(age_text)
    if match is None:
        return DEFAULT_AGE_BAND
    age = int(match.group())
    if age >= 65:
        return ELDERLY
    if age > 30:
        return MIDDLE_AGED
    if age >= 18:
        return YOUNG_ADULT
    return PEDIATRIC


def severity_level(severity_text: str) -> str:
    lowered = severity_text.lower()
    for level in SEVERITY_ADJUSTMENTS:
        if level in lowered:
            return level
    return DEFAULT_SEVERITY


def setting_key(setting_text: str) -> str:
    return _first_keyword(setting_text, _SETTING_KEYWORDS) or DEFAULT_SETTING


def compute_ranges(
    age_text: str = "",
    severity_text: str = "",
    comorbidities: Iterable[str] = (),
) -> ClinicalRangeSet:
    """Derive target vital-sign ranges; the lookup tables are never modified."""
    base = AGE_BASELINES[age_band(age_text)]
    adjustment = SEVERITY_ADJUSTMENTS[severity_level(severity_text)]

    heart_rate = base.heart_rate.shifted(*adjustment.heart_rate)
    respiratory_rate = base.respiratory_rate.shifted(*adjustment.respiratory_rate)
    oxygen_saturation = base.oxygen_saturation.shifted(*adjustment.oxygen_saturation)
    systolic = base.blood_pressure.systolic
    diastolic = base.blood_pressure.diastolic
    temperature = base.temperature

    for comorbidity in comorbidities:
        text = comorbidity.lower()
        if "hypertension" in text:
            systolic = systolic.shifted(20, 30)
            diastolic = diastolic.shifted(10, 15)
        elif "diabetes" in text:
            continue
        elif "copd" in text or "respiratory" in text:
            respiratory_rate = respiratory_rate.shifted(2, 4)
            oxygen_saturation = oxygen_saturation.shifted(-3, -2)
        elif "heart" in text or "cardiac" in text:
            heart_rate = heart_rate.shifted(5, 15)
        elif "fever" in text or "infection" in text:
            temperature = temperature.shifted(1.0, 1.5)
            heart_rate = heart_rate.shifted(10, 20)

    return ClinicalRangeSet(
        heart_rate=heart_rate,
        respiratory_rate=respiratory_rate,
        blood_pressure=BloodPressureRange(systolic=systolic, diastolic=diastolic),
        temperature=temperature,
        oxygen_saturation=oxygen_saturation.clamped(O2_FLOOR, O2_CEILING),
        consciousness=adjustment.consciousness or base.consciousness,
    )
