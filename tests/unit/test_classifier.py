"""Tests for keyword classification and the abnormality heuristic."""

from __future__ import annotations

import pytest

from simcase.models import Category
from simcase.structuring.abnormality import is_likely_abnormal
from simcase.structuring.classifier import classify


class TestClassify:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Debriefing questions for the team", Category.INSTRUCTION),
            ("Simulation scenario setup", Category.INSTRUCTION),
            ("Medication administration schedule", Category.CARE_PLAN),
            ("Treatment and management plan", Category.CARE_PLAN),
            ("Social history and living situation", Category.BACKGROUND),
            ("Known allergies", Category.BACKGROUND),
            ("Vital signs on arrival", Category.FINDINGS),
            ("Imaging results", Category.FINDINGS),
        ],
    )
    def test_keyword_buckets(self, text: str, expected: Category) -> None:
        assert classify(text) == expected

    def test_assessment_goes_to_instruction(self) -> None:
        # "assessment" is both a findings and an instruction word; instruction wins.
        assert classify("Assessment findings") == Category.INSTRUCTION

    def test_care_plan_beats_background(self) -> None:
        assert classify("Medication history") == Category.CARE_PLAN

    def test_unmatched_defaults_to_overview(self) -> None:
        assert classify("The weather was pleasant") == Category.OVERVIEW

    def test_empty_defaults_to_overview(self) -> None:
        assert classify("") == Category.OVERVIEW

    def test_case_insensitive(self) -> None:
        assert classify("VITAL SIGNS") == Category.FINDINGS


class TestIsLikelyAbnormal:
    @pytest.mark.parametrize(
        "text",
        [
            "Bilateral wheezing",
            "Tachycardic, regular rhythm",
            "Patient appears anxious",
            "Labored breathing with accessory muscle use",
            "Elevated troponin",
        ],
    )
    def test_abnormal_terms(self, text: str) -> None:
        assert is_likely_abnormal(text)

    @pytest.mark.parametrize("text", ["Alert and oriented", "Clear to auscultation", "Regular rate", ""])
    def test_normal_text(self, text: str) -> None:
        assert not is_likely_abnormal(text)

    def test_no_negation_handling(self) -> None:
        assert is_likely_abnormal("No edema")

    def test_terms_match_at_word_start_only(self) -> None:
        # "pain" inside "Spain" is not a match.
        assert not is_likely_abnormal("Recently travelled to Spain")
