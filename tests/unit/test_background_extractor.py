"""Tests for subject background extraction."""

from __future__ import annotations

from simcase.models import Allergy, Medication
from simcase.structuring.extractors.background import (
    extract_background,
    parse_allergy,
    parse_background,
    parse_medication,
)

PATIENT_BLOCK = """\
- Name: Harold Jenkins
- Age: 72 years
- Gender: Male
- Occupation: Retired factory worker (sheet metal)
- Chief complaint: "I can't catch my breath... worse than usual"
- Brief history of present illness: Worsening shortness of breath over 3 days.
- Past medical history: COPD diagnosed 8 years ago, hypertension, type 2 diabetes
- Medications:
  - Albuterol inhaler 2 puffs q4-6h PRN
  - Fluticasone/salmeterol 250/50 mcg inhaled BID
  - Lisinopril 10 mg daily
- Allergies: Penicillin (rash)
- Social history: Lives alone in a single-story home. 40-year smoking history, quit 5 years ago. Occasional alcohol use. No illicit drug use.
- Family history: Father died of emphysema, mother had heart disease.
"""


class TestParseMedication:
    def test_splits_at_dose(self) -> None:
        assert parse_medication("Lisinopril 10 mg daily") == Medication(name="Lisinopril", dosage="10 mg daily")

    def test_ratio_dose(self) -> None:
        med = parse_medication("Fluticasone/salmeterol 250/50 mcg inhaled BID")
        assert med.name == "Fluticasone/salmeterol"
        assert med.dosage == "250/50 mcg inhaled BID"

    def test_last_dose_run_wins(self) -> None:
        med = parse_medication("Albuterol 2.5mg/Ipratropium 0.5mg nebulized")
        assert med.name == "Albuterol 2.5mg/Ipratropium"
        assert med.dosage == "0.5mg nebulized"

    def test_no_dose(self) -> None:
        assert parse_medication("Appropriate for existing conditions") == Medication(
            name="Appropriate for existing conditions"
        )


class TestParseAllergy:
    def test_with_reaction(self) -> None:
        assert parse_allergy("Penicillin (rash)") == Allergy(allergen="Penicillin", reaction="rash")

    def test_without_reaction(self) -> None:
        assert parse_allergy("Sulfa drugs.") == Allergy(allergen="Sulfa drugs")


class TestParseBackground:
    def test_identity_fields(self) -> None:
        background, leftover = parse_background(PATIENT_BLOCK)
        assert background.name == "Harold Jenkins"
        assert background.age == "72 years"
        assert background.gender == "Male"
        assert background.occupation == "Retired factory worker (sheet metal)"
        assert leftover == ""

    def test_chief_complaint_quotes_stripped(self) -> None:
        background, _ = parse_background(PATIENT_BLOCK)
        assert background.chief_complaint == "I can't catch my breath... worse than usual"

    def test_history_fields(self) -> None:
        background, _ = parse_background(PATIENT_BLOCK)
        assert background.history_of_present_illness.startswith("Worsening shortness of breath")
        assert background.conditions == ["COPD diagnosed 8 years ago", "Hypertension", "Type 2 diabetes"]
        assert background.family_history == ["Father died of emphysema", "Mother had heart disease"]

    def test_nested_medications(self) -> None:
        background, _ = parse_background(PATIENT_BLOCK)
        assert [m.name for m in background.medications] == [
            "Albuterol inhaler",
            "Fluticasone/salmeterol",
            "Lisinopril",
        ]
        assert background.medications[0].dosage == "2 puffs q4-6h PRN"

    def test_allergies(self) -> None:
        background, _ = parse_background(PATIENT_BLOCK)
        assert background.allergies == [Allergy(allergen="Penicillin", reaction="rash")]

    def test_social_history_split_by_topic(self) -> None:
        background, _ = parse_background(PATIENT_BLOCK)
        assert background.living_situation == "Lives alone in a single-story home."
        assert background.smoking_history == "40-year smoking history, quit 5 years ago."
        assert background.alcohol_use == "Occasional alcohol use."
        assert background.drug_use == "No illicit drug use."

    def test_unknown_labels_are_leftover(self) -> None:
        background, leftover = parse_background("- Name: Ana Ruiz\n- Favourite food: Tacos")
        assert background.name == "Ana Ruiz"
        assert leftover == "- Favourite food: Tacos"

    def test_first_scalar_value_wins(self) -> None:
        background, _ = parse_background("- Age: 40 years\n- Age: 41 years")
        assert background.age == "40 years"


class TestFallback:
    def test_free_text_identity(self) -> None:
        background = extract_background("The patient, named Maria Lopez, is a 45-year-old woman.")
        assert background.name == "Maria Lopez"
        assert background.age == "45 years"
        assert background.gender == "Female"

    def test_keyword_sections(self) -> None:
        text = "Medications:\n- Metformin 500 mg BID\n\nAllergies:\n- Latex (hives)"
        background = extract_background(text)
        assert background.medications == [Medication(name="Metformin", dosage="500 mg BID")]
        assert background.allergies == [Allergy(allergen="Latex", reaction="hives")]

    def test_precise_pass_not_overridden(self) -> None:
        background = extract_background(PATIENT_BLOCK)
        assert background.name == "Harold Jenkins"

    def test_empty_text(self) -> None:
        assert extract_background("").populated_fields() == 0
