"""Tests for objectives, progression, documentation, education and debrief extractors."""

from __future__ import annotations

from simcase.structuring.extractors.narrative import (
    extract_clinical_notes,
    extract_objectives,
    parse_debrief,
    parse_education,
    parse_progression,
)
from simcase.structuring.extractors.presentation import parse_exam_findings, parse_presentation


class TestObjectives:
    def test_numbered(self) -> None:
        text = "1. Recognize hypoxia\n2. Titrate oxygen\n3. Communicate clearly"
        assert extract_objectives(text) == ["Recognize hypoxia", "Titrate oxygen", "Communicate clearly"]

    def test_plain_lines(self) -> None:
        assert extract_objectives("Recognize hypoxia\nTitrate oxygen") == ["Recognize hypoxia", "Titrate oxygen"]


class TestProgression:
    def test_subheading_scenarios(self) -> None:
        text = (
            "### Scenario 1: Appropriate Management\n"
            "- Intervention: Low-flow oxygen via nasal cannula\n"
            "- Response: Respiratory rate decreases\n"
            "- Vital sign changes: HR decreases to 98 bpm\n"
            "- Further management: Continue bronchodilators\n"
            "\n"
            "### Scenario 2: Deterioration\n"
            "- Trigger: Minimal response to therapy\n"
            "- Interventions: Consider BiPAP\n"
        )
        scenarios, leftover = parse_progression(text)
        assert [s.title for s in scenarios] == ["Scenario 1: Appropriate Management", "Scenario 2: Deterioration"]
        first = scenarios[0]
        assert first.intervention == "Low-flow oxygen via nasal cannula"
        assert first.response == "Respiratory rate decreases"
        assert first.vital_sign_changes == "HR decreases to 98 bpm"
        assert first.additional_notes == ["Further management: Continue bronchodilators"]
        assert scenarios[1].intervention == "Consider BiPAP"
        assert scenarios[1].additional_notes == ["Trigger: Minimal response to therapy"]
        assert leftover == ""

    def test_numbered_items_with_children(self) -> None:
        text = (
            "1. Improvement Scenario\n"
            "   - The patient improves with treatment.\n"
            "2. Deterioration Scenario\n"
            "   - Vital signs deteriorate.\n"
        )
        scenarios, _ = parse_progression(text)
        assert [s.title for s in scenarios] == ["Improvement Scenario", "Deterioration Scenario"]
        assert scenarios[0].additional_notes == ["The patient improves with treatment."]

    def test_unclaimed_text_is_leftover(self) -> None:
        scenarios, leftover = parse_progression("Timing is flexible for this case.")
        assert scenarios == []
        assert leftover == "Timing is flexible for this case."


class TestClinicalNotes:
    def test_one_note_per_subheading(self) -> None:
        text = "### ED Note\nCHIEF COMPLAINT: Dyspnea\n\n### MAR\nPrednisone 40mg PO - GIVEN"
        notes = extract_clinical_notes(text)
        assert [n.title for n in notes] == ["ED Note", "MAR"]
        assert notes[0].content == "CHIEF COMPLAINT: Dyspnea"

    def test_untitled_text_uses_block_title(self) -> None:
        notes = extract_clinical_notes("Basic templates provided", title="Case Documentation")
        assert notes[0].title == "Case Documentation"


class TestEducation:
    def test_subheadings(self) -> None:
        text = (
            "### Teaching Points\n1. Target SpO2 88-92%\n2. Use low-flow oxygen\n\n"
            "### Common Pitfalls\n- Excess oxygen\n\n"
            "### Key Decision Points\n- Oxygen titration strategy"
        )
        section, leftover = parse_education(text)
        assert section.teaching_points == ["Target SpO2 88-92%", "Use low-flow oxygen"]
        assert section.common_pitfalls == ["Excess oxygen"]
        assert section.decision_points == ["Oxygen titration strategy"]
        assert leftover == ""

    def test_inline_labels(self) -> None:
        text = (
            "- This case addresses the learning objectives\n"
            "- Key decision points: oxygen titration, disposition\n"
            "- Critical actions: early bronchodilators"
        )
        section, _ = parse_education(text)
        assert section.teaching_points == ["This case addresses the learning objectives"]
        assert section.decision_points == ["Oxygen titration", "Disposition", "Early bronchodilators"]

    def test_unknown_subheading_is_leftover(self) -> None:
        section, leftover = parse_education("### Further Reading\nGOLD guidelines")
        assert section.teaching_points == []
        assert "Further Reading" in leftover
        assert "GOLD guidelines" in leftover


class TestDebrief:
    def test_subheadings(self) -> None:
        text = (
            "### Discussion Questions\n1. What went well?\n2. What would you change?\n\n"
            "### Expected Outcomes\n- SpO2 maintained 88-92%\n\n"
            "### Reflection Areas\n- Communication"
        )
        section, _ = parse_debrief(text)
        assert section.debrief_questions == ["What went well?", "What would you change?"]
        assert section.expected_outcomes == ["SpO2 maintained 88-92%"]
        assert section.reflection_areas == ["Communication"]

    def test_bare_questions(self) -> None:
        section, leftover = parse_debrief("- What was your first priority?\n- Thanks for participating")
        assert section.debrief_questions == ["What was your first priority?"]
        assert leftover == "- Thanks for participating"


class TestPresentation:
    def test_grouped_presentation(self) -> None:
        text = (
            "- Vital signs:\n"
            "  - Heart Rate: 106 bpm\n"
            "  - Oxygen Saturation: 88% on room air\n"
            "- Physical examination findings:\n"
            "  - Respiratory: Bilateral wheezing\n"
            "  - Abdomen: Soft\n"
            "- Initial assessment: Acute exacerbation of COPD\n"
            "- Labs: WBC 12.5 (H)\n"
        )
        findings, leftover = parse_presentation(text)
        assert [v.name for v in findings.vital_signs] == ["Heart Rate", "Oxygen Saturation"]
        assert [(f.system, f.is_abnormal) for f in findings.physical_exam] == [
            ("Respiratory", True),
            ("Abdomen", False),
        ]
        assert findings.initial_assessment == "Acute exacerbation of COPD"
        assert [lab.name for lab in findings.lab_results] == ["WBC"]
        assert leftover == ""

    def test_bare_vital_outside_group(self) -> None:
        findings, _ = parse_presentation("- BP 90/50 mmHg")
        assert findings.vital_signs[0].name == "Blood Pressure"
        assert findings.vital_signs[0].is_abnormal

    def test_unknown_entries_are_leftover(self) -> None:
        findings, leftover = parse_presentation("- Mood: Tearful")
        assert findings.vital_signs == []
        assert leftover == "- Mood: Tearful"

    def test_unparsed_group_lines_are_leftover(self) -> None:
        text = (
            "- Vital signs:\n"
            "  - HR 110 bpm\n"
            "  - Patient appears anxious and diaphoretic\n"
            "  - Heart Rate: 132 bpm after ambulation\n"
            "- Labs:\n"
            "  - Lactate 4.2 mmol/L\n"
            "  - Blood cultures drawn, results pending\n"
        )
        findings, leftover = parse_presentation(text)
        assert [v.value for v in findings.vital_signs] == ["110"]
        assert [lab.name for lab in findings.lab_results] == ["Lactate"]
        assert "Patient appears anxious and diaphoretic" in leftover
        assert "Heart Rate: 132 bpm after ambulation" in leftover
        assert "Blood cultures drawn, results pending" in leftover

    def test_exam_default_system(self) -> None:
        findings = parse_exam_findings(["Normal examination"])
        assert findings[0].system == "General"
        assert not findings[0].is_abnormal
