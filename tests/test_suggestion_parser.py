"""Tests for prescription suggestion parsing and prompt construction."""

import random
import string

from cds_src.models import PatientContext
from cds_src.suggestions.parser import (
    DEFAULT_SCHEDULE,
    FIELD_LABELS,
    REASON_EMPTY,
    REASON_MISSING_HEADER,
    REASON_NO_SUGGESTIONS,
    SENTINEL_MEDICATION,
    extract_dosage,
    extract_duration,
    extract_frequency,
    extract_list_section,
    extract_name_and_detail,
    parse_suggestion_response,
    parse_suggestions,
)
from cds_src.suggestions.prompts import build_prescription_prompt

from conftest import SAMPLE_COMPLETION


def test_missing_header_returns_sentinel():
    text = "Lisinopril 10 mg once daily\nMetformin 500 mg twice daily"
    suggestions = parse_suggestions(text)

    assert len(suggestions) == 1
    assert suggestions[0].medication == SENTINEL_MEDICATION
    assert suggestions[0].is_sentinel
    assert "consult a healthcare provider" in suggestions[0].instructions

    result = parse_suggestion_response(text)
    assert not result.parsed
    assert result.reason == REASON_MISSING_HEADER


def test_empty_responses():
    for raw in ["", "   \n", None, 12]:
        result = parse_suggestion_response(raw)
        assert not result.parsed
        assert result.reason == REASON_EMPTY
        assert [s.medication for s in result.suggestions] == [SENTINEL_MEDICATION]


def test_header_without_medications():
    result = parse_suggestion_response(
        "Primary medication recommendations:\n\nNote: see a specialist.\n\nMonitoring: weekly labs"
    )
    assert not result.parsed
    assert result.reason == REASON_NO_SUGGESTIONS
    assert len(result.suggestions) == 1


def test_sample_completion():
    result = parse_suggestion_response(SAMPLE_COMPLETION)
    assert result.parsed
    assert [s.medication for s in result.suggestions] == ["Lisinopril", "Amlodipine"]

    lisinopril, amlodipine = result.suggestions
    assert lisinopril.dosage == "10 mg"
    assert lisinopril.frequency == "Once daily"
    assert lisinopril.duration == "3 months"
    assert lisinopril.instructions == "Take in the morning with water"
    assert lisinopril.warnings == ["Monitor potassium levels", "Risk of hypotension"]
    assert lisinopril.contraindications == ["Pregnancy", "History of angioedema"]
    assert lisinopril.side_effects == ["Dry cough", "Dizziness"]
    assert lisinopril.alternatives == ["Losartan", "Amlodipine"]
    assert not lisinopril.is_sentinel

    assert amlodipine.dosage == "5 mg"
    assert amlodipine.frequency == "1 times a day"
    assert amlodipine.duration == "30 days"
    assert amlodipine.instructions == ""
    assert amlodipine.side_effects == ["Ankle edema"]
    assert amlodipine.warnings == []


def test_later_sections_are_not_suggestions():
    """Losartan under "Alternative medications" is not a primary suggestion."""
    names = [s.medication for s in parse_suggestions(SAMPLE_COMPLETION)]
    assert "Losartan" not in names


def test_markdown_and_numbered_blocks():
    text = (
        "**1. Primary Medication Recommendations**\n\n"
        "1. **Amoxicillin** - 500 mg three times daily\n"
        "Duration: 10 days\n\n"
        "2. Acetaminophen: 650 mg every 6 hours as needed for fever\n\n"
        "**2. Alternative Medications**\n\n"
        "Azithromycin 500 mg\n"
    )
    suggestions = parse_suggestions(text)
    assert [s.medication for s in suggestions] == ["Amoxicillin", "Acetaminophen"]
    assert suggestions[0].dosage == "500 mg"
    assert suggestions[0].duration == "10 days"
    assert suggestions[0].frequency == DEFAULT_SCHEDULE
    assert suggestions[1].dosage == "650 mg"


def test_defaults_when_schedule_missing():
    suggestions = parse_suggestions("Primary medication recommendations:\nIbuprofen 400 mg")
    assert suggestions[0].frequency == DEFAULT_SCHEDULE
    assert suggestions[0].duration == DEFAULT_SCHEDULE


# --- Field extractors ---


def test_extract_name_and_detail():
    assert extract_name_and_detail("Metformin 500 mg twice daily") == ("Metformin", "500 mg twice daily")
    assert extract_name_and_detail("- Insulin glargine 10 units at bedtime") == (
        "Insulin glargine", "10 units at bedtime"
    )
    assert extract_name_and_detail("Ceftriaxone: 1 g IV daily") == ("Ceftriaxone", "1 g IV daily")
    assert extract_name_and_detail("Frequency: twice daily") is None
    assert extract_name_and_detail("Notes: take with food") is None
    assert extract_name_and_detail("Rest and fluids") is None
    assert extract_name_and_detail("") is None


def test_extract_name_with_parenthesized_detail():
    assert extract_name_and_detail("**Lisinopril** (10 mg daily)") == ("Lisinopril", "10 mg daily")
    assert extract_name_and_detail("Amoxicillin (500 mg three times a day) for 7 days") == (
        "Amoxicillin", "500 mg three times a day for 7 days"
    )
    # Parentheses later in the detail are kept
    assert extract_name_and_detail("Acetaminophen 500 mg (max 3 g/day)") == (
        "Acetaminophen", "500 mg (max 3 g/day)"
    )


def test_parenthesized_dose_is_parsed():
    suggestions = parse_suggestions("Primary medication recommendations:\n\n**Lisinopril** (10 mg daily)")

    assert [s.medication for s in suggestions] == ["Lisinopril"]
    assert suggestions[0].dosage == "10 mg"
    assert not suggestions[0].is_sentinel


def test_extract_dosage():
    assert extract_dosage("500 mg twice daily") == "500 mg"
    assert extract_dosage("5-10 mg/kg every 8 hours") == "5-10 mg/kg"
    assert extract_dosage("one tablet daily") == "one tablet daily"
    assert extract_dosage("1e5 mg daily") == "1e5 mg daily"


def test_extract_frequency():
    assert extract_frequency("Aspirin 81 mg\nFrequency: daily") == "daily"
    assert extract_frequency("Aspirin 81 mg two times per day") == "two times per day"
    assert extract_frequency("Aspirin 81 mg") == DEFAULT_SCHEDULE


def test_extract_duration():
    assert extract_duration("Duration: lifelong") == "lifelong"
    assert extract_duration("Take for 7 days then stop") == "7 days"
    assert extract_duration("Take for two weeks") == "two weeks"
    assert extract_duration("for pain") == DEFAULT_SCHEDULE


def test_extract_list_section():
    block = (
        "Warfarin 5 mg\n"
        "Warnings:\n"
        "* Bleeding risk\n"
        "* Check INR\n"
        "Duration: ongoing\n"
        "- Not a warning\n"
    )
    assert extract_list_section(block, FIELD_LABELS["warnings"]) == ["Bleeding risk", "Check INR"]
    assert extract_list_section(block, FIELD_LABELS["side_effects"]) == []
    assert extract_list_section("Side-effects: nausea; rash", FIELD_LABELS["side_effects"]) == ["nausea", "rash"]


def test_random_text_never_raises():
    rng = random.Random(99)
    alphabet = string.ascii_letters + string.digits + " \n\n:-*.#,;"
    for _ in range(1000):
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 120)))
        if rng.random() < 0.5:
            text = "Primary medication recommendations:\n" + text
        suggestions = parse_suggestions(text)
        assert suggestions
        assert all(s.medication for s in suggestions)


# --- Prompt ---


def test_prompt_includes_patient_context():
    patient = PatientContext(
        age_years=70,
        weight_kg=82.5,
        gender="female",
        allergies=["Penicillin"],
        current_medications=["Warfarin"],
        lab_results={"creatinine": 1.4},
    )
    prompt = build_prescription_prompt("Community acquired pneumonia", ["fever", "cough"], patient)

    assert "Community acquired pneumonia" in prompt
    assert "fever, cough" in prompt
    assert "82.5 kg" in prompt
    assert "Penicillin" in prompt
    assert "Warfarin" in prompt
    assert '"creatinine": 1.4' in prompt
    assert "Primary medication recommendations" in prompt


def test_prompt_marks_missing_values():
    prompt = build_prescription_prompt("Hypertension", ["headache"])
    assert "Unknown" in prompt
    assert "None" in prompt
    assert "creatinine" not in prompt
