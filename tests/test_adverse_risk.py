"""Tests for adverse risk estimation."""

from cds_src.models import RiskProbability
from cds_src.rules.adverse_risk_rules import estimate_adverse_risks, risks_for_medication

from conftest import make_record


def test_geriatric_precautions():
    with_precaution = make_record(id="a", name="Sedatol", geriatric_precautions=["confusion"])
    without = make_record(id="b", name="Plainol")

    entries = estimate_adverse_risks([with_precaution, without], age=70)

    assert len(entries) == 1
    assert entries[0].medication_name == "Sedatol"
    assert [r.to_dict() for r in entries[0].risks] == [
        {"effect": "confusion", "probability": "medium", "reason": "Geriatric patient"},
    ]


def test_geriatric_threshold_is_exclusive():
    record = make_record(geriatric_precautions=["Falls"])
    assert risks_for_medication(record, age=65) == []
    assert len(risks_for_medication(record, age=66)) == 1


def test_gender_specific_risks(reference_catalog):
    spironolactone = reference_catalog.find_by_name_or_alias("Spironolactone")

    male = risks_for_medication(spironolactone, gender="Male")
    assert [(r.effect, r.reason) for r in male] == [("Gynecomastia", "male-specific risk")]

    female = risks_for_medication(spironolactone, gender="female")
    assert [r.effect for r in female] == ["Menstrual irregularities"]

    assert risks_for_medication(spironolactone, gender="other") == []


def test_renal_accumulation(reference_catalog):
    metformin = reference_catalog.find_by_name_or_alias("Metformin")

    moderate = risks_for_medication(metformin, renal_function=45)
    assert [(r.effect, r.probability) for r in moderate] == [
        ("Medication accumulation", RiskProbability.MEDIUM),
    ]

    severe = risks_for_medication(metformin, renal_function=20)
    assert severe[0].probability == RiskProbability.HIGH
    assert severe[0].reason == "Decreased renal function"

    assert risks_for_medication(metformin, renal_function=60) == []
    assert risks_for_medication(metformin, renal_function=0)[0].probability == RiskProbability.HIGH


def test_renal_rule_needs_adjustment_flag(reference_catalog):
    warfarin = reference_catalog.find_by_name_or_alias("Warfarin")
    assert risks_for_medication(warfarin, renal_function=15) == []


def test_hepatic_impairment(reference_catalog):
    warfarin = reference_catalog.find_by_name_or_alias("Warfarin")

    risks = risks_for_medication(warfarin, hepatic_function="Impaired")
    assert [(r.effect, r.probability, r.reason) for r in risks] == [
        ("Altered metabolism", RiskProbability.HIGH, "Hepatic impairment"),
    ]
    assert risks_for_medication(warfarin, hepatic_function="normal") == []
    assert risks_for_medication(warfarin, hepatic_function="unimpaired") == []

    lisinopril = reference_catalog.find_by_name_or_alias("Lisinopril")
    assert risks_for_medication(lisinopril, hepatic_function="impaired") == []


def test_rules_are_additive(reference_catalog):
    ibuprofen = reference_catalog.find_by_name_or_alias("Ibuprofen")
    risks = risks_for_medication(ibuprofen, age=80, renal_function=25, hepatic_function="impaired")
    assert [r.effect for r in risks] == [
        "GI bleeding",
        "Acute kidney injury",
        "Medication accumulation",
        "Altered metabolism",
    ]


def test_no_patient_factors(reference_catalog):
    assert estimate_adverse_risks(list(reference_catalog.medications)) == []
