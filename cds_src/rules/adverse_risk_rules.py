"""Adverse effect risk estimation from patient factors and medication metadata."""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..models import MedicationRecord, RiskProbability

logger = logging.getLogger(__name__)

GERIATRIC_AGE = 65
RENAL_IMPAIRED_EGFR = 60
RENAL_SEVERE_EGFR = 30


@dataclass
class AdverseRisk:
    effect: str
    probability: RiskProbability
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"effect": self.effect, "probability": self.probability.value, "reason": self.reason}


@dataclass
class AdverseRiskEntry:
    """Risks triggered for one medication."""
    medication_name: str
    risks: list[AdverseRisk] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "medication_name": self.medication_name,
            "risks": [r.to_dict() for r in self.risks],
        }


def risks_for_medication(
    record: MedicationRecord,
    age: float | None = None,
    gender: str | None = None,
    renal_function: float | None = None,
    hepatic_function: str | None = None,
) -> list[AdverseRisk]:
    risks = []

    if age is not None and age > GERIATRIC_AGE:
        for precaution in record.geriatric_precautions:
            risks.append(AdverseRisk(precaution, RiskProbability.MEDIUM, "Geriatric patient"))

    if gender:
        key = gender.strip().lower()
        if key in ("male", "female"):
            for risk in record.gender_specific_risks.get(key, []):
                risks.append(AdverseRisk(risk, RiskProbability.MEDIUM, f"{key}-specific risk"))

    if renal_function is not None and renal_function < RENAL_IMPAIRED_EGFR and record.renal_adjustment:
        probability = RiskProbability.HIGH if renal_function < RENAL_SEVERE_EGFR else RiskProbability.MEDIUM
        risks.append(AdverseRisk("Medication accumulation", probability, "Decreased renal function"))

    if hepatic_function and hepatic_function.strip().lower() == "impaired" and record.hepatic_adjustment:
        risks.append(AdverseRisk("Altered metabolism", RiskProbability.HIGH, "Hepatic impairment"))

    return risks


def estimate_adverse_risks(
    records: list[MedicationRecord],
    age: float | None = None,
    gender: str | None = None,
    renal_function: float | None = None,
    hepatic_function: str | None = None,
) -> list[AdverseRiskEntry]:
    """Combine patient factors with medication metadata into risk entries.

    Rules are additive and unranked. Medications with no triggered risk are
    left out of the result.

    Args:
        records: Medications to assess
        age: Patient age in years
        gender: "male" or "female"
        renal_function: eGFR or CrCl in mL/min
        hepatic_function: Hepatic status tag, e.g. "impaired"

    Returns:
        One AdverseRiskEntry per medication with at least one risk
    """
    entries = []
    for record in records:
        risks = risks_for_medication(record, age, gender, renal_function, hepatic_function)
        if risks:
            entries.append(AdverseRiskEntry(medication_name=record.name, risks=risks))
    return entries
