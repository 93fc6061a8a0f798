"""Per-patient safety screen for a single medication.

Flags allergies, contraindicated conditions, pregnancy category, age
restrictions and Beers criteria.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ..models import MedicationRecord, PatientContext, PregnancyCategory

logger = logging.getLogger(__name__)


class SafetyWarningType(str, Enum):
    ALLERGY = "allergy"
    CONTRAINDICATION = "contraindication"
    PREGNANCY = "pregnancy"
    AGE_RESTRICTION = "age_restriction"
    BEERS = "beers"


class SafetySeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class SafetyWarning:
    type: SafetyWarningType
    severity: SafetySeverity
    description: str

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
        }


def _check_allergies(record: MedicationRecord, patient: PatientContext) -> list[SafetyWarning]:
    names = [record.name, record.generic_name, *record.brand_names, *record.drug_classes]
    names = [n.lower() for n in names if n]

    warnings = []
    for allergy in patient.allergies:
        allergen = allergy.strip().lower()
        if allergen and allergen in names:
            warnings.append(SafetyWarning(
                SafetyWarningType.ALLERGY,
                SafetySeverity.HIGH,
                f"Patient has a documented allergy to {allergy}",
            ))
    return warnings


def _check_contraindications(record: MedicationRecord, patient: PatientContext) -> list[SafetyWarning]:
    conditions = [c.lower() for c in patient.chronic_conditions if c]
    warnings = []
    for contraindication in record.contraindications:
        if any(contraindication.lower() in condition for condition in conditions):
            warnings.append(SafetyWarning(
                SafetyWarningType.CONTRAINDICATION,
                SafetySeverity.HIGH,
                f"The medication is contraindicated for patients with {contraindication}",
            ))
    return warnings


def _check_pregnancy(record: MedicationRecord) -> list[SafetyWarning]:
    category = record.pregnancy_category
    if category in (PregnancyCategory.D, PregnancyCategory.X):
        return [SafetyWarning(
            SafetyWarningType.PREGNANCY,
            SafetySeverity.HIGH,
            f"This medication has pregnancy category {category.value} and may harm the fetus",
        )]
    if category == PregnancyCategory.C:
        return [SafetyWarning(
            SafetyWarningType.PREGNANCY,
            SafetySeverity.MEDIUM,
            "This medication has pregnancy category C and should be used with caution during pregnancy",
        )]
    return []


def _check_age(record: MedicationRecord, age: float) -> list[SafetyWarning]:
    warnings = []

    if age < 18:
        pediatric = record.pediatric_use
        if pediatric is None or not pediatric.is_safe:
            warnings.append(SafetyWarning(
                SafetyWarningType.AGE_RESTRICTION,
                SafetySeverity.HIGH,
                "This medication is not approved for pediatric use",
            ))
        elif pediatric.minimum_age is not None and age < pediatric.minimum_age:
            warnings.append(SafetyWarning(
                SafetyWarningType.AGE_RESTRICTION,
                SafetySeverity.HIGH,
                f"This medication is not recommended below age {pediatric.minimum_age:g}",
            ))

    if age >= 65:
        if record.geriatric_precautions:
            warnings.append(SafetyWarning(
                SafetyWarningType.AGE_RESTRICTION,
                SafetySeverity.MEDIUM,
                "This medication should be used with caution in elderly patients",
            ))

        beers = record.beers_criteria
        if beers and beers.is_inappropriate:
            description = "Potentially inappropriate in older adults (Beers Criteria)"
            if beers.reason:
                description += f": {beers.reason}"
            if beers.recommendation:
                description += f". {beers.recommendation}"
            warnings.append(SafetyWarning(SafetyWarningType.BEERS, SafetySeverity.MEDIUM, description))

    return warnings


def screen_medication(record: MedicationRecord, patient: PatientContext) -> list[SafetyWarning]:
    """Run all safety checks for one medication and patient.

    Args:
        record: Medication being considered
        patient: Patient attributes

    Returns:
        List of SafetyWarning, empty when nothing applies
    """
    warnings = []
    warnings.extend(_check_allergies(record, patient))
    warnings.extend(_check_contraindications(record, patient))

    if patient.is_pregnant:
        warnings.extend(_check_pregnancy(record))

    if patient.age_years is not None:
        warnings.extend(_check_age(record, patient.age_years))

    high = [w for w in warnings if w.severity == SafetySeverity.HIGH]
    if high:
        logger.info(f"{record.name}: {len(high)} high severity safety warning(s)")

    return warnings
