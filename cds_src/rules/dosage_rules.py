"""Dosage range and therapeutic level checks.

Selects the applicable reference range for a medication and patient, then
compares a parsed dosage against it, converting units within a family when
needed. A unit that cannot be converted is never reported as in range.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ..dosage_parser import parse_dosage
from ..models import AgeGroup, DosageRange, LevelTiming, MedicationRecord, TherapeuticRange
from ..units import convert_units, normalize_unit

logger = logging.getLogger(__name__)

STEADY_STATE_HALF_LIVES = 5


class DosageStatus(str, Enum):
    IN_RANGE = "in_range"
    BELOW_RANGE = "below_range"
    ABOVE_RANGE = "above_range"
    INVALID_DOSAGE = "invalid_dosage"
    UNIT_MISMATCH = "unit_mismatch"
    NO_REFERENCE = "no_reference"


@dataclass
class DosageCheckResult:
    """Outcome of a dosage or therapeutic level check."""
    in_range: bool
    status: DosageStatus
    message: str | None = None
    applied_range: DosageRange | TherapeuticRange | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "in_range": self.in_range,
            "status": self.status.value,
            "message": self.message,
            "applied_range": self.applied_range.to_dict() if self.applied_range else None,
        }


def time_to_steady_state(half_life_hours: float) -> float:
    """Hours to reach steady state, conventionally five half-lives."""
    return half_life_hours * STEADY_STATE_HALF_LIVES


def _narrow(candidates: list, predicate) -> list:
    """Apply a filter only if at least one candidate survives it."""
    narrowed = [c for c in candidates if predicate(c)]
    return narrowed if narrowed else candidates


def select_dosage_range(
    ranges: list[DosageRange],
    unit: str,
    route: str | None = None,
    patient_age: float | None = None,
    condition: str | None = None,
) -> DosageRange | None:
    """Pick the reference range that best fits the patient and dosage.

    Narrows by age group, then route, then condition, skipping any filter
    that would leave no candidates. Prefers a range in the dosage's unit,
    else the first remaining candidate.
    """
    if not ranges:
        return None

    candidates = list(ranges)

    if patient_age is not None:
        group = AgeGroup.for_age(patient_age)
        candidates = _narrow(candidates, lambda r: r.age_group == group)

    if route:
        candidates = _narrow(
            candidates, lambda r: not r.route or r.route.lower() == route.lower()
        )

    if condition:
        candidates = _narrow(
            candidates, lambda r: not r.condition or condition.lower() in r.condition.lower()
        )

    wanted_unit = normalize_unit(unit)
    for candidate in candidates:
        if normalize_unit(candidate.unit) == wanted_unit:
            return candidate
    return candidates[0]


def _compare(
    value: float,
    applied,
    unit_label: str,
    low_text: str,
    high_text: str,
    high_value: float | None = None,
) -> DosageCheckResult:
    """Compare a value, or a value range when high_value is given, to applied.

    An upper end above the maximum is reported before a lower end below the minimum.
    """
    if high_value is None:
        high_value = value
    if high_value > applied.max:
        return DosageCheckResult(
            in_range=False,
            status=DosageStatus.ABOVE_RANGE,
            message=f"{high_text}: {applied.max:g} {unit_label}",
            applied_range=applied,
        )
    if value < applied.min:
        return DosageCheckResult(
            in_range=False,
            status=DosageStatus.BELOW_RANGE,
            message=f"{low_text}: {applied.min:g} {unit_label}",
            applied_range=applied,
        )
    return DosageCheckResult(in_range=True, status=DosageStatus.IN_RANGE, applied_range=applied)


class DosageChecker:
    """Checks dosages and drug levels against a medication's reference ranges."""

    def check_dosage(
        self,
        record: MedicationRecord,
        dosage_text: str,
        patient_weight: float | None = None,
        patient_age: float | None = None,
        condition: str | None = None,
    ) -> DosageCheckResult:
        """Check a free-text dosage against the record's standard dosages.

        Args:
            record: Medication being dosed
            dosage_text: Dosage text, e.g. "500 mg twice daily oral"
            patient_weight: Weight in kg, used for weight-based ranges
            patient_age: Age in years, used to pick the age group
            condition: Indication, used to pick condition-specific ranges

        Returns:
            DosageCheckResult. Missing reference data is reported as in range.
        """
        parsed = parse_dosage(dosage_text)
        if not parsed.is_valid:
            return DosageCheckResult(
                in_range=False,
                status=DosageStatus.INVALID_DOSAGE,
                message=parsed.validation_message,
            )

        if not record.standard_dosages:
            return DosageCheckResult(
                in_range=True,
                status=DosageStatus.NO_REFERENCE,
                message="No standard dosages defined for this medication",
            )

        selected = select_dosage_range(
            record.standard_dosages, parsed.unit, parsed.route, patient_age, condition
        )

        # Both ends of a "5-10 mg" range must fall inside the reference range
        values = [parsed.value] if parsed.max_value is None else [parsed.value, parsed.max_value]
        if normalize_unit(parsed.unit) != normalize_unit(selected.unit):
            converted = []
            for amount in values:
                conversion = convert_units(amount, parsed.unit, selected.unit)
                if not conversion.success:
                    logger.debug(f"{record.name}: {conversion.message}")
                    return DosageCheckResult(
                        in_range=False,
                        status=DosageStatus.UNIT_MISMATCH,
                        message=f"Cannot compare different units: {parsed.unit} vs {selected.unit}",
                        applied_range=selected,
                    )
                converted.append(conversion.value)
            values = converted

        applied = selected
        if parsed.per_weight and not selected.weight_based:
            # "mg/kg" dose against an absolute range
            if patient_weight is None:
                return DosageCheckResult(
                    in_range=False,
                    status=DosageStatus.UNIT_MISMATCH,
                    message=f"Cannot compare {parsed.unit}/kg dosage to {selected.unit} range without patient weight",
                    applied_range=selected,
                )
            values = [amount * patient_weight for amount in values]
        elif selected.weight_based and not parsed.per_weight and patient_weight is not None:
            applied = replace(
                selected,
                min=selected.min * patient_weight,
                max=selected.max * patient_weight,
            )

        return _compare(
            min(values),
            applied,
            applied.unit,
            "Dosage too low. Recommended minimum",
            "Dosage too high. Recommended maximum",
            high_value=max(values),
        )

    def check_therapeutic_level(
        self,
        record: MedicationRecord,
        lab_value: float,
        lab_unit: str,
        is_trough: bool = False,
    ) -> DosageCheckResult:
        """Check a measured drug level against the record's therapeutic range.

        Units must match exactly (ignoring case); no conversion is attempted.
        """
        if not record.therapeutic_levels:
            return DosageCheckResult(
                in_range=True,
                status=DosageStatus.NO_REFERENCE,
                message="No therapeutic levels defined for this medication",
            )

        timing = LevelTiming.TROUGH if is_trough else LevelTiming.PEAK
        selected = next(
            (r for r in record.therapeutic_levels if r.timing == timing),
            record.therapeutic_levels[0],
        )

        if normalize_unit(lab_unit) != normalize_unit(selected.unit):
            return DosageCheckResult(
                in_range=False,
                status=DosageStatus.UNIT_MISMATCH,
                message=f"Unit mismatch: Lab result in {lab_unit}, therapeutic range in {selected.unit}",
                applied_range=selected,
            )

        return _compare(
            lab_value,
            selected,
            selected.unit,
            "Level too low. Therapeutic minimum",
            "Level too high. Therapeutic maximum",
        )
