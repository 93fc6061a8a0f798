"""Data models for the clinical decision support core."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import RecordValidationError


class InteractionSeverity(str, Enum):
    """Severity of a declared drug-drug interaction."""
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class EvidenceLevel(str, Enum):
    """Strength of evidence behind a clinical claim."""
    STRONG = "strong"
    HIGH = "high"
    MODERATE = "moderate"
    LIMITED = "limited"
    LOW = "low"


class AgeGroup(str, Enum):
    PEDIATRIC = "pediatric"
    ADULT = "adult"
    GERIATRIC = "geriatric"

    @classmethod
    def for_age(cls, age_years: float) -> "AgeGroup":
        """Pediatric under 18, geriatric over 65, adult otherwise."""
        if age_years < 18:
            return cls.PEDIATRIC
        if age_years > 65:
            return cls.GERIATRIC
        return cls.ADULT


class LevelTiming(str, Enum):
    """When a drug level is drawn relative to dosing."""
    PEAK = "peak"
    TROUGH = "trough"
    STEADY_STATE = "steady-state"


class PregnancyCategory(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    X = "X"


class SpecialPopulation(str, Enum):
    PEDIATRIC = "pediatric"
    GERIATRIC = "geriatric"
    PREGNANT = "pregnant"
    RENAL_IMPAIRMENT = "renal-impairment"
    HEPATIC_IMPAIRMENT = "hepatic-impairment"

    @classmethod
    def parse(cls, value: str) -> "SpecialPopulation":
        """Accept both "renal-impairment" and "renalImpairment" spellings."""
        aliases = {
            "renalimpairment": cls.RENAL_IMPAIRMENT,
            "hepaticimpairment": cls.HEPATIC_IMPAIRMENT,
        }
        key = value.replace("-", "").replace("_", "").lower()
        if key in aliases:
            return aliases[key]
        return cls(value.lower())


class InteractionStatus(str, Enum):
    """Whether a suggestion's interaction list can be trusted."""
    NOT_CHECKED = "not_checked"
    CHECKED = "checked"
    UNKNOWN = "unknown"  # Lookup failed; absence of findings means nothing


class RiskProbability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _require(data: dict[str, Any], key: str, record_type: str) -> Any:
    if key not in data or data[key] is None or data[key] == "":
        raise RecordValidationError(f"{record_type} missing required field '{key}'")
    return data[key]


def _enum(enum_cls, value: Any, record_type: str, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise RecordValidationError(
            f"{record_type} has invalid {field_name} '{value}'"
        )


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    values = data.get(key) or []
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values]


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# --- Reference ranges ---


@dataclass
class DosageRange:
    """A standard dose window for a medication."""
    min: float
    max: float
    unit: str
    frequency: str | None = None
    route: str | None = None
    age_group: AgeGroup | None = None
    weight_based: bool = False
    condition: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DosageRange":
        age_group = data.get("age_group")
        return cls(
            min=float(_require(data, "min", "DosageRange")),
            max=float(_require(data, "max", "DosageRange")),
            unit=str(_require(data, "unit", "DosageRange")),
            frequency=data.get("frequency"),
            route=data.get("route"),
            age_group=_enum(AgeGroup, age_group, "DosageRange", "age_group") if age_group else None,
            weight_based=bool(data.get("weight_based", False)),
            condition=data.get("condition"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "unit": self.unit,
            "frequency": self.frequency,
            "route": self.route,
            "age_group": _enum_value(self.age_group),
            "weight_based": self.weight_based,
            "condition": self.condition,
        }


@dataclass
class TherapeuticRange:
    """Blood-concentration window in which a drug is effective but not toxic."""
    min: float
    max: float
    unit: str
    timing: LevelTiming | None = None
    condition: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TherapeuticRange":
        timing = data.get("timing")
        return cls(
            min=float(_require(data, "min", "TherapeuticRange")),
            max=float(_require(data, "max", "TherapeuticRange")),
            unit=str(_require(data, "unit", "TherapeuticRange")),
            timing=_enum(LevelTiming, timing, "TherapeuticRange", "timing") if timing else None,
            condition=data.get("condition"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "min": self.min,
            "max": self.max,
            "unit": self.unit,
            "timing": _enum_value(self.timing),
            "condition": self.condition,
        }


# --- Medication record sub-blocks ---


@dataclass
class InteractionRecord:
    """An interaction declared on a medication record."""
    medication: str
    severity: InteractionSeverity
    description: str
    evidence_level: str = "moderate"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InteractionRecord":
        return cls(
            medication=str(_require(data, "medication", "Interaction")),
            severity=_enum(InteractionSeverity, data.get("severity"), "Interaction", "severity"),
            description=data.get("description", ""),
            evidence_level=data.get("evidence_level", "moderate"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "medication": self.medication,
            "severity": self.severity.value,
            "description": self.description,
            "evidence_level": self.evidence_level,
        }


@dataclass
class WeightRange:
    min: float | None = None
    max: float | None = None


@dataclass
class DosageGuideline:
    """Free-text dosing guidance for a population or condition."""
    route: str
    dosage: str
    frequency: str
    max_daily_dose: str
    age_group: str | None = None
    weight_range: WeightRange | None = None
    condition: str | None = None
    duration: str | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DosageGuideline":
        weight = data.get("weight_range")
        return cls(
            route=str(_require(data, "route", "DosageGuideline")),
            dosage=str(_require(data, "dosage", "DosageGuideline")),
            frequency=data.get("frequency", ""),
            max_daily_dose=data.get("max_daily_dose", ""),
            age_group=data.get("age_group"),
            weight_range=WeightRange(weight.get("min"), weight.get("max")) if weight else None,
            condition=data.get("condition"),
            duration=data.get("duration"),
            notes=data.get("notes"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "route": self.route,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "max_daily_dose": self.max_daily_dose,
            "age_group": self.age_group,
            "weight_range": (
                {"min": self.weight_range.min, "max": self.weight_range.max}
                if self.weight_range else None
            ),
            "condition": self.condition,
            "duration": self.duration,
            "notes": self.notes,
        }


@dataclass
class PediatricUse:
    is_safe: bool
    minimum_age: float | None = None
    dosage_adjustment: str | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class BeersCriteria:
    is_inappropriate: bool
    reason: str | None = None
    recommendation: str | None = None


@dataclass
class OrganDosing:
    """Renal or hepatic dose adjustment block."""
    requires_adjustment: bool
    guidelines: str | None = None


@dataclass
class MedicationRecord:
    """A medication in the catalog.

    The canonical name and every brand name are case-insensitively distinct
    lookup keys that resolve to this record.
    """
    id: str
    name: str
    generic_name: str
    brand_names: list[str] = field(default_factory=list)

    # External codes
    rxnorm_code: str | None = None
    atc_code: str | None = None
    ndc: str | None = None

    # Clinical metadata
    drug_classes: list[str] = field(default_factory=list)
    indications: list[str] = field(default_factory=list)
    contraindications: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    side_effects: list[str] = field(default_factory=list)
    interactions: list[InteractionRecord] = field(default_factory=list)
    dosage_guidelines: list[DosageGuideline] = field(default_factory=list)

    # Reference ranges used by the dosage checker
    standard_dosages: list[DosageRange] = field(default_factory=list)
    therapeutic_levels: list[TherapeuticRange] = field(default_factory=list)
    half_life_hours: float | None = None

    # Special populations
    pediatric_use: PediatricUse | None = None
    pregnancy_category: PregnancyCategory | None = None
    beers_criteria: BeersCriteria | None = None
    renal_dosing: OrganDosing | None = None
    hepatic_dosing: OrganDosing | None = None
    geriatric_precautions: list[str] = field(default_factory=list)
    gender_specific_risks: dict[str, list[str]] = field(default_factory=dict)

    references: list[str] = field(default_factory=list)

    @property
    def renal_adjustment(self) -> bool:
        return bool(self.renal_dosing and self.renal_dosing.requires_adjustment)

    @property
    def hepatic_adjustment(self) -> bool:
        return bool(self.hepatic_dosing and self.hepatic_dosing.requires_adjustment)

    @property
    def external_codes(self) -> list[str]:
        return [c for c in (self.rxnorm_code, self.atc_code, self.ndc) if c]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MedicationRecord":
        """Build a record from a store document, validating its shape.

        Raises:
            RecordValidationError: If a required field is missing or an
                enumerated field holds an unknown value.
        """
        if not isinstance(data, dict):
            raise RecordValidationError(f"Medication record must be a mapping, got {type(data).__name__}")

        name = str(_require(data, "name", "Medication"))
        record_id = str(data.get("id") or name.lower())

        pediatric = data.get("pediatric_use")
        beers = data.get("beers_criteria")
        renal = data.get("renal_dosing")
        hepatic = data.get("hepatic_dosing")
        pregnancy = data.get("pregnancy_category")

        gender_risks = data.get("gender_specific_risks") or {}
        if not isinstance(gender_risks, dict):
            raise RecordValidationError(f"Medication '{name}' has invalid gender_specific_risks")

        return cls(
            id=record_id,
            name=name,
            generic_name=str(data.get("generic_name") or name.lower()),
            brand_names=_str_list(data, "brand_names"),
            rxnorm_code=data.get("rxnorm_code"),
            atc_code=data.get("atc_code"),
            ndc=data.get("ndc"),
            drug_classes=_str_list(data, "drug_classes"),
            indications=_str_list(data, "indications"),
            contraindications=_str_list(data, "contraindications"),
            warnings=_str_list(data, "warnings"),
            side_effects=_str_list(data, "side_effects"),
            interactions=[InteractionRecord.from_dict(i) for i in data.get("interactions") or []],
            dosage_guidelines=[DosageGuideline.from_dict(g) for g in data.get("dosage_guidelines") or []],
            standard_dosages=[DosageRange.from_dict(d) for d in data.get("standard_dosages") or []],
            therapeutic_levels=[TherapeuticRange.from_dict(t) for t in data.get("therapeutic_levels") or []],
            half_life_hours=data.get("half_life_hours"),
            pediatric_use=PediatricUse(
                is_safe=bool(pediatric.get("is_safe", False)),
                minimum_age=pediatric.get("minimum_age"),
                dosage_adjustment=pediatric.get("dosage_adjustment"),
                warnings=_str_list(pediatric, "warnings"),
            ) if pediatric else None,
            pregnancy_category=(
                _enum(PregnancyCategory, pregnancy, "Medication", "pregnancy_category")
                if pregnancy else None
            ),
            beers_criteria=BeersCriteria(
                is_inappropriate=bool(beers.get("is_inappropriate", False)),
                reason=beers.get("reason"),
                recommendation=beers.get("recommendation"),
            ) if beers else None,
            renal_dosing=OrganDosing(
                bool(renal.get("requires_adjustment", False)), renal.get("guidelines"),
            ) if renal else None,
            hepatic_dosing=OrganDosing(
                bool(hepatic.get("requires_adjustment", False)), hepatic.get("guidelines"),
            ) if hepatic else None,
            geriatric_precautions=_str_list(data, "geriatric_precautions"),
            gender_specific_risks={
                str(k).lower(): [str(r) for r in v or []] for k, v in gender_risks.items()
            },
            references=_str_list(data, "references"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "generic_name": self.generic_name,
            "brand_names": list(self.brand_names),
            "rxnorm_code": self.rxnorm_code,
            "atc_code": self.atc_code,
            "ndc": self.ndc,
            "drug_classes": list(self.drug_classes),
            "indications": list(self.indications),
            "contraindications": list(self.contraindications),
            "warnings": list(self.warnings),
            "side_effects": list(self.side_effects),
            "interactions": [i.to_dict() for i in self.interactions],
            "dosage_guidelines": [g.to_dict() for g in self.dosage_guidelines],
            "standard_dosages": [d.to_dict() for d in self.standard_dosages],
            "therapeutic_levels": [t.to_dict() for t in self.therapeutic_levels],
            "half_life_hours": self.half_life_hours,
            "pediatric_use": {
                "is_safe": self.pediatric_use.is_safe,
                "minimum_age": self.pediatric_use.minimum_age,
                "dosage_adjustment": self.pediatric_use.dosage_adjustment,
                "warnings": list(self.pediatric_use.warnings),
            } if self.pediatric_use else None,
            "pregnancy_category": _enum_value(self.pregnancy_category),
            "beers_criteria": {
                "is_inappropriate": self.beers_criteria.is_inappropriate,
                "reason": self.beers_criteria.reason,
                "recommendation": self.beers_criteria.recommendation,
            } if self.beers_criteria else None,
            "renal_dosing": {
                "requires_adjustment": self.renal_dosing.requires_adjustment,
                "guidelines": self.renal_dosing.guidelines,
            } if self.renal_dosing else None,
            "hepatic_dosing": {
                "requires_adjustment": self.hepatic_dosing.requires_adjustment,
                "guidelines": self.hepatic_dosing.guidelines,
            } if self.hepatic_dosing else None,
            "geriatric_precautions": list(self.geriatric_precautions),
            "gender_specific_risks": {k: list(v) for k, v in self.gender_specific_risks.items()},
            "references": list(self.references),
        }


# --- Treatment guidelines ---


@dataclass
class OptionGroup:
    medications: list[str]
    notes: str | None = None


@dataclass
class PopulationOverride:
    population: SpecialPopulation
    recommendations: list[str] = field(default_factory=list)
    medications: list[str] = field(default_factory=list)


@dataclass
class TreatmentGuideline:
    """Condition-level treatment guidance keyed by ICD-10 codes."""
    id: str
    condition: str
    icd10_codes: list[str] = field(default_factory=list)
    first_line_options: list[OptionGroup] = field(default_factory=list)
    second_line_options: list[OptionGroup] = field(default_factory=list)
    special_populations: list[PopulationOverride] = field(default_factory=list)
    source: str = ""
    evidence_level: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TreatmentGuideline":
        if not isinstance(data, dict):
            raise RecordValidationError(f"Guideline record must be a mapping, got {type(data).__name__}")

        condition = str(_require(data, "condition", "Guideline"))

        def groups(key: str) -> list[OptionGroup]:
            return [
                OptionGroup(medications=_str_list(g, "medications"), notes=g.get("notes"))
                for g in data.get(key) or []
            ]

        populations = []
        for entry in data.get("special_populations") or []:
            raw = _require(entry, "population", "Guideline population")
            try:
                population = SpecialPopulation.parse(str(raw))
            except ValueError:
                raise RecordValidationError(f"Guideline '{condition}' has invalid population '{raw}'")
            populations.append(PopulationOverride(
                population=population,
                recommendations=_str_list(entry, "recommendations"),
                medications=_str_list(entry, "medications"),
            ))

        return cls(
            id=str(data.get("id") or condition.lower()),
            condition=condition,
            icd10_codes=_str_list(data, "icd10_codes"),
            first_line_options=groups("first_line_options"),
            second_line_options=groups("second_line_options"),
            special_populations=populations,
            source=data.get("source", ""),
            evidence_level=data.get("evidence_level", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "condition": self.condition,
            "icd10_codes": list(self.icd10_codes),
            "first_line_options": [
                {"medications": list(g.medications), "notes": g.notes} for g in self.first_line_options
            ],
            "second_line_options": [
                {"medications": list(g.medications), "notes": g.notes} for g in self.second_line_options
            ],
            "special_populations": [
                {
                    "population": p.population.value,
                    "recommendations": list(p.recommendations),
                    "medications": list(p.medications),
                }
                for p in self.special_populations
            ],
            "source": self.source,
            "evidence_level": self.evidence_level,
        }

    def recommendations_for(self, population: SpecialPopulation) -> PopulationOverride | None:
        for override in self.special_populations:
            if override.population == population:
                return override
        return None


# --- Per-request value objects ---


@dataclass
class ParsedDosage:
    """Structured form of a free-text dosage expression."""
    value: float
    unit: str
    frequency: str | None = None
    route: str | None = None
    is_valid: bool = True
    validation_message: str | None = None
    max_value: float | None = None  # Upper bound for ranges like "5-10 mg"
    per_weight: bool = False        # "mg/kg" style expression

    @classmethod
    def invalid(cls, message: str) -> "ParsedDosage":
        return cls(value=0.0, unit="", is_valid=False, validation_message=message)


@dataclass
class InteractionFinding:
    """An interaction that applies to a candidate medication."""
    medication: str
    severity: InteractionSeverity
    description: str
    evidence_level: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "medication": self.medication,
            "severity": self.severity.value,
            "description": self.description,
            "evidence_level": self.evidence_level,
        }


@dataclass
class PatientContext:
    """Patient attributes used when generating and checking suggestions."""
    age_years: float | None = None
    weight_kg: float | None = None
    gender: str | None = None
    allergies: list[str] = field(default_factory=list)
    current_medications: list[str] = field(default_factory=list)
    chronic_conditions: list[str] = field(default_factory=list)
    is_pregnant: bool = False

    # Organ function
    renal_function: float | None = None      # eGFR / CrCl, mL/min
    hepatic_function: str | None = None      # e.g. "normal", "impaired"

    # Vital signs
    blood_pressure: str | None = None
    heart_rate: float | None = None
    temperature: float | None = None

    lab_results: dict[str, Any] = field(default_factory=dict)


@dataclass
class PrescriptionSuggestion:
    """A single medication suggestion, parsed and then enriched."""
    medication: str
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: str = ""
    warnings: list[str] = field(default_factory=list)
    contraindications: list[str] = field(default_factory=list)
    side_effects: list[str] = field(default_factory=list)
    alternatives: list[str] = field(default_factory=list)
    interaction_risks: list[InteractionFinding] = field(default_factory=list)

    # Enrichment
    interaction_status: InteractionStatus = InteractionStatus.NOT_CHECKED
    dosage_check: Any = None          # DosageCheckResult when the medication resolves
    adverse_risks: list[Any] = field(default_factory=list)
    safety_warnings: list[Any] = field(default_factory=list)
    is_sentinel: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "medication": self.medication,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "duration": self.duration,
            "instructions": self.instructions,
            "warnings": list(self.warnings),
            "contraindications": list(self.contraindications),
            "side_effects": list(self.side_effects),
            "alternatives": list(self.alternatives),
            "interaction_risks": [f.to_dict() for f in self.interaction_risks],
            "interaction_status": self.interaction_status.value,
            "dosage_check": self.dosage_check.to_dict() if self.dosage_check else None,
            "adverse_risks": [r.to_dict() for r in self.adverse_risks],
            "safety_warnings": [w.to_dict() for w in self.safety_warnings],
            "is_sentinel": self.is_sentinel,
        }
