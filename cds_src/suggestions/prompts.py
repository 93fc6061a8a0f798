"""Prompt templates for prescription suggestions."""

import json

from ..models import PatientContext

PRESCRIPTION_SYSTEM_PROMPT = (
    "You are a medical prescription assistant with extensive knowledge of "
    "pharmacology and medical guidelines. Provide evidence-based prescription "
    "suggestions while considering patient safety, drug interactions, and "
    "medical history."
)

PRESCRIPTION_PROMPT_TEMPLATE = """Generate prescription suggestions based on:

Diagnosis: {diagnosis}
Symptoms: {symptoms}

Patient Profile:
- Age: {age}
- Weight: {weight}
- Gender: {gender}
- Allergies: {allergies}
- Current Medications: {current_medications}
- Chronic Conditions: {chronic_conditions}

Vital Signs:
- Blood Pressure: {blood_pressure}
- Heart Rate: {heart_rate}
- Temperature: {temperature}
{lab_results}
Please provide:
1. Primary medication recommendations with dosage and frequency
2. Alternative medications
3. Contraindications and warnings
4. Potential side effects
5. Special instructions for administration
6. Duration of treatment
7. Follow-up recommendations

Under the primary recommendations, list each medication as its own paragraph
starting with "<medication> <dose>", followed by "Frequency:", "Duration:",
"Instructions:", "Warnings:", "Contraindications:", "Side effects:" and
"Alternatives:" lines. Separate medications with a blank line.
"""


def _list_or_none(values: list[str]) -> str:
    return ", ".join(values) if values else "None"


def _value_or_unknown(value, suffix: str = "") -> str:
    if value is None or value == "":
        return "Unknown"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}{suffix}"


def build_prescription_prompt(
    diagnosis: str,
    symptoms: list[str],
    patient: PatientContext | None = None,
) -> str:
    """Build the user prompt for a prescription suggestion request."""
    patient = patient or PatientContext()

    lab_results = ""
    if patient.lab_results:
        lab_results = f"\nLab Results: {json.dumps(patient.lab_results, indent=2, default=str)}\n"

    return PRESCRIPTION_PROMPT_TEMPLATE.format(
        diagnosis=diagnosis.strip(),
        symptoms=", ".join(s.strip() for s in symptoms if s and s.strip()),
        age=_value_or_unknown(patient.age_years),
        weight=_value_or_unknown(patient.weight_kg, " kg"),
        gender=_value_or_unknown(patient.gender),
        allergies=_list_or_none(patient.allergies),
        current_medications=_list_or_none(patient.current_medications),
        chronic_conditions=_list_or_none(patient.chronic_conditions),
        blood_pressure=_value_or_unknown(patient.blood_pressure),
        heart_rate=_value_or_unknown(patient.heart_rate),
        temperature=_value_or_unknown(patient.temperature),
        lab_results=lab_results,
    )
