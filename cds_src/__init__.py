"""Clinical decision support core.

Medication catalog lookups, dosage and therapeutic range checks,
interaction and adverse risk screening, and parsing of generated
prescription suggestions.
"""

from .catalog import CatalogStatus, MedicationCatalog
from .errors import (
    CatalogUnavailable,
    DecisionSupportError,
    GenerationTimeout,
    InvalidRequestError,
    RecordValidationError,
    UpstreamGenerationFailure,
)
from .models import MedicationRecord, PatientContext, PrescriptionSuggestion, TreatmentGuideline
from .orchestrator import DecisionSupport, RequestState

__all__ = [
    "CatalogStatus",
    "MedicationCatalog",
    "CatalogUnavailable",
    "DecisionSupportError",
    "GenerationTimeout",
    "InvalidRequestError",
    "RecordValidationError",
    "UpstreamGenerationFailure",
    "MedicationRecord",
    "PatientContext",
    "PrescriptionSuggestion",
    "TreatmentGuideline",
    "DecisionSupport",
    "RequestState",
]
