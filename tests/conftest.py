"""Shared fixtures for decision support tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cds_src.catalog import InMemoryCatalogStore, MedicationCatalog
from cds_src.llm.base import BaseLLMClient, LLMResponse
from cds_src.models import MedicationRecord, TreatmentGuideline


SAMPLE_COMPLETION = """Based on the clinical picture, here are my suggestions.

1. Primary medication recommendations with dosage and frequency:

Lisinopril 10 mg once daily oral
Frequency: Once daily
Duration: 3 months
Instructions: Take in the morning with water
Warnings: Monitor potassium levels, Risk of hypotension
Contraindications: Pregnancy; History of angioedema
Side effects:
- Dry cough
- Dizziness
Alternatives: Losartan, Amlodipine

Amlodipine 5 mg
Take 1 times a day for 30 days
Side effects: Ankle edema

2. Alternative medications
Losartan 50 mg daily

3. Contraindications and warnings
Avoid in pregnancy.
"""


def make_record(**overrides) -> MedicationRecord:
    """Build a medication record from a minimal document plus overrides."""
    doc = {
        "id": "test-1",
        "name": "Testamine",
        "generic_name": "testamine",
        "brand_names": ["Testor"],
    }
    doc.update(overrides)
    return MedicationRecord.from_dict(doc)


def make_guideline(**overrides) -> TreatmentGuideline:
    doc = {"id": "g-1", "condition": "Test Condition", "icd10_codes": ["T01"]}
    doc.update(overrides)
    return TreatmentGuideline.from_dict(doc)


class FakeLLMClient(BaseLLMClient):
    """LLM client returning a canned completion or raising a canned error."""

    def __init__(self, content: str = SAMPLE_COMPLETION, error: Exception | None = None, delay: float = 0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.calls = []

    def generate(self, prompt, system_prompt=None, temperature=0.0, max_tokens=4096, model=None, timeout=None):
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "model": model,
            "timeout": timeout,
        })
        if self.delay:
            import time
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return LLMResponse(content=self.content, model=model or "fake")

    def is_available(self) -> bool:
        return True

    @property
    def model_name(self) -> str:
        return "fake"


@pytest.fixture
def reference_catalog():
    """Catalog serving the bundled reference dataset."""
    catalog = MedicationCatalog()
    catalog.initialize()
    return catalog


@pytest.fixture
def store_catalog():
    """Catalog backed by a small in-memory store."""
    store = InMemoryCatalogStore(
        medications=[
            make_record(
                id="a", name="Alphacillin", generic_name="alphacillin", brand_names=["Alphex"],
                rxnorm_code="1001", atc_code="J01AA01",
                drug_classes=["Penicillin"],
                interactions=[{"medication": "Betazole", "severity": "high", "description": "Bad mix"}],
            ),
            make_record(
                id="b", name="Betazole", generic_name="betazole", brand_names=["Betax"],
                rxnorm_code="1002", drug_classes=["Azole"],
            ),
            make_record(
                id="c", name="Gammacillin", generic_name="gammacillin", brand_names=[],
                drug_classes=["Penicillin"],
            ),
        ],
        guidelines=[
            make_guideline(id="g-1", condition="Community Acquired Pneumonia", icd10_codes=["J18.9"]),
            make_guideline(id="g-2", condition="Pneumonia", icd10_codes=["J18"]),
        ],
    )
    return MedicationCatalog(store=store)


@pytest.fixture
def fake_llm():
    return FakeLLMClient()
