"""In-memory medication and treatment guideline catalog.

The catalog is built once per instance from, in order, the cache, the
backing store, or the bundled reference dataset. Lookups are served from
immutable indexes that are swapped as a whole on refresh, so readers never
need the lock.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..config import Config
from ..errors import CatalogUnavailable
from ..models import (
    BeersCriteria,
    DosageGuideline,
    MedicationRecord,
    PregnancyCategory,
    TreatmentGuideline,
)
from .cache import Cache
from .reference_data import load_reference_data
from .store import CatalogStore

logger = logging.getLogger(__name__)

MEDICATIONS_CACHE_KEY = "medications"
GUIDELINES_CACHE_KEY = "treatment_guidelines"

SOURCE_CACHE = "cache"
SOURCE_STORE = "store"
SOURCE_FALLBACK = "fallback"


class CatalogStatus(str, Enum):
    """Where the catalog's data came from."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"          # Loaded from the cache or backing store
    DEGRADED = "degraded"    # Serving the bundled reference dataset


@dataclass
class _CatalogIndex:
    medications: list[MedicationRecord] = field(default_factory=list)
    guidelines: list[TreatmentGuideline] = field(default_factory=list)
    by_id: dict[str, MedicationRecord] = field(default_factory=dict)
    by_name: dict[str, MedicationRecord] = field(default_factory=dict)
    by_brand: dict[str, MedicationRecord] = field(default_factory=dict)
    by_code: dict[str, MedicationRecord] = field(default_factory=dict)
    guideline_by_condition: dict[str, TreatmentGuideline] = field(default_factory=dict)
    guideline_by_code: dict[str, TreatmentGuideline] = field(default_factory=dict)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _build_index(
    medications: list[MedicationRecord],
    guidelines: list[TreatmentGuideline],
) -> _CatalogIndex:
    index = _CatalogIndex(medications=list(medications), guidelines=list(guidelines))

    # setdefault keeps the first record in catalog order for duplicate keys
    for med in medications:
        index.by_id.setdefault(med.id, med)
        index.by_name.setdefault(med.name.lower(), med)
        for brand in med.brand_names:
            index.by_brand.setdefault(brand.lower(), med)
        for code in med.external_codes:
            index.by_code.setdefault(normalize_code(code), med)

    for guideline in guidelines:
        index.guideline_by_condition.setdefault(guideline.condition.lower(), guideline)
        for code in guideline.icd10_codes:
            index.guideline_by_code.setdefault(normalize_code(code), guideline)

    return index


class MedicationCatalog:
    """Indexed medication and guideline records with tiered lookup."""

    def __init__(
        self,
        store: CatalogStore | None = None,
        cache: Cache | None = None,
        fallback_loader: Callable[[], tuple[list, list]] = load_reference_data,
        on_load: Callable[[str], None] | None = None,
        cache_ttl_seconds: int | None = None,
    ):
        """Initialize catalog. No data is loaded until first use.

        Args:
            store: Backing record store. None goes straight to the fallback dataset.
            cache: Optional cache for warm starts
            fallback_loader: Returns (medications, guidelines) for degraded mode
            on_load: Called with "cache", "store" or "fallback" on every load attempt
            cache_ttl_seconds: Cache TTL. Defaults to Config.CATALOG_CACHE_TTL_SECONDS
        """
        self.store = store
        self.cache = cache
        self.fallback_loader = fallback_loader
        self.on_load = on_load
        self.cache_ttl_seconds = cache_ttl_seconds or Config.CATALOG_CACHE_TTL_SECONDS

        self.status = CatalogStatus.UNINITIALIZED
        self.source: str | None = None
        self.load_attempts = 0

        self._lock = threading.Lock()
        self._initialized = False
        self._index = _CatalogIndex()

    # --- Lifecycle ---

    @property
    def degraded(self) -> bool:
        return self.status == CatalogStatus.DEGRADED

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Load the catalog once. Concurrent callers wait for a single load.

        Raises:
            CatalogUnavailable: If neither the store nor the fallback produced data
        """
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return
            self._load(use_cache=True)
            self._initialized = True

    def ensure_initialized(self) -> None:
        """Ensure the catalog is initialized before operations."""
        if not self._initialized:
            self.initialize()

    def refresh(self) -> None:
        """Rebuild the catalog from the store, bypassing the cache."""
        with self._lock:
            self._load(use_cache=False)
            self._initialized = True

    def _record_attempt(self, source: str) -> None:
        self.load_attempts += 1
        if self.on_load:
            try:
                self.on_load(source)
            except Exception as e:
                logger.debug(f"on_load callback failed: {e}")

    def _load(self, use_cache: bool) -> None:
        if use_cache and self.cache is not None and self._load_from_cache():
            return

        if self.store is not None and self._load_from_store():
            return

        self._load_fallback()

    def _load_from_cache(self) -> bool:
        self._record_attempt(SOURCE_CACHE)
        try:
            cached_medications = self.cache.get(MEDICATIONS_CACHE_KEY)
            cached_guidelines = self.cache.get(GUIDELINES_CACHE_KEY)
            if not cached_medications or cached_guidelines is None:
                return False

            medications = [MedicationRecord.from_dict(d) for d in json.loads(cached_medications)]
            guidelines = [TreatmentGuideline.from_dict(d) for d in json.loads(cached_guidelines)]
        except Exception as e:
            logger.warning(f"Ignoring unreadable catalog cache: {e}")
            return False

        if not medications:
            return False

        self._install(medications, guidelines, CatalogStatus.READY, SOURCE_CACHE)
        logger.info(f"Medication catalog initialized from cache ({len(medications)} medications)")
        return True

    def _load_from_store(self) -> bool:
        self._record_attempt(SOURCE_STORE)
        try:
            medications = self.store.load_medications()
            guidelines = self.store.load_guidelines()
        except Exception as e:
            logger.error(f"Failed to load medication catalog from store: {e}", exc_info=True)
            return False

        if not medications:
            logger.warning("Catalog store returned no medications")
            return False

        self._install(medications, guidelines, CatalogStatus.READY, SOURCE_STORE)
        logger.info(
            f"Medication catalog initialized from store "
            f"({len(medications)} medications, {len(guidelines)} guidelines)"
        )
        self._write_cache(medications, guidelines)
        return True

    def _load_fallback(self) -> None:
        self._record_attempt(SOURCE_FALLBACK)
        try:
            medications, guidelines = self.fallback_loader()
        except Exception as e:
            raise CatalogUnavailable(f"Bundled reference dataset failed to load: {e}") from e

        if not medications:
            raise CatalogUnavailable("No medication data available from store or bundled dataset")

        self._install(medications, guidelines, CatalogStatus.DEGRADED, SOURCE_FALLBACK)
        logger.warning(
            f"Medication catalog running in degraded mode on bundled reference data "
            f"({len(medications)} medications)"
        )

    def _write_cache(
        self,
        medications: list[MedicationRecord],
        guidelines: list[TreatmentGuideline],
    ) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(
                MEDICATIONS_CACHE_KEY,
                json.dumps([m.to_dict() for m in medications]).encode("utf-8"),
                self.cache_ttl_seconds,
            )
            self.cache.set(
                GUIDELINES_CACHE_KEY,
                json.dumps([g.to_dict() for g in guidelines]).encode("utf-8"),
                self.cache_ttl_seconds,
            )
        except Exception as e:
            logger.warning(f"Failed to write catalog cache: {e}")

    def _install(self, medications, guidelines, status: CatalogStatus, source: str) -> None:
        self._index = _build_index(medications, guidelines)
        self.status = status
        self.source = source

    # --- Read-only views ---

    @property
    def medications(self) -> tuple[MedicationRecord, ...]:
        self.ensure_initialized()
        return tuple(self._index.medications)

    @property
    def guidelines(self) -> tuple[TreatmentGuideline, ...]:
        self.ensure_initialized()
        return tuple(self._index.guidelines)

    # --- Lookups ---

    def find_by_name_or_alias(self, query: str) -> MedicationRecord | None:
        """Resolve a medication by exact name, exact brand, then substring.

        All comparisons are case-insensitive. The substring tier checks the
        name, generic name and brand names and returns the first record in
        catalog order.
        """
        self.ensure_initialized()
        if not query or not query.strip():
            return None

        q = query.strip().lower()
        index = self._index

        if q in index.by_name:
            return index.by_name[q]

        if q in index.by_brand:
            return index.by_brand[q]

        for med in index.medications:
            if q in med.name.lower() or q in med.generic_name.lower():
                return med
            if any(q in brand.lower() for brand in med.brand_names):
                return med

        return None

    def find_by_code(self, code: str) -> MedicationRecord | None:
        """Look up a medication by RxNorm, ATC or NDC code."""
        self.ensure_initialized()
        if not code or not code.strip():
            return None
        return self._index.by_code.get(normalize_code(code))

    def find_by_id(self, medication_id: str) -> MedicationRecord | None:
        self.ensure_initialized()
        return self._index.by_id.get(str(medication_id))

    def find_guideline(self, condition_or_code: str) -> TreatmentGuideline | None:
        """Resolve a guideline by exact condition, exact ICD-10 code, then substring."""
        self.ensure_initialized()
        if not condition_or_code or not condition_or_code.strip():
            return None

        q = condition_or_code.strip()
        index = self._index

        guideline = index.guideline_by_condition.get(q.lower())
        if guideline:
            return guideline

        guideline = index.guideline_by_code.get(normalize_code(q))
        if guideline:
            return guideline

        for guideline in index.guidelines:
            if q.lower() in guideline.condition.lower():
                return guideline

        return None

    def find_by_drug_class(self, drug_class: str) -> list[MedicationRecord]:
        self.ensure_initialized()
        wanted = drug_class.strip().lower()
        return [
            med for med in self._index.medications
            if any(c.lower() == wanted for c in med.drug_classes)
        ]

    def find_alternatives(self, medication_name: str) -> list[MedicationRecord]:
        """Other medications sharing at least one drug class."""
        med = self.find_by_name_or_alias(medication_name)
        if not med:
            return []

        classes = {c.lower() for c in med.drug_classes}
        return [
            other for other in self._index.medications
            if other.id != med.id and classes & {c.lower() for c in other.drug_classes}
        ]

    def get_dosage_guidelines(
        self,
        medication_name: str,
        age: float | None = None,
        weight: float | None = None,
        condition: str | None = None,
    ) -> list[DosageGuideline] | None:
        """Dosage guidelines matching patient factors.

        Returns all of the medication's guidelines when none match, and None
        when the medication is unknown.
        """
        med = self.find_by_name_or_alias(medication_name)
        if not med:
            return None

        def matches(guideline: DosageGuideline) -> bool:
            if age is not None and guideline.age_group:
                group = guideline.age_group.lower()
                if group == "pediatric" and age >= 18:
                    return False
                if group == "adult" and age < 18:
                    return False
                if group == "geriatric" and age < 65:
                    return False

            if weight is not None and guideline.weight_range:
                low, high = guideline.weight_range.min, guideline.weight_range.max
                if low is not None and weight < low:
                    return False
                if high is not None and weight > high:
                    return False

            if condition and guideline.condition:
                wanted = condition.lower()
                declared = guideline.condition.lower()
                if wanted not in declared and declared not in wanted:
                    return False

            return True

        matching = [g for g in med.dosage_guidelines if matches(g)]
        return matching if matching else list(med.dosage_guidelines)

    def check_beers_criteria(self, medication_name: str) -> BeersCriteria | None:
        med = self.find_by_name_or_alias(medication_name)
        if not med:
            return None
        return med.beers_criteria

    def check_pregnancy_category(self, medication_name: str) -> PregnancyCategory | None:
        med = self.find_by_name_or_alias(medication_name)
        if not med:
            return None
        return med.pregnancy_category

    def check_medication_interactions(self, medication_ids: list[str]):
        """Pairwise interaction presence check over catalog ids.

        See InteractionMatcher.check_medication_interactions.
        """
        from ..rules.interaction_rules import InteractionMatcher

        return InteractionMatcher(self).check_medication_interactions(medication_ids)
