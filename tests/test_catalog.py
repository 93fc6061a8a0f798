"""Tests for the medication catalog, its stores and cache."""

import json
import threading

import pytest

from cds_src.catalog import (
    CatalogStatus,
    InMemoryCatalogStore,
    MedicationCatalog,
    SQLiteCache,
    SQLiteCatalogStore,
    load_reference_data,
)
from cds_src.catalog.catalog import GUIDELINES_CACHE_KEY, MEDICATIONS_CACHE_KEY
from cds_src.errors import CatalogUnavailable, RecordValidationError
from cds_src.models import MedicationRecord, PregnancyCategory, SpecialPopulation

from conftest import make_guideline, make_record


class FailingStore(InMemoryCatalogStore):
    def load_medications(self):
        raise ConnectionError("store is down")


class CountingStore(InMemoryCatalogStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0
        self._calls_lock = threading.Lock()

    def load_medications(self):
        with self._calls_lock:
            self.calls += 1
        return super().load_medications()


# --- Lookup ---


def test_exact_name_lookup_is_case_insensitive(reference_catalog):
    assert reference_catalog.find_by_name_or_alias("lisinopril").id == "1"
    assert reference_catalog.find_by_name_or_alias("  LISINOPRIL ").id == "1"


def test_brand_lookup(reference_catalog):
    assert reference_catalog.find_by_name_or_alias("Zestril").name == "Lisinopril"
    assert reference_catalog.find_by_name_or_alias("motrin").name == "Ibuprofen"
    assert reference_catalog.find_by_name_or_alias("Coumadin").name == "Warfarin"


def test_every_name_and_brand_resolves_to_its_record(reference_catalog):
    for record in reference_catalog.medications:
        assert reference_catalog.find_by_name_or_alias(record.name) is record
        for brand in record.brand_names:
            assert reference_catalog.find_by_name_or_alias(brand) is record


def test_substring_lookup(reference_catalog):
    assert reference_catalog.find_by_name_or_alias("metfor").name == "Metformin"
    assert reference_catalog.find_by_name_or_alias("benadr").name == "Diphenhydramine"


def test_substring_lookup_false_positive(reference_catalog):
    """Short fragments match the first record containing them."""
    assert reference_catalog.find_by_name_or_alias("in").name == "Lisinopril"


def test_unknown_and_blank_lookup(reference_catalog):
    assert reference_catalog.find_by_name_or_alias("Unobtainium") is None
    assert reference_catalog.find_by_name_or_alias("") is None
    assert reference_catalog.find_by_name_or_alias("   ") is None


def test_exact_tiers_win_over_catalog_order():
    catalog = MedicationCatalog(store=InMemoryCatalogStore(medications=[
        make_record(id="x", name="Aspirin Plus", generic_name="aspirin plus", brand_names=[]),
        make_record(id="y", name="Aspirin", generic_name="aspirin", brand_names=[]),
    ]))
    assert catalog.find_by_name_or_alias("aspirin").id == "y"
    assert catalog.find_by_name_or_alias("aspir").id == "x"


def test_code_lookup(reference_catalog):
    assert reference_catalog.find_by_code("29046").name == "Lisinopril"
    assert reference_catalog.find_by_code("c09aa03").name == "Lisinopril"
    assert reference_catalog.find_by_code("9997").name == "Spironolactone"
    assert reference_catalog.find_by_code("00000") is None
    assert reference_catalog.find_by_code("") is None


def test_find_by_id(reference_catalog):
    assert reference_catalog.find_by_id("7").name == "Vancomycin"
    assert reference_catalog.find_by_id("99") is None


def test_guideline_lookup(reference_catalog):
    assert reference_catalog.find_guideline("hypertension").id == "1"
    assert reference_catalog.find_guideline("E11").condition == "Type 2 Diabetes Mellitus"
    assert reference_catalog.find_guideline("g89.0").condition == "Acute Pain"
    assert reference_catalog.find_guideline("Diabetes").condition == "Type 2 Diabetes Mellitus"
    assert reference_catalog.find_guideline("Migraine") is None
    assert reference_catalog.find_guideline("") is None


def test_exact_condition_beats_substring(store_catalog):
    assert store_catalog.find_guideline("pneumonia").id == "g-2"
    assert store_catalog.find_guideline("acquired").id == "g-1"
    assert store_catalog.find_guideline("J18.9").id == "g-1"


def test_guideline_population_overrides(reference_catalog):
    guideline = reference_catalog.find_guideline("Hypertension")
    pregnant = guideline.recommendations_for(SpecialPopulation.PREGNANT)
    assert "Methyldopa" in pregnant.medications
    assert guideline.recommendations_for(SpecialPopulation.PEDIATRIC) is None


def test_drug_class_and_alternatives(store_catalog):
    penicillins = store_catalog.find_by_drug_class("penicillin")
    assert [m.id for m in penicillins] == ["a", "c"]

    alternatives = store_catalog.find_alternatives("Alphex")
    assert [m.id for m in alternatives] == ["c"]
    assert store_catalog.find_alternatives("Nothing") == []


def test_dosage_guidelines(reference_catalog):
    pediatric = reference_catalog.get_dosage_guidelines("Diphenhydramine", age=8, weight=15)
    assert len(pediatric) == 3
    assert all(g.age_group in (None, "pediatric") for g in pediatric)

    hypertension = reference_catalog.get_dosage_guidelines("Lisinopril", condition="Hypertension")
    assert [g.condition for g in hypertension] == ["Hypertension"]

    # Nothing matches, so every guideline comes back
    all_guidelines = reference_catalog.get_dosage_guidelines("Lisinopril", condition="Gout")
    assert len(all_guidelines) == 2

    assert reference_catalog.get_dosage_guidelines("Unobtainium") is None


def test_dosage_guidelines_weight_outside_range(reference_catalog):
    guidelines = reference_catalog.get_dosage_guidelines("Diphenhydramine", age=8, weight=30)
    assert all(g.weight_range is None for g in guidelines)


def test_beers_and_pregnancy(reference_catalog):
    assert reference_catalog.check_beers_criteria("Benadryl").is_inappropriate
    assert not reference_catalog.check_beers_criteria("Lisinopril").is_inappropriate
    assert reference_catalog.check_beers_criteria("Vancomycin") is None
    assert reference_catalog.check_pregnancy_category("Warfarin") == PregnancyCategory.X
    assert reference_catalog.check_pregnancy_category("Unobtainium") is None


def test_views_are_read_only(reference_catalog):
    assert isinstance(reference_catalog.medications, tuple)
    assert isinstance(reference_catalog.guidelines, tuple)
    assert len(reference_catalog.medications) == 8
    assert len(reference_catalog.guidelines) == 3


# --- Loading ---


def test_store_load_is_ready(store_catalog):
    store_catalog.initialize()
    assert store_catalog.status == CatalogStatus.READY
    assert store_catalog.source == "store"
    assert not store_catalog.degraded


def test_no_store_uses_fallback_and_is_degraded(reference_catalog):
    assert reference_catalog.status == CatalogStatus.DEGRADED
    assert reference_catalog.source == "fallback"


def test_store_error_falls_back():
    loads = []
    catalog = MedicationCatalog(store=FailingStore(), on_load=loads.append)
    assert catalog.find_by_name_or_alias("Lisinopril") is not None
    assert catalog.degraded
    assert loads == ["store", "fallback"]


def test_empty_store_falls_back():
    catalog = MedicationCatalog(store=InMemoryCatalogStore())
    catalog.initialize()
    assert catalog.degraded
    assert len(catalog.medications) == 8


def test_unavailable_when_fallback_is_empty():
    catalog = MedicationCatalog(store=FailingStore(), fallback_loader=lambda: ([], []))
    with pytest.raises(CatalogUnavailable):
        catalog.initialize()
    assert not catalog.is_initialized


def test_unavailable_when_fallback_raises():
    def broken():
        raise RuntimeError("corrupt bundle")

    catalog = MedicationCatalog(fallback_loader=broken)
    with pytest.raises(CatalogUnavailable):
        catalog.find_by_name_or_alias("Lisinopril")


def test_concurrent_first_use_loads_once():
    store = CountingStore(medications=[make_record()])
    loads = []
    catalog = MedicationCatalog(store=store, on_load=loads.append)
    barrier = threading.Barrier(50)
    results = []

    def worker():
        barrier.wait()
        results.append(catalog.find_by_name_or_alias("testamine"))

    threads = [threading.Thread(target=worker) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.calls == 1
    assert catalog.load_attempts == 1
    assert loads == ["store"]
    assert len(results) == 50
    assert all(r is not None and r.id == "test-1" for r in results)


def test_initialize_is_idempotent(store_catalog):
    store_catalog.initialize()
    store_catalog.initialize()
    store_catalog.ensure_initialized()
    assert store_catalog.load_attempts == 1


def test_refresh_reloads_from_store():
    store = InMemoryCatalogStore(medications=[make_record()])
    catalog = MedicationCatalog(store=store)
    catalog.initialize()
    assert catalog.find_by_name_or_alias("Newmed") is None

    store.medications.append(make_record(id="n", name="Newmed", generic_name="newmed", brand_names=[]))
    catalog.refresh()
    assert catalog.find_by_name_or_alias("Newmed").id == "n"


# --- Cache ---


def test_store_load_writes_cache(tmp_path):
    cache = SQLiteCache(db_path=str(tmp_path / "cache.db"))
    catalog = MedicationCatalog(
        store=InMemoryCatalogStore(medications=[make_record()], guidelines=[make_guideline()]),
        cache=cache,
    )
    catalog.initialize()

    cached = json.loads(cache.get(MEDICATIONS_CACHE_KEY))
    assert cached[0]["name"] == "Testamine"
    assert json.loads(cache.get(GUIDELINES_CACHE_KEY))[0]["condition"] == "Test Condition"


def test_warm_start_from_cache(tmp_path):
    cache = SQLiteCache(db_path=str(tmp_path / "cache.db"))
    MedicationCatalog(
        store=InMemoryCatalogStore(medications=[make_record()], guidelines=[make_guideline()]),
        cache=cache,
    ).initialize()

    store = CountingStore(medications=[make_record(id="other", name="Other", brand_names=[])])
    loads = []
    catalog = MedicationCatalog(store=store, cache=cache, on_load=loads.append)
    catalog.initialize()

    assert loads == ["cache"]
    assert store.calls == 0
    assert catalog.source == "cache"
    assert catalog.status == CatalogStatus.READY
    assert catalog.find_by_name_or_alias("Testor").id == "test-1"
    assert catalog.find_guideline("T01").id == "g-1"


def test_unreadable_cache_is_ignored(tmp_path):
    cache = SQLiteCache(db_path=str(tmp_path / "cache.db"))
    cache.set(MEDICATIONS_CACHE_KEY, b"not json", 60)
    cache.set(GUIDELINES_CACHE_KEY, b"[]", 60)

    loads = []
    catalog = MedicationCatalog(
        store=InMemoryCatalogStore(medications=[make_record()]), cache=cache, on_load=loads.append
    )
    catalog.initialize()
    assert loads == ["cache", "store"]
    assert catalog.source == "store"


def test_cache_expiry_and_purge(tmp_path):
    now = [1000.0]
    cache = SQLiteCache(db_path=str(tmp_path / "cache.db"), clock=lambda: now[0])
    cache.set("a", b"1", 10)
    cache.set("b", b"2", 100)

    assert cache.get("a") == b"1"
    now[0] = 1010.0
    assert cache.get("a") is None
    assert cache.get("b") == b"2"

    now[0] = 2000.0
    assert cache.purge_expired() == 1
    assert cache.get("b") is None
    assert cache.get("missing") is None


# --- SQLite store ---


def test_sqlite_store_round_trip(tmp_path):
    store = SQLiteCatalogStore(db_path=str(tmp_path / "catalog.db"))
    medications, guidelines = load_reference_data()
    for record in medications:
        store.save_medication(record)
    for guideline in guidelines:
        store.save_guideline(guideline)

    loaded = store.load_medications()
    assert [m.name for m in loaded] == [m.name for m in medications]
    assert loaded[6].therapeutic_levels[0].unit == "mcg/mL"
    assert store.load_guidelines()[0].special_populations[1].population == SpecialPopulation.RENAL_IMPAIRMENT

    catalog = MedicationCatalog(store=store)
    assert catalog.find_by_name_or_alias("Advil").id == "3"
    assert catalog.status == CatalogStatus.READY


def test_sqlite_store_upsert_and_deactivate(tmp_path):
    store = SQLiteCatalogStore(db_path=str(tmp_path / "nested" / "catalog.db"))
    store.save_medication(make_record())
    store.save_medication(make_record(brand_names=["Renamed"]))
    assert [m.brand_names for m in store.load_medications()] == [["Renamed"]]

    assert store.deactivate_medication("test-1")
    assert not store.deactivate_medication("missing")
    assert store.load_medications() == []


def test_sqlite_store_skips_invalid_documents(tmp_path):
    store = SQLiteCatalogStore(db_path=str(tmp_path / "catalog.db"))
    store.save_medication(make_record())
    with store._connect() as conn:
        conn.execute(
            "INSERT INTO medications (id, name, document) VALUES (?, ?, ?)",
            ("bad", "Bad", json.dumps({"name": "Bad", "pregnancy_category": "Q"})),
        )

    assert [m.id for m in store.load_medications()] == ["test-1"]


# --- Record validation ---


def test_record_requires_name():
    with pytest.raises(RecordValidationError):
        MedicationRecord.from_dict({"generic_name": "nameless"})


def test_record_rejects_unknown_enum_values():
    with pytest.raises(RecordValidationError):
        make_record(pregnancy_category="Q")
    with pytest.raises(RecordValidationError):
        make_record(interactions=[{"medication": "X", "severity": "catastrophic"}])
    with pytest.raises(RecordValidationError):
        make_record(standard_dosages=[{"min": 1, "max": 2, "unit": "mg", "age_group": "infant"}])


def test_record_rejects_non_mapping():
    with pytest.raises(RecordValidationError):
        MedicationRecord.from_dict(["Lisinopril"])


def test_record_defaults():
    record = MedicationRecord.from_dict({"name": "Plainol"})
    assert record.id == "plainol"
    assert record.generic_name == "plainol"
    assert record.brand_names == []
    assert not record.renal_adjustment


def test_guideline_accepts_camel_case_population():
    guideline = make_guideline(special_populations=[
        {"population": "renalImpairment", "recommendations": ["Reduce dose"]},
    ])
    assert guideline.special_populations[0].population == SpecialPopulation.RENAL_IMPAIRMENT

    with pytest.raises(RecordValidationError):
        make_guideline(special_populations=[{"population": "astronauts"}])
