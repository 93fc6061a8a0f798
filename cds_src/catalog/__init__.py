"""Medication catalog, backing stores and cache."""

from .cache import Cache, SQLiteCache
from .catalog import CatalogStatus, MedicationCatalog
from .reference_data import load_reference_data
from .store import CatalogStore, InMemoryCatalogStore, SQLiteCatalogStore

__all__ = [
    "Cache",
    "SQLiteCache",
    "CatalogStatus",
    "MedicationCatalog",
    "load_reference_data",
    "CatalogStore",
    "InMemoryCatalogStore",
    "SQLiteCatalogStore",
]
