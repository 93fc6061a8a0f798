"""Backing record stores for the medication catalog."""

import json
import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from ..config import Config
from ..errors import RecordValidationError
from ..models import MedicationRecord, TreatmentGuideline

logger = logging.getLogger(__name__)


class CatalogStore(ABC):
    """Source of medication and guideline records.

    Implementations may raise any exception; the catalog treats errors and
    empty results as grounds for loading the bundled dataset.
    """

    @abstractmethod
    def load_medications(self) -> list[MedicationRecord]:
        """Return all active medication records in catalog order."""

    @abstractmethod
    def load_guidelines(self) -> list[TreatmentGuideline]:
        """Return all treatment guidelines in catalog order."""


class InMemoryCatalogStore(CatalogStore):
    """Store holding records in process memory."""

    def __init__(
        self,
        medications: list[MedicationRecord] | None = None,
        guidelines: list[TreatmentGuideline] | None = None,
    ):
        self.medications = list(medications or [])
        self.guidelines = list(guidelines or [])

    def load_medications(self) -> list[MedicationRecord]:
        return list(self.medications)

    def load_guidelines(self) -> list[TreatmentGuideline]:
        return list(self.guidelines)


class SQLiteCatalogStore(CatalogStore):
    """SQLite-backed store keeping records as JSON documents."""

    def __init__(self, db_path: str | None = None):
        """Initialize catalog store.

        Args:
            db_path: Path to SQLite database. Defaults to Config.CATALOG_DB_PATH
        """
        self.db_path = os.path.expanduser(db_path or Config.CATALOG_DB_PATH)

        # Ensure directory exists
        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path) as f:
            schema = f.read()

        with self._connect() as conn:
            conn.executescript(schema)

    def _connect(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # --- Seeding ---

    def save_medication(self, record: MedicationRecord) -> None:
        """Insert or replace a medication record."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO medications (id, name, rxnorm_code, document)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    rxnorm_code = excluded.rxnorm_code,
                    document = excluded.document,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (record.id, record.name, record.rxnorm_code, json.dumps(record.to_dict())),
            )

    def save_guideline(self, guideline: TreatmentGuideline) -> None:
        """Insert or replace a treatment guideline."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO treatment_guidelines (id, condition, document)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    condition = excluded.condition,
                    document = excluded.document,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (guideline.id, guideline.condition, json.dumps(guideline.to_dict())),
            )

    def deactivate_medication(self, medication_id: str) -> bool:
        """Hide a medication from future loads. Returns True if a row changed."""
        with self._connect() as conn:
            result = conn.execute(
                "UPDATE medications SET is_active = 0, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (medication_id,),
            )
            return result.rowcount > 0

    # --- Loading ---

    def load_medications(self) -> list[MedicationRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, document FROM medications WHERE is_active = 1 ORDER BY rowid"
            ).fetchall()

        records = []
        for row in rows:
            try:
                records.append(MedicationRecord.from_dict(json.loads(row["document"])))
            except (RecordValidationError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping invalid medication record {row['id']}: {e}")
        return records

    def load_guidelines(self) -> list[TreatmentGuideline]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, document FROM treatment_guidelines ORDER BY rowid"
            ).fetchall()

        guidelines = []
        for row in rows:
            try:
                guidelines.append(TreatmentGuideline.from_dict(json.loads(row["document"])))
            except (RecordValidationError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping invalid guideline record {row['id']}: {e}")
        return guidelines
