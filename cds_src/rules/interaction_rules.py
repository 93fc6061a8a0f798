"""Drug-drug interaction matching against declared catalog interactions.

Partner names are matched case-insensitively by equality or substring in
either direction. Substring matching can flag unrelated drugs whose names
overlap; this is accepted behavior.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..models import InteractionFinding, MedicationRecord

logger = logging.getLogger(__name__)


@dataclass
class PairwiseInteractionCheck:
    """Result of a pairwise presence check over a medication set.

    Only reports whether any pair interacts, not which pair.
    """
    has_potential_interactions: bool
    medications: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_potential_interactions": self.has_potential_interactions,
            "medications": [dict(m) for m in self.medications],
        }


def names_match(partner: str, current: str) -> bool:
    """Exact match, partner contains current, or current contains partner."""
    partner = partner.strip().lower()
    current = current.strip().lower()
    if not partner or not current:
        return False
    return partner == current or current in partner or partner in current


def _declares_partner(record: MedicationRecord, other: MedicationRecord) -> bool:
    """Whether record lists other by name or generic name."""
    targets = {other.name.lower(), other.generic_name.lower()}
    return any(i.medication.strip().lower() in targets for i in record.interactions)


class InteractionMatcher:
    """Finds declared interactions between a candidate and current medications."""

    def __init__(self, catalog):
        self.catalog = catalog

    def check_interactions(
        self,
        candidate_name: str,
        current_medications: list[str],
    ) -> list[InteractionFinding]:
        """Return interactions between a candidate and the patient's medications.

        At most one finding is produced per current medication: the first
        declared interaction whose partner name matches it.

        Args:
            candidate_name: Name or brand of the medication being considered
            current_medications: Names of medications the patient already takes

        Returns:
            List of InteractionFinding, empty if the candidate is unknown
        """
        candidate = self.catalog.find_by_name_or_alias(candidate_name)
        if not candidate:
            logger.debug(f"No catalog entry for '{candidate_name}', skipping interaction check")
            return []

        findings = []
        for current in current_medications or []:
            if not current or not current.strip():
                continue

            for interaction in candidate.interactions:
                if names_match(interaction.medication, current):
                    findings.append(InteractionFinding(
                        medication=interaction.medication,
                        severity=interaction.severity,
                        description=interaction.description,
                        evidence_level=interaction.evidence_level,
                    ))
                    break

        return findings

    def check_medication_interactions(self, medication_ids: list[str]) -> PairwiseInteractionCheck:
        """Check whether any two medications in a set interact.

        Each pair is checked in both directions (A lists B, or B lists A)
        by name or generic name. Scanning stops at the first interacting
        pair. Unknown ids are dropped.
        """
        records = []
        for medication_id in medication_ids:
            record = self.catalog.find_by_id(medication_id)
            if record is None:
                logger.debug(f"Unknown medication id '{medication_id}' dropped from pairwise check")
                continue
            records.append(record)

        has_interactions = False
        for i, first in enumerate(records):
            for second in records[i + 1:]:
                if _declares_partner(first, second) or _declares_partner(second, first):
                    has_interactions = True
                    break
            if has_interactions:
                break

        return PairwiseInteractionCheck(
            has_potential_interactions=has_interactions,
            medications=[{"id": r.id, "name": r.name} for r in records],
        )
