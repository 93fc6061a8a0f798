#!/usr/bin/env python3
"""Run a prescription suggestion request end to end.

By default a canned completion stands in for the text-generation backend so
the demo runs offline. Use --live to call the configured backend instead.

Usage:
    # Hypertension in an elderly patient on spironolactone (canned completion)
    python scripts/demo_decision_support.py

    # Call the configured Ollama / OpenAI backend
    python scripts/demo_decision_support.py --live --backend ollama

    # Custom diagnosis and patient
    python scripts/demo_decision_support.py --diagnosis "Acute Pain" --symptoms "knee pain" \\
        --age 8 --weight 25 --current-med Warfarin

    # Print results as JSON
    python scripts/demo_decision_support.py --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Get the project root directory
SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cds_src import DecisionSupport, DecisionSupportError, MedicationCatalog, PatientContext
from cds_src.catalog import SQLiteCache, SQLiteCatalogStore
from cds_src.llm import get_llm_client
from cds_src.llm.base import BaseLLMClient, LLMResponse


CANNED_COMPLETION = """1. Primary medication recommendations with dosage and frequency:

Lisinopril 10 mg once daily oral
Frequency: Once daily
Duration: 3 months
Instructions: Take in the morning; check blood pressure at home
Warnings: Monitor potassium, Risk of hypotension
Contraindications: Pregnancy; History of angioedema
Side effects:
- Dry cough
- Dizziness
Alternatives: Losartan, Amlodipine

Ibuprofen 400 mg every 6 hours as needed
Duration: 5 days
Instructions: Take with food
Side effects: Dyspepsia, GI bleeding

2. Alternative medications
Amlodipine 5 mg daily

7. Follow-up recommendations
Recheck blood pressure and potassium in 2 weeks.
"""


# ANSI color codes for terminal output
class Colors:
    BOLD = '\033[1m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    END = '\033[0m'


class CannedLLMClient(BaseLLMClient):
    """Returns a fixed completion without calling any backend."""

    def generate(self, prompt, system_prompt=None, temperature=0.0, max_tokens=4096, model=None, timeout=None):
        return LLMResponse(content=CANNED_COMPLETION, model="canned")

    def is_available(self) -> bool:
        return True

    @property
    def model_name(self) -> str:
        return "canned"


def setup_logging(verbose: bool = False):
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_catalog(db_path: str | None, cache_path: str | None) -> MedicationCatalog:
    """Catalog over an optional SQLite store; without one it serves the bundled dataset."""
    store = SQLiteCatalogStore(db_path) if db_path else None
    cache = SQLiteCache(cache_path) if cache_path else None
    return MedicationCatalog(store=store, cache=cache)


def print_suggestion(index: int, suggestion):
    print(f"\n{Colors.BOLD}{index}. {suggestion.medication}{Colors.END}")
    if suggestion.is_sentinel:
        print(f"   {suggestion.instructions}")
        return

    print(f"   Dosage:    {suggestion.dosage}")
    print(f"   Frequency: {suggestion.frequency}")
    print(f"   Duration:  {suggestion.duration}")
    if suggestion.instructions:
        print(f"   Instructions: {suggestion.instructions}")

    if suggestion.dosage_check:
        check = suggestion.dosage_check
        color = Colors.GREEN if check.in_range else Colors.RED
        print(f"   Dosage check: {color}{check.status.value}{Colors.END}"
              + (f" ({check.message})" if check.message else ""))

    print(f"   Interactions ({suggestion.interaction_status.value}):")
    for finding in suggestion.interaction_risks:
        print(f"     - {finding.medication} [{finding.severity.value}] {finding.description}")
    if not suggestion.interaction_risks:
        print("     none found")

    for entry in suggestion.adverse_risks:
        for risk in entry.risks:
            print(f"   {Colors.YELLOW}Risk{Colors.END}: {risk.effect} ({risk.probability.value}) - {risk.reason}")

    for warning in suggestion.safety_warnings:
        print(f"   {Colors.RED}Safety{Colors.END} [{warning.severity.value}]: {warning.description}")


def main():
    parser = argparse.ArgumentParser(
        description="Generate and check prescription suggestions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--diagnosis", default="Hypertension", help="Working diagnosis")
    parser.add_argument("--symptoms", nargs="+", default=["headache", "dizziness"], help="Presenting symptoms")
    parser.add_argument("--age", type=float, default=72, help="Patient age in years")
    parser.add_argument("--weight", type=float, default=80, help="Patient weight in kg")
    parser.add_argument("--gender", default="male", help="Patient gender")
    parser.add_argument("--egfr", type=float, default=45, help="Renal function (eGFR, mL/min)")
    parser.add_argument("--allergy", action="append", default=[], help="Documented allergy (repeatable)")
    parser.add_argument("--current-med", action="append", default=None,
                        help="Current medication (repeatable, default: Spironolactone)")
    parser.add_argument("--live", action="store_true", help="Call the configured text-generation backend")
    parser.add_argument("--backend", choices=["ollama", "openai"], help="Backend for --live")
    parser.add_argument("--db-path", help="SQLite catalog store (default: bundled dataset)")
    parser.add_argument("--cache-path", help="SQLite catalog cache")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    patient = PatientContext(
        age_years=args.age,
        weight_kg=args.weight,
        gender=args.gender,
        allergies=args.allergy,
        current_medications=args.current_med if args.current_med is not None else ["Spironolactone"],
        renal_function=args.egfr,
    )

    llm_client = get_llm_client(args.backend) if args.live else CannedLLMClient()
    catalog = build_catalog(args.db_path, args.cache_path)
    support = DecisionSupport(catalog, llm_client)

    try:
        suggestions = support.suggest(args.diagnosis, args.symptoms, patient)
    except DecisionSupportError as e:
        print(f"{Colors.RED}Request failed:{Colors.END} {e}")
        sys.exit(1)

    if args.json:
        print(json.dumps([s.to_dict() for s in suggestions], indent=2))
        return

    print(f"\n{Colors.BOLD}Diagnosis:{Colors.END} {args.diagnosis}")
    print(f"{Colors.BOLD}Catalog:{Colors.END} {catalog.status.value} ({catalog.source})")
    for i, suggestion in enumerate(suggestions, 1):
        print_suggestion(i, suggestion)


if __name__ == "__main__":
    main()
