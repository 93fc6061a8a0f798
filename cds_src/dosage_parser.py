"""Free-text dosage parsing.

Turns expressions such as "500 mg twice daily oral" or "5-10 mg/kg every
6-8 hours" into a ParsedDosage. Parse failures are reported through
``ParsedDosage.is_valid`` and never raised.
"""

import logging
import re

from .models import ParsedDosage

logger = logging.getLogger(__name__)

ROUTE_KEYWORDS = ("oral", "iv", "im", "sc", "topical", "inhalation", "pr", "sl")

# <number>[-<number>] <unit>[/kg] <rest>. The number must start a token and the
# unit must end one, so "1e5 mg" and "x10 mg" are rejected.
DOSAGE_PATTERN = re.compile(
    r"(?<![\w.])(?P<value>\d+(?:\.\d+)?)"
    r"(?:\s*(?:-|to)\s*(?P<max>\d+(?:\.\d+)?))?"
    r"\s*(?P<unit>[a-zA-Zµμ]+)(?!\w)"
    r"(?P<per_kg>\s*/\s*kg\b)?"
    r"(?P<rest>.*)",
    re.IGNORECASE | re.DOTALL,
)

ROUTE_PATTERN = re.compile(
    r"\b(" + "|".join(ROUTE_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


def parse_dosage(text) -> ParsedDosage:
    """Parse a dosage expression.

    Args:
        text: Dosage text, e.g. "10 mg once daily oral"

    Returns:
        ParsedDosage. ``is_valid`` is False with a message when the text
        is empty or has no leading quantity and unit.
    """
    if not isinstance(text, str) or not text.strip():
        return ParsedDosage.invalid("No dosage provided")

    try:
        match = DOSAGE_PATTERN.search(text)
        if not match:
            return ParsedDosage.invalid("Invalid dosage format")

        value = float(match.group("value"))
        max_value = float(match.group("max")) if match.group("max") else None
        unit = match.group("unit").lower()

        rest = match.group("rest")
        frequency_text = rest
        route = None

        route_match = ROUTE_PATTERN.search(rest)
        if route_match:
            route = route_match.group(1).lower()
            frequency_text = rest[:route_match.start()]

        frequency = frequency_text.strip(" \t\r\n,;").lower() or None

        return ParsedDosage(
            value=value,
            unit=unit,
            frequency=frequency,
            route=route,
            max_value=max_value,
            per_weight=bool(match.group("per_kg")),
        )
    except Exception as e:
        logger.warning(f"Error parsing dosage '{text}': {e}")
        return ParsedDosage.invalid("Error parsing dosage")
