"""Parse free-text prescription suggestions into structured records.

Completions are untrusted prose. Each field has its own extractor so the
heuristics can be tested in isolation. Anything that cannot be parsed
yields a single sentinel suggestion telling the reader to consult a
healthcare provider; the parser never raises.
"""

import logging
import re
from dataclasses import dataclass, field

from ..models import PrescriptionSuggestion

logger = logging.getLogger(__name__)

SENTINEL_MEDICATION = "Consult healthcare provider"
DEFAULT_SCHEDULE = "As directed by physician"

# Reasons reported on an unparsed result
REASON_EMPTY = "empty_response"
REASON_MISSING_HEADER = "missing_header"
REASON_NO_SUGGESTIONS = "no_suggestions"
REASON_PARSER_ERROR = "parser_error"

# Header line; the rest of the line (e.g. "with dosage and frequency:") is consumed
HEADER_PATTERN = re.compile(r"primary medication recommendations[^\n]*", re.IGNORECASE)

# Next numbered section of the requested layout ends the recommendations
NEXT_SECTION_PATTERN = re.compile(
    r"^\s*(?:#+\s*)?\**\s*\d+[.)]\s*\**\s*(?:alternative medications|contraindications and warnings|"
    r"potential side effects|special instructions|duration of treatment|follow-up recommendations)\b",
    re.IGNORECASE | re.MULTILINE,
)

BLOCK_SEPARATOR = re.compile(r"\n\s*\n")

LIST_MARKER = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s*")
BULLET_LINE = re.compile(r"^\s*[-*•]\s*(.+)$")
LABEL_LINE = re.compile(r"^\s*[-*•]?\s*\**(?P<label>[A-Za-z][A-Za-z \-]*?)\**\s*:\**\s*(?P<rest>.*)$")

# "<medication> <number...>", "<medication> (<number...>)",
# "<medication>: <detail>" or "<medication> - <detail>"
NAME_NUMBER_PATTERN = re.compile(r"^(?P<name>[A-Za-z][^:\n]*?)\s+(?P<paren>\()?(?P<detail>\d.*)$")
NAME_SEPARATOR_PATTERN = re.compile(r"^(?P<name>[A-Za-z][^:\n]*?)\s*(?::|\s[-–]\s)\s*(?P<detail>.+)$")

DOSE_PATTERN = re.compile(
    r"(?<![\w.])\d+(?:\.\d+)?(?:\s*(?:-|to)\s*\d+(?:\.\d+)?)?\s*[a-zA-Zµμ]+(?!\w)(?:\s*/\s*kg)?"
)
TIMES_PER_DAY_PATTERN = re.compile(
    r"\b(?:\d+|one|two|three|four|five|six)\s+times?\s+(?:a|per)\s+day\b",
    re.IGNORECASE,
)
FOR_DURATION_PATTERN = re.compile(
    r"\bfor\s+((?:\d+|one|two|three|four|five|six|seven|eight|nine|ten|fourteen|thirty)"
    r"(?:\s*(?:-|to)\s*\d+)?\s+(?:days?|weeks?|months?|years?))\b",
    re.IGNORECASE,
)

FIELD_LABELS = {
    "frequency": ("frequency",),
    "duration": ("duration",),
    "instructions": ("instructions", "instruction", "special instructions"),
    "warnings": ("warnings", "warning", "precautions"),
    "contraindications": ("contraindications", "contraindication"),
    "side_effects": ("side effects", "side-effects", "adverse effects"),
    "alternatives": ("alternatives", "alternative", "alternative medications"),
}
ALL_LABELS = {label for labels in FIELD_LABELS.values() for label in labels}

# Lead-in words that are not medication names
NON_MEDICATION_NAMES = {"note", "notes", "follow-up", "monitoring", "recommendation", "recommendations"}


@dataclass
class SuggestionParseResult:
    """Tagged parse result.

    ``parsed`` is False when the completion could not be structured; in
    that case ``suggestions`` holds only the sentinel and ``reason`` says why.
    """
    parsed: bool
    suggestions: list[PrescriptionSuggestion] = field(default_factory=list)
    reason: str | None = None


def sentinel_suggestion() -> PrescriptionSuggestion:
    return PrescriptionSuggestion(
        medication=SENTINEL_MEDICATION,
        instructions="Unable to parse medication suggestions. Please consult a healthcare provider.",
        is_sentinel=True,
    )


def _unparsed(reason: str) -> SuggestionParseResult:
    return SuggestionParseResult(parsed=False, suggestions=[sentinel_suggestion()], reason=reason)


def _clean(line: str) -> str:
    return LIST_MARKER.sub("", line.replace("**", "")).strip()


def _labeled_value(block: str, labels: tuple[str, ...]) -> str | None:
    for line in block.splitlines():
        match = LABEL_LINE.match(line)
        if match and match.group("label").strip().lower() in labels:
            return match.group("rest").strip()
    return None


# --- Field extractors ---


def extract_name_and_detail(block: str) -> tuple[str, str] | None:
    """Split the first line of a block into medication name and detail text.

    Returns None if the line does not look like "<medication> <detail>".
    """
    lines = [line for line in block.splitlines() if line.strip()]
    if not lines:
        return None

    first = _clean(lines[0])
    match = NAME_NUMBER_PATTERN.match(first) or NAME_SEPARATOR_PATTERN.match(first)
    if not match:
        return None

    name = match.group("name").strip(" -–:,")
    detail = match.group("detail")
    if match.groupdict().get("paren"):
        detail = detail.replace(")", "", 1)
    detail = detail.strip()
    if not name or name.lower() in ALL_LABELS or name.lower() in NON_MEDICATION_NAMES:
        return None
    return name, detail


def extract_dosage(detail: str) -> str:
    """Leading quantity and unit from the detail text, else the detail verbatim."""
    match = DOSE_PATTERN.search(detail)
    if match:
        return match.group(0).strip()
    return detail.strip()


def extract_frequency(block: str) -> str:
    labeled = _labeled_value(block, FIELD_LABELS["frequency"])
    if labeled:
        return labeled

    match = TIMES_PER_DAY_PATTERN.search(block)
    if match:
        return match.group(0)

    return DEFAULT_SCHEDULE


def extract_duration(block: str) -> str:
    labeled = _labeled_value(block, FIELD_LABELS["duration"])
    if labeled:
        return labeled

    match = FOR_DURATION_PATTERN.search(block)
    if match:
        return match.group(1)

    return DEFAULT_SCHEDULE


def extract_instructions(block: str) -> str:
    return _labeled_value(block, FIELD_LABELS["instructions"]) or ""


def extract_list_section(block: str, labels: tuple[str, ...]) -> list[str]:
    """Items of a labeled list section.

    Items may follow the label inline, separated by commas or semicolons,
    or as bullet lines directly below it.
    """
    lines = block.splitlines()
    for i, line in enumerate(lines):
        match = LABEL_LINE.match(line)
        if not match or match.group("label").strip().lower() not in labels:
            continue

        items = [item.strip() for item in re.split(r"[;,]", match.group("rest"))]
        for following in lines[i + 1:]:
            label = LABEL_LINE.match(following)
            if label and label.group("label").strip().lower() in ALL_LABELS:
                break
            bullet = BULLET_LINE.match(following)
            if not bullet:
                break
            items.append(bullet.group(1).strip())

        return [item for item in items if item]

    return []


def parse_block(block: str) -> PrescriptionSuggestion | None:
    """Parse one blank-line-delimited block. Returns None if it has no name."""
    split = extract_name_and_detail(block)
    if split is None:
        return None

    name, detail = split
    return PrescriptionSuggestion(
        medication=name,
        dosage=extract_dosage(detail),
        frequency=extract_frequency(block),
        duration=extract_duration(block),
        instructions=extract_instructions(block),
        warnings=extract_list_section(block, FIELD_LABELS["warnings"]),
        contraindications=extract_list_section(block, FIELD_LABELS["contraindications"]),
        side_effects=extract_list_section(block, FIELD_LABELS["side_effects"]),
        alternatives=extract_list_section(block, FIELD_LABELS["alternatives"]),
    )


# --- Entry points ---


def parse_suggestion_response(raw_text) -> SuggestionParseResult:
    """Parse a completion into suggestions, reporting why it failed if it did."""
    try:
        if not isinstance(raw_text, str) or not raw_text.strip():
            return _unparsed(REASON_EMPTY)

        header = HEADER_PATTERN.search(raw_text)
        if not header:
            logger.info("Completion has no primary medication recommendations section")
            return _unparsed(REASON_MISSING_HEADER)

        section = raw_text[header.end():]
        next_section = NEXT_SECTION_PATTERN.search(section)
        if next_section:
            section = section[:next_section.start()]

        suggestions = []
        for block in BLOCK_SEPARATOR.split(section):
            if not block.strip():
                continue
            suggestion = parse_block(block)
            if suggestion is not None:
                suggestions.append(suggestion)

        if not suggestions:
            logger.info("No medication suggestions found under recommendations header")
            return _unparsed(REASON_NO_SUGGESTIONS)

        return SuggestionParseResult(parsed=True, suggestions=suggestions)

    except Exception as e:
        logger.error(f"Failed to parse suggestion response: {e}", exc_info=True)
        return _unparsed(REASON_PARSER_ERROR)


def parse_suggestions(raw_text) -> list[PrescriptionSuggestion]:
    """Parse a completion into a non-empty list of suggestions. Never raises."""
    return parse_suggestion_response(raw_text).suggestions
