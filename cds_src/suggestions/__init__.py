"""Prescription suggestion prompts and response parsing."""

from .parser import (
    SENTINEL_MEDICATION,
    SuggestionParseResult,
    parse_suggestion_response,
    parse_suggestions,
)
from .prompts import PRESCRIPTION_SYSTEM_PROMPT, build_prescription_prompt

__all__ = [
    "SENTINEL_MEDICATION",
    "SuggestionParseResult",
    "parse_suggestion_response",
    "parse_suggestions",
    "PRESCRIPTION_SYSTEM_PROMPT",
    "build_prescription_prompt",
]
