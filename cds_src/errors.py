"""Exception types for the clinical decision support core.

Parse failures and unit conversion failures are reported as values
(``ParsedDosage.is_valid``, ``ConversionResult.success``) and never raised.
The exceptions below are the conditions that end a single operation.
"""


class DecisionSupportError(Exception):
    """Base class for all decision support errors."""


class CatalogUnavailable(DecisionSupportError):
    """Neither the backing store nor the bundled dataset produced any data."""


class RecordValidationError(DecisionSupportError, ValueError):
    """A medication or guideline record failed validation at load time."""


class InvalidRequestError(DecisionSupportError, ValueError):
    """A suggestion request is missing its diagnosis or symptoms."""


class UpstreamGenerationFailure(DecisionSupportError):
    """The text-generation call failed.

    Attributes:
        kind: One of "network", "quota", "timeout", "http", "invalid_response"
    """

    def __init__(self, message: str, kind: str = "network"):
        super().__init__(message)
        self.kind = kind


class GenerationTimeout(UpstreamGenerationFailure):
    """The text-generation call did not finish within its timeout."""

    def __init__(self, message: str):
        super().__init__(message, kind="timeout")
