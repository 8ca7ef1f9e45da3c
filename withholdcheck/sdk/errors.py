"""Exceptions shared across the SDK and adapters.

Only AcquisitionError is recovered by retrying. Exhausting the retry budget
is reported as a failed CalculationReport, never raised.
"""


class AcquisitionError(Exception):
    """Raised when a calculator could not be driven to a result.

    Covers navigation timeouts, missing elements and network failures.
    """

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class ParseError(ValueError):
    """Raised when a displayed amount is not numeric."""
    pass


class VocabularyError(Exception):
    """Raised when vocabulary.yaml is missing, malformed or lacks a source."""
    pass


class SettingsError(Exception):
    """Raised when settings.json is unreadable or fails validation."""
    pass
