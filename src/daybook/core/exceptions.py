"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, making it easy for callers
to catch library-level errors while still distinguishing specific failure modes.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class ValidationError(DaybookError):
    """Raised when an explicit user submission is missing a required field.

    Load and import paths never raise this; they fall back to defaults.
    """

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(DaybookError, KeyError):
    """Raised when a record id or a history slot does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class DuplicateRecordError(DaybookError):
    """Raised when adding a record whose id is already in the store."""


class StorageQuotaExceeded(DaybookError):
    """Raised when persisting would exceed the storage slot's capacity.

    The mutation that triggered the save has been rolled back.
    """


class ImportFormatError(DaybookError):
    """Raised when an import payload is not a sequence of records."""
