"""Exception types raised by the tax-calc SDK.

All errors derive from ValueError so callers that only care about
"bad input" can catch broadly.
"""

from typing import Any, Optional


class TaxCalcError(ValueError):
    """Base class for tax-calc input errors."""
    pass


class IncomeTaxValidationError(TaxCalcError):
    """Raised when a record breaks a business rule (negative income, etc.)."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class RecordParseError(TaxCalcError):
    """Raised when a raw CSV row cannot be turned into a record."""

    def __init__(self, message: str, column: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.column = column
        self.value = value


class BatchError(TaxCalcError):
    """First row-level failure of a batch. Aborts the whole batch."""

    def __init__(self, row: int, cause: Exception):
        super().__init__(f"row {row}: {cause}")
        self.row = row
        self.cause = cause


class BracketScheduleError(TaxCalcError):
    """Raised when a bracket schedule file is missing or invalid."""
    pass


def describe_validation_error(error) -> str:
    """One-line summary of a pydantic ValidationError (first problem only)."""
    first = error.errors()[0]
    location = ".".join(str(p) for p in first["loc"]) or "body"
    return f"{location}: {first['msg']}"
