"""
Exception hierarchy for investtrack.

Every error raised by the engine derives from InvestTrackError so callers
can catch all tracker failures with a single except clause while still
handling specific cases.

Exception Hierarchy:
    InvestTrackError (base)
    ├── ValidationError
    ├── NotFoundError
    ├── StoreError
    └── ConfigurationError
"""

from typing import Any, Optional, Dict


class InvestTrackError(Exception):
    """
    Base exception for all investtrack errors.

    Attributes:
        message: Human-readable error description
        details: Additional context (record id, field, etc.)
        cause: Original exception if this wraps another error
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.details = details or {}
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with details."""
        msg = self.message
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            msg = f"{msg} [{detail_str}]"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {self.cause})"
        return msg


class ValidationError(InvestTrackError, ValueError):
    """
    Raised when input fails boundary validation.

    Examples:
        - Non-numeric, non-finite or non-positive quantity or price
        - Exit quantity larger than the position's remaining quantity
        - Unknown asset type or field name
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        if expected:
            details["expected"] = expected
        super().__init__(message, details=details, **kwargs)


class NotFoundError(InvestTrackError, LookupError):
    """Raised when an operation references a record id that does not exist."""

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if collection:
            details["collection"] = collection
        if record_id:
            details["record_id"] = record_id
        super().__init__(message, details=details, **kwargs)


class StoreError(InvestTrackError):
    """
    Raised when the underlying record store fails.

    Examples:
        - SQLite operational errors (locked database, disk I/O)
        - Unknown collection name
        - Corrupt stored document
    """
    pass


class ConfigurationError(InvestTrackError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected:
            details["expected"] = expected
        super().__init__(message, details=details, **kwargs)
