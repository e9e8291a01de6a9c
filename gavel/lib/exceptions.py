"""Custom exceptions for Gavel."""

from typing import Any


class GavelError(Exception):
    """Base exception for all Gavel errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(GavelError):
    """Raised when setup input fails validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class RosterError(ValidationError):
    """Raised when the player roster is malformed."""

    pass


class TopicError(ValidationError):
    """Raised when custom topic text or index is invalid."""

    pass


# =============================================================================
# Engine Errors
# =============================================================================


class EngineError(GavelError):
    """Base exception for round engine errors."""

    pass


class IntentRejectedError(EngineError):
    """Raised at the API boundary when the engine refuses an intent."""

    def __init__(
        self,
        reason: str,
        intent: str | None = None,
        phase: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(reason, **kwargs)
        self.reason = reason
        self.intent = intent
        self.phase = phase


class InvariantViolationError(EngineError):
    """Raised when a structural game invariant is broken.

    These are programming errors, never recoverable runtime conditions.
    """

    pass


# =============================================================================
# Table Errors
# =============================================================================


class TableError(GavelError):
    """Base exception for table-related errors."""

    pass


class TableNotFoundError(TableError):
    """Raised when table does not exist."""

    def __init__(self, table_id: str, **kwargs: Any):
        super().__init__(f"Table not found: {table_id}", **kwargs)
        self.table_id = table_id


class TableExpiredError(TableError):
    """Raised when table has expired."""

    def __init__(self, table_id: str, **kwargs: Any):
        super().__init__(f"Table expired: {table_id}", **kwargs)
        self.table_id = table_id
