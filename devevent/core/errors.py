"""Domain error codes and exceptions."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    CONFIGURATION = "CONFIGURATION"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def details(self) -> Optional[Dict[str, Any]]:
        return None


class ConfigurationError(DomainError):
    """Raised when required configuration is missing or malformed."""

    code = ErrorCode.CONFIGURATION


class DatabaseConnectionError(DomainError):
    """Raised when a connection attempt to the database fails."""

    code = ErrorCode.CONNECTION_FAILED


class ValidationError(DomainError):
    """Raised when a field fails a shape or normalization rule."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    @property
    def details(self) -> Dict[str, Any]:
        return {"field": self.field}


class ReferenceNotFoundError(ValidationError):
    """Raised when a booking references an event that does not exist."""

    code = ErrorCode.REFERENCE_NOT_FOUND

    def __init__(self, event_id: str) -> None:
        super().__init__(
            "event_id",
            "Cannot create booking: referenced event does not exist.",
        )
        self.event_id = event_id


class ConflictError(DomainError):
    """Raised when a write violates a uniqueness constraint."""

    code = ErrorCode.CONFLICT

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f'An event with {field} "{value}" already exists.')
        self.field = field
        self.value = value

    @property
    def details(self) -> Dict[str, Any]:
        return {"field": self.field, "value": self.value}


class NotFoundError(DomainError):
    """Raised when a record is not found."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier
