"""
Exception hierarchy for the chat tracking service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ChatTrackingException(Exception):
    """Base exception for all chat tracking errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(ChatTrackingException):
    """Raised when caller-supplied data violates a documented constraint."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(ChatTrackingException):
    """Raised when a referenced resource does not exist or is not live."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource_type: Kind of resource (session, message)
            resource_id: Identifier that was looked up
            details: Additional context
        """
        details = details or {}
        details["resource_type"] = resource_type
        details["resource_id"] = str(resource_id)
        super().__init__(f"{resource_type.capitalize()} not found: {resource_id}", details)


class SessionNotFoundError(NotFoundError):
    """Raised when a session cannot be found or is no longer live."""

    def __init__(self, session_id: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__("session", session_id, details)


class PersistenceError(ChatTrackingException):
    """Raised when an underlying storage operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize persistence error.

        Args:
            message: Error message
            operation: Operation that failed (insert, update, sweep)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ForwardingError(ChatTrackingException):
    """Raised when a trace sink call fails (non-critical, never leaves the forwarder)."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
