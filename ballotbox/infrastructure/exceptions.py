"""Infrastructure layer exceptions."""

from typing import Any


class InfrastructureError(Exception):
    """Base class for infrastructure failures.

    Args:
        message: Error message
        details: Extra context for logging
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DatabaseError(InfrastructureError):
    """A repository operation failed at the database level."""
