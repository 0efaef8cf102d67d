"""
Application-level exception types.

Every failure the studio reports to a caller is one of these; the HTTP layer
maps each type to a status code in ``app.main``.
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail or message
        super().__init__(message)


class InputValidationError(AppError):
    """Raised when a required user input is empty or malformed."""


class NotAuthenticatedError(AppError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "no active session") -> None:
        super().__init__(message, detail="login required")


class GenerationError(AppError):
    """Raised when image/text generation fails."""


class ConfigurationError(AppError):
    """Raised when required configuration is missing or invalid."""


class EntityNotFoundError(AppError):
    """Raised when a stored entity cannot be found."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            detail=f"{entity_type} not found",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
