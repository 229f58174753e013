"""
Custom exceptions for Finance4All.

Every error carries a machine-readable ``code`` that the server
surfaces next to the message.
"""

from typing import Iterable

from pydantic import ValidationError


class Finance4AllError(Exception):
    """Base exception for Finance4All errors."""

    code = "INTERNAL_ERROR"


class NotAuthenticatedError(Finance4AllError):
    """Raised when an operation needs a signed-in caller."""

    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFoundError(Finance4AllError):
    """Raised when a requested record does not exist."""

    code = "NOT_FOUND"


class ForbiddenError(Finance4AllError):
    """Raised when the caller does not own the requested record."""

    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class UserAlreadyExistsError(Finance4AllError):
    """Raised when creating a user record that already exists."""

    code = "USER_ALREADY_EXISTS"

    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class InputValidationError(Finance4AllError):
    """Raised when operation input fails validation."""

    code = "VALIDATION_ERROR"

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> "InputValidationError":
        """Build a single readable message from a pydantic error."""
        return cls(f"Validation error: {', '.join(_format_errors(error.errors()))}")


class AuthError(Finance4AllError):
    """Raised when the identity provider rejects a request."""

    code = "AUTH_ERROR"

    def __init__(self, message: str, provider_code: str = ""):
        super().__init__(message)
        self.provider_code = provider_code


def _format_errors(errors: Iterable[dict]) -> list[str]:
    messages = []
    for err in errors:
        path = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{path}: {err['msg']}" if path else err["msg"])
    return messages


class ApiError(Finance4AllError):
    """Raised when the backend API returns errors instead of data."""

    code = "API_ERROR"
