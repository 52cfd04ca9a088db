"""Error taxonomy for gallery operations.

Store adapters raise StoreError subclasses; the orchestrators catch every
failure at their boundary and turn it into a user-facing message with
describe_error().

Tests:
    - tests/unit/test_errors.py
"""

from __future__ import annotations

__all__ = [
    "GalleryError",
    "ConfigurationError",
    "StoreError",
    "NotFoundError",
    "AuthenticationError",
    "PermissionDeniedError",
    "ConflictError",
    "CatalogCorruptError",
    "describe_error",
]

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."

STATUS_MESSAGES: dict[int, str] = {
    401: "Authentication failed. Please check your GitHub token.",
    403: "Access denied. Your token may lack the required permissions.",
    404: "Repository not found. Please check the repository name.",
    409: "The gallery was changed by another session. Please reload and try again.",
    422: "File already exists or invalid request.",
}


class GalleryError(Exception):
    """Base exception for gallery errors."""


class ConfigurationError(GalleryError):
    """Required credential or repository identity is missing."""


class StoreError(GalleryError):
    """Failure reported by the blob store or its transport.

    Attributes:
        message: Error message (API message when the store sent one)
        status_code: HTTP status code (if applicable)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize store error.

        Args:
            message: Error message.
            status_code: HTTP status code (optional).
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"({self.status_code}) {self.message}"
        return self.message


class NotFoundError(StoreError):
    """The addressed resource does not exist."""

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message, status_code=404)


class AuthenticationError(StoreError):
    """The credential was rejected."""

    def __init__(self, message: str = "Bad credentials") -> None:
        super().__init__(message, status_code=401)


class PermissionDeniedError(StoreError):
    """The credential lacks the required scope."""

    def __init__(self, message: str = "Resource not accessible") -> None:
        super().__init__(message, status_code=403)


class ConflictError(StoreError):
    """The supplied revision token no longer matches the store."""

    def __init__(self, message: str = "Revision token does not match") -> None:
        super().__init__(message, status_code=409)


class CatalogCorruptError(GalleryError):
    """The catalog document could not be decoded and overwriting it is refused."""


def describe_error(error: BaseException) -> str:
    """Get a user-friendly message for a failure.

    Args:
        error: Any exception caught at an orchestrator boundary.

    Returns:
        Message suitable for direct display.
    """
    if isinstance(error, StoreError):
        if error.status_code in STATUS_MESSAGES:
            return STATUS_MESSAGES[error.status_code]
        return error.message or UNEXPECTED_ERROR_MESSAGE
    if isinstance(error, Exception) and str(error):
        return str(error)
    return UNEXPECTED_ERROR_MESSAGE
