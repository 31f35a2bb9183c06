"""
Core exception hierarchy for DirectoryHub.

Every failure a handler can report maps onto one of these types, and each type
carries the HTTP status it is reported with. The API layer translates them into
`{"error": ..., "details": ...}` responses.
"""

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================


class DirectoryHubError(Exception):
    """Base exception for all DirectoryHub errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Request Errors
# =============================================================================


class ValidationError(DirectoryHubError):
    """A required field is missing or a value is invalid."""

    status_code = 400


class DuplicateSlugError(ValidationError):
    """A slug is already taken within its scope."""

    def __init__(self, slug: str, scope: str, details: Optional[Any] = None):
        self.slug = slug
        self.scope = scope
        super().__init__(f"Slug '{slug}' already exists in {scope}", details)


class NotFoundError(DirectoryHubError):
    """A referenced entity does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Any] = None):
        super().__init__(message, details)


class AuthenticationError(DirectoryHubError):
    """The admin credential is missing or wrong."""

    status_code = 401


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(DirectoryHubError):
    """
    The underlying store rejected or failed a query.

    `details` carries the store's own diagnostic text verbatim.
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None, kind: Optional[str] = None):
        self.kind = kind
        super().__init__(message, details)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DirectoryHubError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details)
