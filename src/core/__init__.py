"""
Core infrastructure modules for DirectoryHub.

Provides common utilities used across the application:
- exceptions: Standardized exception hierarchy mapped to HTTP statuses
"""

from src.core.exceptions import (
    DirectoryHubError,
    ValidationError,
    DuplicateSlugError,
    NotFoundError,
    AuthenticationError,
    StoreError,
    ConfigurationError,
)

__all__ = [
    "DirectoryHubError",
    "ValidationError",
    "DuplicateSlugError",
    "NotFoundError",
    "AuthenticationError",
    "StoreError",
    "ConfigurationError",
]
