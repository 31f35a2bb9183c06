"""Middleware package for DirectoryHub API.

Provides custom middleware components for the FastAPI application.
"""

from src.api.middleware.redirects import RedirectMiddleware

__all__ = ["RedirectMiddleware"]
