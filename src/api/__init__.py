"""
DirectoryHub FastAPI Application.

This module contains the REST API for the directory:

- main: FastAPI application entry point and configuration
- routes/: endpoint definitions organized by entity
- middleware/: legacy URL redirects
- models: Pydantic request/response models
- dependencies: FastAPI dependency injection providers
- security: admin key gate

API Structure:
- /health - Health check and readiness probes
- /city/{slug}, /state/{slug}, /articles/{slug} - Public lookups
- /api/states, /api/cities, /api/listings, /api/articles - Entity management
- /api/admin - Bulk maintenance and integrity checks

Example:
    from src.api.main import app

    # Run with: uvicorn src.api.main:app --reload
"""

from src.api.main import app, create_app

__all__ = ["app", "create_app"]
