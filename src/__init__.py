"""
DirectoryHub - local business directory backend.

This package contains the core modules for the directory:
- routing: slug normalization and legacy URL resolution
- store: Supabase access returning explicit results
- maintenance: integrity checks and bulk operations
- api: FastAPI application and endpoints
- config: Pydantic settings
- models: entity schemas
"""

__version__ = "0.1.0"
