"""
DirectoryHub Test Suite.

- unit/: slug normalization, route resolution, store wrapper, integrity
  checks and bulk operations against the in-memory Supabase fake
- integration/: the HTTP surface through FastAPI's TestClient
- fakes.py: in-memory Supabase query builder
- conftest.py: Shared fixtures and test configuration

Run tests with: pytest
Run with coverage: pytest --cov=src
"""
