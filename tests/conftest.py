"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- settings: Settings with an admin key and debug off
- fake_db: In-memory Supabase client
- store: EntityStore over the fake
- app / client: FastAPI app wired to the fake store
- admin_headers: Headers that pass the admin gate
"""

import os

# The app module builds an instance at import time; give it a config.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-supabase-key")

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_store
from src.api.main import create_app
from src.config.settings import Settings, get_settings
from src.store.client import EntityStore
from tests.fakes import FakeSupabase

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: admin gate on, public error bodies without details."""
    return Settings(
        _env_file=None,
        supabase_url="http://localhost:54321",
        supabase_key="test-supabase-key",
        admin_api_key=ADMIN_KEY,
        admin_auth_enabled=True,
        debug=False,
        site_url="https://www.dogboardingkennels.us/",
    )


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def store(fake_db) -> EntityStore:
    return EntityStore(fake_db, page_size=1000)


@pytest.fixture
def app(settings, store):
    """FastAPI app with settings and store overridden."""
    application = create_app(settings)
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_store] = lambda: store
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Test client that does not follow redirects and reports server errors as responses."""
    with TestClient(app, raise_server_exceptions=False, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def seeded(fake_db) -> dict:
    """A small directory: one state with two cities, listings and articles."""
    texas, = fake_db.seed("states", {"name": "Texas"})
    austin, dallas = fake_db.seed(
        "cities",
        {"name": "Austin", "state_id": texas["id"]},
        {"name": "Dallas", "state_id": texas["id"]},
    )
    fake_db.seed(
        "listings",
        {"business": "Bark Inn", "category": "Boarding", "city_id": austin["id"], "featured": None},
        {"business": "Canine Club", "category": "Boarding", "city_id": austin["id"], "featured": True},
        {"business": "Alpha Kennels", "category": "Boarding", "city_id": austin["id"], "featured": False},
    )
    articles = fake_db.seed(
        "articles",
        {"title": "About Austin", "content": "...", "slug": "about-austin", "published": True},
        {"title": "About Dallas", "content": "...", "slug": "about-dallas", "published": True},
        {"title": "Best Kennels", "content": "...", "slug": "best-kennels", "published": True},
        {"title": "Draft", "content": "...", "slug": "draft-post", "published": False},
    )
    return {"state": texas, "austin": austin, "dallas": dallas, "articles": articles}
