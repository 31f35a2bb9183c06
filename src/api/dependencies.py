"""FastAPI dependency injection providers.

This module provides dependency functions for injecting services into route handlers.
"""

from typing import Optional

from fastapi import Depends
from supabase import create_client, Client

from src.config.settings import get_settings
from src.maintenance.bulk import BulkMaintenance
from src.maintenance.integrity import IntegrityChecker
from src.store.client import EntityStore

# The Supabase client is stateless per request and safe to share.
_supabase_client: Optional[Client] = None


def get_supabase() -> Client:
    """
    Get Supabase client instance.

    Uses a singleton pattern to reuse the same client across requests.

    Returns:
        Authenticated Supabase client.
    """
    global _supabase_client

    if _supabase_client is None:
        settings = get_settings()
        _supabase_client = create_client(
            settings.supabase_url,
            settings.supabase_key.get_secret_value(),
        )

    return _supabase_client


def get_store() -> EntityStore:
    """Get the entity store wrapping the shared Supabase client."""
    return EntityStore(get_supabase(), page_size=get_settings().store_page_size)


def get_integrity_checker(store: EntityStore = Depends(get_store)) -> IntegrityChecker:
    return IntegrityChecker(store)


def get_bulk_maintenance(store: EntityStore = Depends(get_store)) -> BulkMaintenance:
    return BulkMaintenance(store)


def reset_dependencies() -> None:
    """
    Reset all global dependency instances.

    Useful for testing or application shutdown.
    """
    global _supabase_client
    _supabase_client = None
