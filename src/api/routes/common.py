"""Lookups shared by the entity routers."""

from typing import Any, Optional

from src.core.exceptions import NotFoundError
from src.store.client import EntityStore
from src.store.tables import Entity


def fetch_by_id(store: EntityStore, entity: Entity, entity_id: str, columns: str = "*") -> Optional[dict[str, Any]]:
    """Return the row with `entity_id`, or None when it does not exist."""
    rows = store.execute(
        store.table(entity.value).select(columns).eq("id", entity_id).limit(1),
        retry=True,
    ).unwrap(f"Failed to look up {entity.value}")
    return rows[0] if rows else None


def require_parent(store: EntityStore, entity: Entity, entity_id: str, message: str) -> dict[str, Any]:
    """Fetch a referenced row or raise `NotFoundError` with `message`."""
    row = fetch_by_id(store, entity, entity_id)
    if row is None:
        raise NotFoundError(message)
    return row
