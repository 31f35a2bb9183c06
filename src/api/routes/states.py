"""State management endpoints for the DirectoryHub API.

Provides CRUD operations for states plus the bulk import used when a new
region is loaded.
"""

import structlog
from fastapi import APIRouter, Depends

from src.api.dependencies import get_bulk_maintenance, get_store
from src.api.models import (
    ErrorResponse,
    MessageResponse,
    StateCreate,
    StatesBulkCreate,
    StatesBulkResponse,
)
from src.api.security import require_admin
from src.core.exceptions import NotFoundError, ValidationError
from src.maintenance.bulk import BulkMaintenance
from src.models.schemas import State
from src.store.client import EntityStore
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/states", tags=["States"])

TABLE = Entity.STATES.value


def _require_name(payload: StateCreate) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("State name is required")
    return name


@router.get(
    "",
    response_model=list[State],
    summary="List all states",
)
def list_states(store: EntityStore = Depends(get_store)) -> list[State]:
    """List every state ordered by name."""
    rows = store.execute(
        store.table(TABLE).select("*").order("name"),
        retry=True,
    ).unwrap("Failed to fetch states")

    return [State.from_db_row(row) for row in rows]


@router.post(
    "",
    response_model=State,
    status_code=201,
    summary="Add a new state",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "State name missing"},
    },
)
def create_state(
    payload: StateCreate,
    store: EntityStore = Depends(get_store),
) -> State:
    """Create a single state."""
    name = _require_name(payload)

    rows = store.execute(store.table(TABLE).insert({"name": name})).unwrap("Failed to create state")

    logger.info("state_created", state_id=rows[0].get("id"), name=name)
    return State.from_db_row(rows[0])


@router.post(
    "/bulk",
    response_model=StatesBulkResponse,
    status_code=201,
    summary="Add many states",
    description="Trim names, drop blanks and duplicates, then insert the rest in one batch.",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "No usable state names"},
        500: {"model": ErrorResponse, "description": "Batch rejected by the store"},
    },
)
def bulk_create_states(
    payload: StatesBulkCreate,
    bulk: BulkMaintenance = Depends(get_bulk_maintenance),
) -> StatesBulkResponse:
    """
    Insert many states at once.

    **Parameters:**
    - **states**: List of state names
    """
    if not payload.states:
        raise ValidationError("States array is required and must not be empty")

    result = bulk.insert_states(payload.states)

    return StatesBulkResponse(
        success=True,
        created=result.created,
        states=[State.from_db_row(row) for row in result.rows],
    )


@router.put(
    "/{state_id}",
    response_model=State,
    summary="Rename a state",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "State not found"},
    },
)
def update_state(
    state_id: str,
    payload: StateCreate,
    store: EntityStore = Depends(get_store),
) -> State:
    name = _require_name(payload)

    rows = store.execute(
        store.table(TABLE).update({"name": name}).eq("id", state_id)
    ).unwrap("Failed to update state")

    if not rows:
        raise NotFoundError("State not found")

    logger.info("state_updated", state_id=state_id)
    return State.from_db_row(rows[0])


@router.delete(
    "/{state_id}",
    response_model=MessageResponse,
    summary="Remove a state",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "State not found"},
    },
)
def delete_state(
    state_id: str,
    store: EntityStore = Depends(get_store),
) -> MessageResponse:
    """
    Delete a state.

    Cities of the state are not touched; they show up in the orphan scan.
    """
    rows = store.execute(store.table(TABLE).delete().eq("id", state_id)).unwrap(
        "Failed to delete state"
    )

    if not rows:
        raise NotFoundError("State not found")

    logger.info("state_deleted", state_id=state_id)
    return MessageResponse(message="State deleted successfully")
