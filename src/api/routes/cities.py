"""City management endpoints for the DirectoryHub API."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_bulk_maintenance, get_store
from src.api.models import (
    CitiesBulkCreate,
    CitiesBulkResponse,
    CityCreate,
    ErrorResponse,
    MessageResponse,
)
from src.api.routes.common import require_parent
from src.api.security import require_admin
from src.core.exceptions import NotFoundError, ValidationError
from src.maintenance.bulk import BulkMaintenance
from src.models.schemas import City, State
from src.store.client import EntityStore
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/cities", tags=["Cities"])

TABLE = Entity.CITIES.value


def _require_fields(payload: CityCreate) -> tuple[str, str]:
    name = (payload.name or "").strip()
    if not name or not payload.state_id:
        raise ValidationError("City name and state ID are required")
    return name, payload.state_id


@router.get(
    "",
    response_model=list[City],
    summary="List cities",
)
def list_cities(
    state_id: Optional[str] = Query(None, alias="stateId", description="Only cities of this state"),
    store: EntityStore = Depends(get_store),
) -> list[City]:
    query = store.table(TABLE).select("*").order("name")
    if state_id:
        query = query.eq("state_id", state_id)

    rows = store.execute(query, retry=True).unwrap("Failed to fetch cities")
    return [City.from_db_row(row) for row in rows]


@router.post(
    "",
    response_model=City,
    status_code=201,
    summary="Add a new city",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "Name or state missing"},
        404: {"model": ErrorResponse, "description": "State not found"},
    },
)
def create_city(
    payload: CityCreate,
    store: EntityStore = Depends(get_store),
) -> City:
    name, state_id = _require_fields(payload)
    require_parent(store, Entity.STATES, state_id, "State not found")

    rows = store.execute(
        store.table(TABLE).insert({"name": name, "state_id": state_id})
    ).unwrap("Failed to create city")

    logger.info("city_created", city_id=rows[0].get("id"), name=name, state_id=state_id)
    return City.from_db_row(rows[0])


@router.post(
    "/bulk",
    response_model=CitiesBulkResponse,
    status_code=201,
    summary="Add many cities to one state",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid state or no usable names"},
        500: {"model": ErrorResponse, "description": "Batch rejected by the store"},
    },
)
def bulk_create_cities(
    payload: CitiesBulkCreate,
    bulk: BulkMaintenance = Depends(get_bulk_maintenance),
) -> CitiesBulkResponse:
    """
    Insert many cities for one state.

    **Parameters:**
    - **cities**: List of city names
    - **state_id**: State every city belongs to
    """
    if not payload.cities:
        raise ValidationError("Cities array is required and must not be empty")

    result = bulk.insert_cities(payload.state_id or "", payload.cities)

    return CitiesBulkResponse(
        success=True,
        created=result.created,
        state=State.from_db_row(result.parent) if result.parent else None,
        cities=[City.from_db_row(row) for row in result.rows],
    )


@router.put(
    "/{city_id}",
    response_model=City,
    summary="Update a city",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "City or state not found"},
    },
)
def update_city(
    city_id: str,
    payload: CityCreate,
    store: EntityStore = Depends(get_store),
) -> City:
    name, state_id = _require_fields(payload)
    require_parent(store, Entity.STATES, state_id, "State not found")

    rows = store.execute(
        store.table(TABLE).update({"name": name, "state_id": state_id}).eq("id", city_id)
    ).unwrap("Failed to update city")

    if not rows:
        raise NotFoundError("City not found")

    logger.info("city_updated", city_id=city_id)
    return City.from_db_row(rows[0])


@router.delete(
    "/{city_id}",
    response_model=MessageResponse,
    summary="Remove a city",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "City not found"},
    },
)
def delete_city(
    city_id: str,
    store: EntityStore = Depends(get_store),
) -> MessageResponse:
    rows = store.execute(store.table(TABLE).delete().eq("id", city_id)).unwrap(
        "Failed to delete city"
    )

    if not rows:
        raise NotFoundError("City not found")

    logger.info("city_deleted", city_id=city_id)
    return MessageResponse(message="City deleted successfully")
