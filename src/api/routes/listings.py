"""Listing management endpoints for the DirectoryHub API.

`featured` is stored as true, false or null. Only an explicit true counts as
featured; null never reaches the store as an assumed false and is never
treated as featured when ordering.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_bulk_maintenance, get_store
from src.api.models import (
    ErrorResponse,
    ListingCreate,
    ListingsImport,
    ListingsImportResponse,
    ListingUpdate,
    MessageResponse,
)
from src.api.routes.common import require_parent
from src.api.security import require_admin
from src.core.exceptions import NotFoundError, ValidationError
from src.maintenance.bulk import BulkMaintenance
from src.models.schemas import Listing
from src.store.client import EntityStore
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/listings", tags=["Listings"])

TABLE = Entity.LISTINGS.value


def featured_first(listings: list[Listing]) -> list[Listing]:
    """Featured listings first; the incoming order is kept within each group."""
    return sorted(listings, key=lambda listing: not listing.is_featured)


@router.get(
    "",
    response_model=list[Listing],
    summary="List listings",
)
def list_listings(
    city_id: Optional[str] = Query(None, alias="cityId"),
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None, description="true: featured only, false: everything else"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    store: EntityStore = Depends(get_store),
) -> list[Listing]:
    query = store.table(TABLE).select("*").order("business")
    if city_id:
        query = query.eq("city_id", city_id)
    if category:
        query = query.eq("category", category)
    if featured is True:
        query = query.eq("featured", True)

    rows = store.execute(query, retry=True).unwrap("Failed to fetch listings")
    listings = [Listing.from_db_row(row) for row in rows]

    if featured is False:
        listings = [listing for listing in listings if not listing.is_featured]

    listings = featured_first(listings)
    return listings[:limit] if limit else listings


@router.post(
    "",
    response_model=Listing,
    status_code=201,
    summary="Add a listing",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "Required field missing"},
        404: {"model": ErrorResponse, "description": "City not found"},
    },
)
def create_listing(
    payload: ListingCreate,
    store: EntityStore = Depends(get_store),
) -> Listing:
    """
    Create a listing.

    **Parameters:**
    - **business**, **category**, **city_id**: required
    - everything else is optional; a new listing is not featured unless asked
    """
    business = (payload.business or "").strip()
    category = (payload.category or "").strip()
    if not business or not category or not payload.city_id:
        raise ValidationError("Business name, category, and city ID are required")

    require_parent(store, Entity.CITIES, payload.city_id, "City not found")

    row = {
        "business": business,
        "category": category,
        "review_rating": payload.review_rating or 0,
        "number_of_reviews": payload.number_of_reviews or 0,
        "address": payload.address or "",
        "website": payload.website or "",
        "phone": payload.phone or "",
        "email": payload.email or "",
        "city_id": payload.city_id,
        "featured": payload.featured is True,
    }

    rows = store.execute(store.table(TABLE).insert(row)).unwrap("Failed to create listing")

    logger.info("listing_created", listing_id=rows[0].get("id"), city_id=payload.city_id)
    return Listing.from_db_row(rows[0])


@router.post(
    "/import",
    response_model=ListingsImportResponse,
    status_code=201,
    summary="Import listings into a city",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "Unknown city or no importable rows"},
    },
)
def import_listings(
    payload: ListingsImport,
    bulk: BulkMaintenance = Depends(get_bulk_maintenance),
) -> ListingsImportResponse:
    """
    Import rows from a spreadsheet export in one batch.

    Rows without a business name, or with neither a phone number nor a
    website, are skipped. `Featured` accepts true, 1 or yes.
    """
    if not payload.city_id or payload.listings is None:
        raise ValidationError("City ID and listings are required")

    result = bulk.insert_listings(payload.city_id, payload.listings)

    message = f"Successfully imported {result.created} listings"
    if result.skipped:
        message += f" ({result.skipped} rows without a business name, phone or website were skipped)"

    return ListingsImportResponse(
        imported=result.created,
        skipped=result.skipped,
        total=len(payload.listings),
        message=message,
        listings=[Listing.from_db_row(row) for row in result.rows],
    )


@router.put(
    "/{listing_id}",
    response_model=Listing,
    summary="Update a listing",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "Listing or city not found"},
    },
)
def update_listing(
    listing_id: str,
    payload: ListingUpdate,
    store: EntityStore = Depends(get_store),
) -> Listing:
    """Only fields present in the body are changed."""
    patch = payload.model_dump(exclude_unset=True)
    if not patch:
        raise ValidationError("No fields to update")

    for required in ("business", "category", "city_id"):
        if required in patch and not patch[required]:
            raise ValidationError(f"{required} cannot be empty")

    if "city_id" in patch:
        require_parent(store, Entity.CITIES, patch["city_id"], "City not found")

    rows = store.execute(
        store.table(TABLE).update(patch).eq("id", listing_id)
    ).unwrap("Failed to update listing")

    if not rows:
        raise NotFoundError("Listing not found")

    logger.info("listing_updated", listing_id=listing_id, updates=list(patch.keys()))
    return Listing.from_db_row(rows[0])


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Remove a listing",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "Listing not found"},
    },
)
def delete_listing(
    listing_id: str,
    store: EntityStore = Depends(get_store),
) -> MessageResponse:
    rows = store.execute(store.table(TABLE).delete().eq("id", listing_id)).unwrap(
        "Failed to delete listing"
    )

    if not rows:
        raise NotFoundError("Listing not found")

    logger.info("listing_deleted", listing_id=listing_id)
    return MessageResponse(message="Listing deleted successfully")
