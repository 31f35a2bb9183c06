"""Public lookups by canonical slug.

These are the targets of the redirect rules: `/city/<slug>`,
`/state/<slug>` and `/articles/<slug>`. A slug that does not resolve is a
plain 404 with the public error body; redirects are never issued from here.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends

from src.api.dependencies import get_store
from src.api.models import CityPage, ErrorResponse, StatePage
from src.api.routes.common import fetch_by_id
from src.api.routes.listings import featured_first
from src.config.settings import Settings, get_settings
from src.core.exceptions import NotFoundError
from src.models.schemas import Article, City, Listing, State
from src.routing.slugs import is_legacy_slug, is_valid_slug, slugify
from src.store.client import EntityStore
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Public"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Nothing matches the slug"}}


def find_by_name_slug(store: EntityStore, entity: Entity, slug: str) -> Optional[dict[str, Any]]:
    """
    Return the first row (by name) whose name slugifies to `slug`.

    Names are not unique, so two rows can share a slug; the alphabetically
    first one wins and the rest are unreachable by slug.
    """
    if not is_valid_slug(slug):
        return None

    rows = store.fetch_all(
        lambda: store.table(entity.value).select("*").order("id")
    ).unwrap(f"Failed to fetch {entity.value}")

    matches = [row for row in rows if slugify(row.get("name") or "") == slug]
    if not matches:
        return None
    return min(matches, key=lambda row: (row.get("name") or "", row["id"]))


@router.get(
    "/city/{slug}",
    response_model=CityPage,
    summary="City by slug",
    responses=NOT_FOUND,
)
def city_page(
    slug: str,
    store: EntityStore = Depends(get_store),
) -> CityPage:
    """City with its state and listings, featured listings first."""
    row = find_by_name_slug(store, Entity.CITIES, slug)
    if row is None:
        raise NotFoundError()

    city = City.from_db_row(row)
    state_row = fetch_by_id(store, Entity.STATES, city.state_id) if city.state_id else None

    listing_rows = store.execute(
        store.table(Entity.LISTINGS.value).select("*").eq("city_id", city.id).order("business"),
        retry=True,
    ).unwrap("Failed to fetch listings")
    listings = featured_first([Listing.from_db_row(r) for r in listing_rows])

    return CityPage(
        city=city,
        state=State.from_db_row(state_row) if state_row else None,
        slug=slug,
        listings=listings,
        featured_count=sum(1 for listing in listings if listing.is_featured),
    )


@router.get(
    "/state/{slug}",
    response_model=StatePage,
    summary="State by slug",
    responses=NOT_FOUND,
)
def state_page(
    slug: str,
    store: EntityStore = Depends(get_store),
) -> StatePage:
    row = find_by_name_slug(store, Entity.STATES, slug)
    if row is None:
        raise NotFoundError()

    state = State.from_db_row(row)
    city_rows = store.execute(
        store.table(Entity.CITIES.value).select("*").eq("state_id", state.id).order("name"),
        retry=True,
    ).unwrap("Failed to fetch cities")

    return StatePage(
        state=state,
        slug=slug,
        cities=[City.from_db_row(r) for r in city_rows],
    )


@router.get(
    "/articles/{slug}",
    response_model=Article,
    summary="Published article by slug",
    responses=NOT_FOUND,
)
def article_page(
    slug: str,
    store: EntityStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> Article:
    """Legacy and unpublished articles are reported as missing."""
    if not is_valid_slug(slug) or is_legacy_slug(slug, settings.legacy_slug_prefix):
        raise NotFoundError()

    rows = store.execute(
        store.table(Entity.ARTICLES.value).select("*").eq("slug", slug).limit(1),
        retry=True,
    ).unwrap("Failed to fetch article")

    if not rows or rows[0].get("published") is not True:
        raise NotFoundError()

    return Article.from_db_row(rows[0])
