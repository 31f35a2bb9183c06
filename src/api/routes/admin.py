"""Admin maintenance endpoints.

Every route here sits behind the admin gate. Read-only previews
(`slug-prefix-count`, `get-about-urls`, `GET /orphans/...`,
`GET /listings/duplicates`) are meant to be
run before the matching mutation.

Handlers are plain functions because the store client is synchronous; FastAPI
runs them in its threadpool.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Path, Query

from src.api.dependencies import get_bulk_maintenance, get_integrity_checker
from src.api.models import (
    ArticleUrlItem,
    ArticleDeleteResponse,
    ArticleUrlsResponse,
    BulkDeleteResponse,
    ColumnProbeResponse,
    DuplicateGroupItem,
    DuplicateListingsResponse,
    ErrorResponse,
    OrphanReportResponse,
    SlugPrefixCountResponse,
)
from src.api.security import require_admin
from src.config.settings import Settings, get_settings
from src.maintenance.bulk import BulkMaintenance
from src.maintenance.integrity import DuplicateReport, IntegrityChecker, ListingScope, OrphanReport
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid admin key"},
        500: {"model": ErrorResponse, "description": "Store failure, detail passed through"},
    },
)


def _orphan_response(report: OrphanReport) -> OrphanReportResponse:
    return OrphanReportResponse(
        entity=report.entity.value,
        column=report.column,
        parent=report.parent.value,
        column_present=report.column_present,
        checked=report.checked,
        orphan_count=report.orphan_count,
        repaired=report.repaired,
        orphans=report.orphans,
    )


@router.post(
    "/bulk-remove-urls",
    response_model=BulkDeleteResponse,
    summary="Delete every legacy article",
)
def bulk_remove_urls(
    bulk: BulkMaintenance = Depends(get_bulk_maintenance),
    settings: Settings = Depends(get_settings),
) -> BulkDeleteResponse:
    """
    Delete all articles in the legacy slug class in one request.

    The count is taken before the delete; running this again right after a
    success reports zero.
    """
    prefix = settings.legacy_slug_prefix
    result = bulk.delete_by_slug_prefix(prefix)

    return BulkDeleteResponse(
        deleted=result.deleted,
        message=f"Successfully deleted {result.deleted} {prefix}* articles in bulk",
    )


@router.post(
    "/delete-about-articles",
    response_model=ArticleDeleteResponse,
    summary="Delete legacy articles and list them",
)
def delete_about_articles(
    bulk: BulkMaintenance = Depends(get_bulk_maintenance),
    settings: Settings = Depends(get_settings),
) -> ArticleDeleteResponse:
    prefix = settings.legacy_slug_prefix
    result = bulk.delete_by_slug_prefix(prefix, include_articles=True)

    if result.deleted == 0:
        message = f"No {prefix}* articles found to delete"
    else:
        message = f"Successfully deleted {result.deleted} {prefix}* articles"

    return ArticleDeleteResponse(deleted=result.deleted, message=message, articles=result.articles)


@router.get(
    "/get-about-urls",
    response_model=ArticleUrlsResponse,
    summary="List legacy article URLs",
)
def get_about_urls(
    bulk: BulkMaintenance = Depends(get_bulk_maintenance),
    settings: Settings = Depends(get_settings),
) -> ArticleUrlsResponse:
    """Absolute URLs of legacy articles, e.g. for a search-engine removal request."""
    prefix = settings.legacy_slug_prefix
    urls = bulk.list_slug_prefix_urls(prefix, settings.site_url)

    if not urls:
        message = f"No {prefix}* articles found"
    else:
        message = f"Found {len(urls)} {prefix}* URLs to remove from Google index"

    return ArticleUrlsResponse(
        count=len(urls),
        urls=[
            ArticleUrlItem(url=u.url, slug=u.slug, title=u.title, created_at=u.created_at)
            for u in urls
        ],
        message=message,
    )


@router.get(
    "/slug-prefix-count",
    response_model=SlugPrefixCountResponse,
    summary="Preview a slug class",
)
def slug_prefix_count(
    entity: Entity = Query(Entity.ARTICLES),
    prefix: Optional[str] = Query(None, description="Defaults to the legacy prefix"),
    sample_size: int = Query(20, ge=0, le=100),
    checker: IntegrityChecker = Depends(get_integrity_checker),
    settings: Settings = Depends(get_settings),
) -> SlugPrefixCountResponse:
    preview = checker.count_by_slug_prefix(
        entity, prefix or settings.legacy_slug_prefix, sample_size=sample_size
    )
    return SlugPrefixCountResponse(
        entity=preview.entity.value,
        prefix=preview.prefix,
        count=preview.count,
        sample=preview.sample,
    )


@router.get(
    "/orphans/{entity}",
    response_model=OrphanReportResponse,
    summary="Find orphaned rows",
)
def find_orphans(
    entity: Entity,
    checker: IntegrityChecker = Depends(get_integrity_checker),
) -> OrphanReportResponse:
    """Read-only scan for rows whose parent reference does not resolve."""
    return _orphan_response(checker.find_orphans(entity))


@router.post(
    "/orphans/{entity}",
    response_model=OrphanReportResponse,
    summary="Repair orphaned rows",
)
def repair_orphans(
    entity: Entity,
    checker: IntegrityChecker = Depends(get_integrity_checker),
) -> OrphanReportResponse:
    """Delete orphaned cities and listings; detach orphaned articles from their city."""
    report = checker.find_orphans(entity, repair=True)
    logger.info("orphan_repair_requested", entity=entity.value, repaired=report.repaired)
    return _orphan_response(report)


def _duplicates_response(report: DuplicateReport, message: str) -> DuplicateListingsResponse:
    return DuplicateListingsResponse(
        checked=report.checked,
        duplicate_groups=len(report.groups),
        duplicates=report.duplicate_count,
        removed=report.removed,
        groups=[
            DuplicateGroupItem(original=group.original, duplicates=group.duplicates)
            for group in report.groups
        ],
        message=message,
    )


@router.get(
    "/listings/duplicates",
    response_model=DuplicateListingsResponse,
    summary="Find duplicate listings",
)
def find_duplicate_listings(
    city_id: Optional[str] = Query(None, description="Only this city"),
    state_id: Optional[str] = Query(None, description="Only cities of this state; ignored with city_id"),
    checker: IntegrityChecker = Depends(get_integrity_checker),
) -> DuplicateListingsResponse:
    """Read-only scan; the oldest listing of each group is the one a removal keeps."""
    report = checker.find_duplicate_listings(ListingScope(city_id=city_id, state_id=state_id))

    if report.checked == 0:
        message = "No listings found in the specified scope"
    else:
        message = f"Found {report.duplicate_count} duplicate listings in {len(report.groups)} groups"
    return _duplicates_response(report, message)


@router.post(
    "/listings/duplicates",
    response_model=DuplicateListingsResponse,
    summary="Remove duplicate listings",
    responses={
        400: {"model": ErrorResponse, "description": "Removal would exceed half of the listings in scope"},
    },
)
def remove_duplicate_listings(
    city_id: Optional[str] = Query(None),
    state_id: Optional[str] = Query(None),
    checker: IntegrityChecker = Depends(get_integrity_checker),
) -> DuplicateListingsResponse:
    """Delete every newer copy, keeping the oldest listing of each group."""
    report = checker.find_duplicate_listings(
        ListingScope(city_id=city_id, state_id=state_id), repair=True
    )
    logger.info("duplicate_removal_requested", city_id=city_id, state_id=state_id, removed=report.removed)
    return _duplicates_response(report, f"Successfully removed {report.removed} duplicate listings")


@router.get(
    "/schema/{entity}/columns/{column}",
    response_model=ColumnProbeResponse,
    summary="Check whether a column exists",
)
def probe_column(
    entity: Entity,
    column: str = Path(..., pattern=r"^[a-z_][a-z0-9_]*$"),
    checker: IntegrityChecker = Depends(get_integrity_checker),
) -> ColumnProbeResponse:
    return ColumnProbeResponse(
        entity=entity.value,
        column=column,
        present=checker.has_column(entity, column),
    )
