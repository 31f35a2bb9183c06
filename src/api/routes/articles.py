"""Article management endpoints for the DirectoryHub API.

Article slugs are unique across all articles. A slug is normalized from the
given slug (or the title when none is given) and rejected, never suffixed,
when it is taken or falls in the reserved legacy class.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_integrity_checker, get_store
from src.api.models import ArticleCreate, ArticleUpdate, ErrorResponse, MessageResponse
from src.api.routes.common import require_parent
from src.api.security import require_admin
from src.config.settings import Settings, get_settings
from src.core.exceptions import DuplicateSlugError, NotFoundError, ValidationError
from src.maintenance.integrity import IntegrityChecker
from src.models.schemas import Article
from src.routing.slugs import SlugScope, is_legacy_slug, normalize
from src.store.client import EntityStore
from src.store.result import ErrorKind, StoreResult
from src.store.tables import Entity

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/articles", tags=["Articles"])

TABLE = Entity.ARTICLES.value


def claim_article_slug(
    store: EntityStore,
    raw: str,
    legacy_prefix: str,
    exclude_id: Optional[str] = None,
) -> str:
    """
    Normalize `raw` and make sure no other article holds the result.

    Raises:
        ValidationError: Nothing slug-worthy in `raw`, or the slug is in the
            reserved legacy class.
        DuplicateSlugError: Another article already uses the slug.
    """
    candidate = normalize(raw)
    if is_legacy_slug(candidate, legacy_prefix):
        raise ValidationError(
            f"Slugs starting with '{legacy_prefix}' are reserved",
            details={"slug": candidate},
        )

    rows = store.execute(
        store.table(TABLE).select("id, slug").eq("slug", candidate),
        retry=True,
    ).unwrap("Failed to check article slug")
    taken = [row for row in rows if row.get("id") != exclude_id]

    return normalize(raw, SlugScope.from_rows(TABLE, taken))


def _check_city(store: EntityStore, checker: IntegrityChecker, city_id: str) -> None:
    if not checker.has_column(Entity.ARTICLES, "city_id"):
        raise ValidationError(
            "Articles cannot be linked to a city on this database",
            details={"missing_column": "articles.city_id"},
        )
    require_parent(store, Entity.CITIES, city_id, "City not found")


def _unwrap_write(result: StoreResult, slug: Optional[str], message: str) -> list[dict]:
    # The unique index can still fire if two requests claim a slug at once.
    if not result.ok and result.kind is ErrorKind.CONSTRAINT and slug:
        raise DuplicateSlugError(slug, TABLE, details=result.detail)
    return result.unwrap(message)


@router.get(
    "",
    response_model=list[Article],
    summary="List articles",
)
def list_articles(
    published: Optional[bool] = Query(None, description="Filter by published flag"),
    store: EntityStore = Depends(get_store),
) -> list[Article]:
    query = store.table(TABLE).select("*").order("created_at", desc=True)
    if published is not None:
        query = query.eq("published", published)

    rows = store.execute(query, retry=True).unwrap("Failed to fetch articles")
    return [Article.from_db_row(row) for row in rows]


@router.post(
    "",
    response_model=Article,
    status_code=201,
    summary="Add an article",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "Missing field, reserved or duplicate slug"},
        404: {"model": ErrorResponse, "description": "City not found"},
    },
)
def create_article(
    payload: ArticleCreate,
    store: EntityStore = Depends(get_store),
    checker: IntegrityChecker = Depends(get_integrity_checker),
    settings: Settings = Depends(get_settings),
) -> Article:
    """
    Create an article.

    **Parameters:**
    - **title**, **content**: required
    - **slug**: optional, derived from the title when omitted
    - **city_id**: optional, needs the articles.city_id column
    """
    title = (payload.title or "").strip()
    if not title or not payload.content:
        raise ValidationError("Title and content are required")

    slug = claim_article_slug(store, payload.slug or title, settings.legacy_slug_prefix)

    row = {
        "title": title,
        "content": payload.content,
        "slug": slug,
        "featured_image": payload.featured_image or None,
        "published": payload.published is True,
    }
    if payload.city_id:
        _check_city(store, checker, payload.city_id)
        row["city_id"] = payload.city_id

    rows = _unwrap_write(store.execute(store.table(TABLE).insert(row)), slug, "Failed to create article")

    logger.info("article_created", article_id=rows[0].get("id"), slug=slug)
    return Article.from_db_row(rows[0])


@router.put(
    "/{article_id}",
    response_model=Article,
    summary="Update an article",
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse, "description": "Reserved or duplicate slug"},
        404: {"model": ErrorResponse, "description": "Article or city not found"},
    },
)
def update_article(
    article_id: str,
    payload: ArticleUpdate,
    store: EntityStore = Depends(get_store),
    checker: IntegrityChecker = Depends(get_integrity_checker),
    settings: Settings = Depends(get_settings),
) -> Article:
    """Only fields present in the body are changed."""
    patch = payload.model_dump(exclude_unset=True)
    if not patch:
        raise ValidationError("No fields to update")

    if "title" in patch and not (patch["title"] or "").strip():
        raise ValidationError("Title cannot be empty")

    slug = None
    if "slug" in patch:
        slug = claim_article_slug(
            store, patch["slug"] or "", settings.legacy_slug_prefix, exclude_id=article_id
        )
        patch["slug"] = slug

    if patch.get("city_id"):
        _check_city(store, checker, patch["city_id"])

    rows = _unwrap_write(
        store.execute(store.table(TABLE).update(patch).eq("id", article_id)),
        slug,
        "Failed to update article",
    )

    if not rows:
        raise NotFoundError("Article not found")

    logger.info("article_updated", article_id=article_id, updates=list(patch.keys()))
    return Article.from_db_row(rows[0])


@router.delete(
    "/{article_id}",
    response_model=MessageResponse,
    summary="Remove an article",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"model": ErrorResponse, "description": "Article not found"},
    },
)
def delete_article(
    article_id: str,
    store: EntityStore = Depends(get_store),
) -> MessageResponse:
    rows = store.execute(store.table(TABLE).delete().eq("id", article_id)).unwrap(
        "Failed to delete article"
    )

    if not rows:
        raise NotFoundError("Article not found")

    logger.info("article_deleted", article_id=article_id)
    return MessageResponse(message="Article deleted successfully")
