"""Redirect endpoint for legacy article links.

`/api` is excluded from the redirect middleware, so links that point at this
endpoint are resolved here with the same legacy rule.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from src.api.models import ErrorResponse
from src.config.settings import Settings, get_settings
from src.core.exceptions import NotFoundError
from src.routing.slugs import is_legacy_slug

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Redirects"])


@router.get(
    "/redirect-about-articles",
    status_code=301,
    summary="Redirect a legacy article slug",
    response_class=RedirectResponse,
    responses={
        301: {"description": "Legacy slug, redirected to the home page"},
        404: {"model": ErrorResponse, "description": "Not a legacy slug"},
    },
)
async def redirect_about_articles(
    slug: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    if not is_legacy_slug(slug, settings.legacy_slug_prefix):
        raise NotFoundError()

    logger.info("legacy_article_redirected", slug=slug, location="/")
    return RedirectResponse(url="/", status_code=301)
