"""DirectoryHub API - Main FastAPI Application.

This module provides the FastAPI application for the business directory.
It includes:
- CORS middleware configuration
- Legacy URL redirects (before routing)
- Public lookups by slug and health probes at the root
- Entity management and admin maintenance under /api

Usage:
    # Run with uvicorn
    uvicorn src.api.main:app --reload

    # Or run directly
    python -m src.api.main
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import reset_dependencies
from src.api.middleware import RedirectMiddleware
from src.api.models import ErrorResponse, ValidationErrorDetail
from src.api.routes import (
    admin_router,
    articles_router,
    cities_router,
    health_router,
    listings_router,
    public_router,
    redirects_router,
    states_router,
)
from src.api.routes.health import API_VERSION, set_server_start_time
from src.api.security import ADMIN_KEY_HEADER
from src.config.settings import Settings, get_settings
from src.core.exceptions import DirectoryHubError
from src.routing.resolver import RouteResolver

logger = structlog.get_logger(__name__)

# API metadata for OpenAPI documentation
API_TITLE = "DirectoryHub API"
API_DESCRIPTION = """
## Local Business Directory

States, cities, listings and articles, addressed by canonical slugs.

### Routing

- `/city/{slug}`, `/state/{slug}` and `/articles/{slug}` are the canonical public routes
- `/<niche>-<city>` is answered with a permanent redirect to `/city/<city>`
- Links carrying a legacy `about-` article slug are redirected to the home page

### Authentication

Mutating routes and everything under `/api/admin` require the `X-Admin-Key`
header. Set `ADMIN_API_KEY` in the environment.
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    The store client is created lazily on first use, so startup only records
    the start time; shutdown drops the shared client.
    """
    logger.info("application_starting")
    set_server_start_time()
    logger.info("application_started")

    yield

    logger.info("application_stopping")
    reset_dependencies()
    logger.info("application_stopped")


def _error_response(request: Request, settings: Settings, exc: DirectoryHubError) -> JSONResponse:
    # Diagnostics are for operators: admin-gated requests or debug deployments.
    show_details = settings.debug or getattr(request.state, "admin", None) is not None

    body = ErrorResponse(
        error=exc.message,
        details=exc.details if show_details else None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Translate the exception hierarchy into `{"error", "details"}` bodies."""

    @app.exception_handler(DirectoryHubError)
    async def directory_exception_handler(request: Request, exc: DirectoryHubError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "request_failed",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error=exc.message,
            error_type=type(exc).__name__,
        )
        return _error_response(request, settings, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed bodies and parameters are reported as 400 with the field errors."""
        errors = [
            ValidationErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
            ).model_dump()
            for error in exc.errors()
        ]

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error="Invalid request", details=errors).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
        )

        body = ErrorResponse(
            error="Unexpected error occurred",
            details=str(exc) if settings.debug else None,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(mode="json", exclude_none=True),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to build the app with. Defaults to `get_settings()`.

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "Health", "description": "System health and status endpoints"},
            {"name": "Public", "description": "Canonical lookups by slug"},
            {"name": "Redirects", "description": "Legacy link handling"},
            {"name": "States", "description": "State management"},
            {"name": "Cities", "description": "City management"},
            {"name": "Listings", "description": "Business listing management"},
            {"name": "Articles", "description": "Article management and slug rules"},
            {"name": "Admin", "description": "Bulk maintenance and integrity checks"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", ADMIN_KEY_HEADER, "Accept"],
    )

    app.add_middleware(RedirectMiddleware, resolver=RouteResolver.from_settings(settings))

    register_exception_handlers(app, settings)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
            "api": "/api",
        }

    # Health and public lookups at root level
    app.include_router(health_router)
    app.include_router(public_router)

    api_router = APIRouter(prefix="/api")
    api_router.include_router(states_router)
    api_router.include_router(cities_router)
    api_router.include_router(listings_router)
    api_router.include_router(articles_router)
    api_router.include_router(redirects_router)
    api_router.include_router(admin_router)
    app.include_router(api_router)

    return app


app = create_app()


# =============================================================================
# Development Server
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
