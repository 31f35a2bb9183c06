"""Legacy URL redirect middleware for FastAPI.

Runs the route resolver on every request before routing and answers alias
URL shapes with a permanent redirect to their canonical form.

Usage:
    from src.api.middleware import RedirectMiddleware
    from src.routing import RouteResolver

    app = FastAPI()
    app.add_middleware(RedirectMiddleware, resolver=RouteResolver("boarding-kennels"))

Admin, API and static-asset paths are excluded by the resolver itself.
"""

import structlog
from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.routing.resolver import RouteResolver

logger = structlog.get_logger(__name__)


class RedirectMiddleware(BaseHTTPMiddleware):
    """
    Middleware that issues canonical redirects for legacy URL shapes.

    Unmatched requests pass through untouched; the middleware never turns a
    request into an error.
    """

    def __init__(self, app: ASGIApp, resolver: RouteResolver):
        super().__init__(app)
        self.resolver = resolver

    async def dispatch(self, request: Request, call_next):
        decision = self.resolver.resolve(request.url.path, request.query_params)

        if decision.is_redirect:
            logger.info(
                "legacy_url_redirected",
                path=request.url.path,
                location=decision.location,
                status_code=decision.status_code,
            )
            return RedirectResponse(url=decision.location, status_code=decision.status_code)

        return await call_next(request)
