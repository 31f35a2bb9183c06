"""API route modules."""

from src.api.routes.admin import router as admin_router
from src.api.routes.articles import router as articles_router
from src.api.routes.cities import router as cities_router
from src.api.routes.health import router as health_router
from src.api.routes.listings import router as listings_router
from src.api.routes.public import router as public_router
from src.api.routes.redirects import router as redirects_router
from src.api.routes.states import router as states_router

__all__ = [
    "admin_router",
    "articles_router",
    "cities_router",
    "health_router",
    "listings_router",
    "public_router",
    "redirects_router",
    "states_router",
]
