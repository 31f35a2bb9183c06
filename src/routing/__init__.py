"""
Content addressing and routing.

- slugs: slug normalization, scopes and the legacy-prefix predicate
- resolver: redirect rules applied before normal routing
"""

from src.routing.resolver import RouteAction, RouteDecision, RouteResolver
from src.routing.slugs import (
    SlugScope,
    is_legacy_slug,
    is_valid_slug,
    normalize,
    slugify,
)

__all__ = [
    "RouteAction",
    "RouteDecision",
    "RouteResolver",
    "SlugScope",
    "is_legacy_slug",
    "is_valid_slug",
    "normalize",
    "slugify",
]
