"""Route resolution for legacy and alias URL shapes.

Every inbound path is checked here before normal routing. The resolver only
looks at the shape of the URL: it never asks the store whether the target
exists, so a redirect for an unknown city lands on a page that reports
not-found by itself.

Rules, first match wins:
1. ``/<niche-prefix>-<city-slug>`` redirects permanently to ``/city/<city-slug>``.
2. A ``slug`` query parameter with the legacy prefix redirects permanently to ``/``.
3. Anything else passes through unchanged.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

from src.routing.slugs import DEFAULT_LEGACY_PREFIX, is_legacy_slug

if TYPE_CHECKING:
    from src.config.settings import Settings

DEFAULT_EXCLUDED_PREFIXES = ("/admin", "/api", "/static", "/_next", "/favicon.ico")


class RouteAction(str, Enum):
    """What to do with a request."""

    PASS = "pass"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of resolving one request path."""

    action: RouteAction
    location: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def pass_through(cls) -> "RouteDecision":
        return cls(action=RouteAction.PASS)

    @classmethod
    def redirect(cls, location: str, status_code: int = 301) -> "RouteDecision":
        return cls(action=RouteAction.REDIRECT, location=location, status_code=status_code)

    @property
    def is_redirect(self) -> bool:
        return self.action is RouteAction.REDIRECT


class RouteResolver:
    """
    Decides between pass-through and permanent redirect for a request.

    Args:
        niche_prefix: Slug of the directory vertical, e.g. ``boarding-kennels``.
        legacy_prefix: Article slug prefix of the deprecated content class.
        excluded_prefixes: Path prefixes that are never resolved (admin, API,
            static assets).
    """

    def __init__(
        self,
        niche_prefix: str,
        legacy_prefix: str = DEFAULT_LEGACY_PREFIX,
        excluded_prefixes: Iterable[str] = DEFAULT_EXCLUDED_PREFIXES,
    ):
        self.niche_prefix = niche_prefix.strip("/")
        self.legacy_prefix = legacy_prefix
        self.excluded_prefixes = tuple(p.rstrip("/") for p in excluded_prefixes if p.strip("/"))
        self._niche_path = re.compile(rf"^/{re.escape(self.niche_prefix)}-([^/]+)/?$")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RouteResolver":
        return cls(
            niche_prefix=settings.niche_prefix,
            legacy_prefix=settings.legacy_slug_prefix,
            excluded_prefixes=settings.redirect_excluded_prefixes,
        )

    def is_excluded(self, path: str) -> bool:
        """Admin, API and static paths bypass rule evaluation entirely."""
        return any(
            path == prefix or path.startswith(prefix + "/")
            for prefix in self.excluded_prefixes
        )

    def city_slug_for(self, path: str) -> Optional[str]:
        """Return the city slug of a ``/<niche>-<city>`` path, if it has that shape."""
        match = self._niche_path.match(path)
        return match.group(1) if match else None

    def resolve(self, path: str, query: Optional[Mapping[str, str]] = None) -> RouteDecision:
        """Apply the redirect rules to a request path and its query parameters."""
        if not path or self.is_excluded(path):
            return RouteDecision.pass_through()

        city_slug = self.city_slug_for(path)
        if city_slug is not None:
            return RouteDecision.redirect(f"/city/{city_slug}")

        if query is not None and is_legacy_slug(query.get("slug"), self.legacy_prefix):
            return RouteDecision.redirect("/")

        return RouteDecision.pass_through()
