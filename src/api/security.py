"""Admin gate for mutating and maintenance routes.

Enable by setting ADMIN_AUTH_ENABLED=true and ADMIN_API_KEY=<secret> in the
environment; clients then send the key in the X-Admin-Key header.
"""

import secrets
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from src.config.settings import Settings, get_settings
from src.core.exceptions import AuthenticationError, ConfigurationError

logger = structlog.get_logger(__name__)

ADMIN_KEY_HEADER = "X-Admin-Key"


@dataclass(frozen=True)
class AdminPrincipal:
    """The verified caller of an admin route. Lives for one request only."""

    name: str
    verified: bool


async def require_admin(
    request: Request,
    x_admin_key: Optional[str] = Header(None, alias=ADMIN_KEY_HEADER),
    settings: Settings = Depends(get_settings),
) -> AdminPrincipal:
    """
    Verify the admin key and record the principal on the request.

    Error handlers use `request.state.admin` to decide whether store
    diagnostics may be included in a response.

    Raises:
        AuthenticationError: Header missing or key wrong.
        ConfigurationError: Auth enabled but no key configured.
    """
    if not settings.admin_auth_enabled:
        principal = AdminPrincipal(name="admin", verified=False)
        request.state.admin = principal
        return principal

    expected_key = settings.admin_api_key.get_secret_value() if settings.admin_api_key else None

    if not expected_key:
        logger.error("admin_auth_enabled_but_not_set")
        raise ConfigurationError(
            "Server misconfiguration: admin authentication enabled but no key configured",
            config_key="admin_api_key",
        )

    if not x_admin_key:
        raise AuthenticationError(f"Missing {ADMIN_KEY_HEADER} header")

    if not secrets.compare_digest(x_admin_key.encode(), expected_key.encode()):
        logger.warning("invalid_admin_key_attempt", path=request.url.path)
        raise AuthenticationError("Invalid admin key")

    principal = AdminPrincipal(name="admin", verified=True)
    request.state.admin = principal
    return principal
