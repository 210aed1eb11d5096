"""
GearGuard
Authentication gate.

Security model:
    - All /api/v1/* endpoints require an authenticated user (except
      /api/v1/health*); identity comes from the JWT middleware.
    - Roles are ``user`` and ``admin``; admin checks live in the services
      (``gearguard.services.permission``).

Configuration:
    API_AUTH_ENABLED  set to "false" to disable auth (development only).
                      Requests then act as a local admin whose open_id is
                      DEV_ADMIN_OPEN_ID.
"""

import logging

from flask import current_app, g, request

from gearguard.utils.errors import E, api_error

logger = logging.getLogger(__name__)

PUBLIC_PREFIXES = ("/api/v1/health",)


def _is_auth_enabled() -> bool:
    value = str(current_app.config.get("API_AUTH_ENABLED", "true"))
    return value.lower() not in ("false", "0", "no", "off")


def _dev_admin():
    from gearguard.services.user_service import upsert_user
    from gearguard.utils.helpers import commit_or_raise

    user = upsert_user(
        current_app.config.get("DEV_ADMIN_OPEN_ID", "dev-admin"),
        name="Local admin",
        login_method="dev",
        role="admin",
    )
    commit_or_raise("auth.dev_admin")
    return user


def current_actor():
    """The User acting on this request (set by the auth hooks)."""
    return getattr(g, "current_user", None)


def init_auth(app):
    """Register the authentication gate.  Must run after the JWT middleware."""

    @app.before_request
    def _require_authenticated_user():
        path = request.path
        if not path.startswith("/api/v1/") or path.startswith(PUBLIC_PREFIXES):
            return None
        if request.method == "OPTIONS":
            return None
        if getattr(g, "current_user", None) is not None:
            return None

        if not _is_auth_enabled():
            g.current_user = _dev_admin()
            return None

        logger.info("Unauthenticated request rejected: %s %s", request.method, path)
        return api_error(E.UNAUTHORIZED, "Authentication required")
