"""
JWT Auth Middleware: parses the bearer token and sets g.current_user.

Only resolves identity.  Rejecting unauthenticated requests is the job of
``gearguard.auth.init_auth``, which runs after this hook.
"""

import logging

import jwt as pyjwt
from flask import g, request

from gearguard.models import db
from gearguard.models.auth import User
from gearguard.services.jwt_service import decode_access_token, user_id_from_payload

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/health",
    "/static/",
)


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user = None

        path = request.path
        if not path.startswith("/api/v1/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:]

        try:
            payload = decode_access_token(token)
            user_id = user_id_from_payload(payload)
        except pyjwt.ExpiredSignatureError:
            logger.info("Expired token on %s", path)
            return
        except pyjwt.InvalidTokenError as exc:
            logger.info("Invalid token on %s: %s", path, exc)
            return

        g.current_user = db.session.get(User, user_id)
