"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in gearguard/__init__.py with no default
limits and bound after the JWT middleware, so g.current_user is already set
when rate_limit_key runs. Storage comes from RATELIMIT_STORAGE_URI. This
module applies granular limits per route category.

Usage:
    from gearguard.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

from flask import g, request as flask_request

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

# Blueprints carrying create/update routes
WRITE_BLUEPRINTS = ("equipment", "teams", "requests")
# Read-only blueprints
READ_BLUEPRINTS = ("categories", "history", "stats", "auth")


def rate_limit_key():
    """Limit per authenticated user, else per remote IP."""
    user = getattr(g, "current_user", None)
    if user is not None:
        return f"user:{user.id}"
    return flask_request.remote_addr or "unknown"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits:
        - Write blueprints: 60/minute
        - Read blueprints:  200/minute
        - Health check:     exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name in WRITE_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    for bp_name in READ_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    logger.info("Rate limiter configured: write %s, read %s", WRITE_LIMIT, READ_LIMIT)
