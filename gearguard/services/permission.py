"""
Role gate for admin-only mutations.

Two roles exist: ``user`` and ``admin``.  Equipment, team, team-member and
maintenance-log writes require ``admin``; maintenance requests are open to
any authenticated user.

Usage:
    from gearguard.services.permission import ensure_admin

    ensure_admin(actor, "equipment.create")   # raises PermissionDenied
"""

import logging

from gearguard.core.exceptions import PermissionDenied

logger = logging.getLogger(__name__)


def is_admin(actor) -> bool:
    return actor is not None and getattr(actor, "role", None) == "admin"


def ensure_admin(actor, operation: str) -> None:
    """Raise PermissionDenied unless *actor* holds the admin role."""
    if is_admin(actor):
        return
    user_id = getattr(actor, "id", None)
    logger.warning("User %s denied: '%s' requires admin", user_id, operation)
    raise PermissionDenied(user_id, "admin", operation)
