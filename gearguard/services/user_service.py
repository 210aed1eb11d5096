"""User service layer: profile upsert from the sign-in collaborator.

Transaction policy: flush(), never commit().
"""
import logging
from datetime import datetime, timezone

from flask import current_app, has_app_context

from gearguard.core.exceptions import ValidationError
from gearguard.models import db
from gearguard.models.auth import USER_ROLES, User
from gearguard.utils.helpers import check_choice

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("name", "email", "login_method")


def _owner_open_id():
    if has_app_context():
        return current_app.config.get("OWNER_OPEN_ID") or None
    return None


def get_user_by_open_id(open_id):
    return User.query.filter_by(open_id=open_id).first()


def upsert_user(open_id, *, name=None, email=None, login_method=None, role=None,
                last_signed_in=None):
    """
    Insert or update a user keyed by ``open_id``.

    Profile fields are only overwritten when provided.  The configured
    OWNER_OPEN_ID always ends up admin.  ``last_signed_in`` is refreshed on
    every call.
    """
    if not open_id:
        raise ValidationError("open_id is required for upsert", details={"open_id": "required"})
    if role is not None:
        check_choice(role, "role", USER_ROLES)

    user = get_user_by_open_id(open_id)
    created = user is None
    if created:
        user = User(open_id=open_id, role="user")
        db.session.add(user)

    values = {"name": name, "email": email, "login_method": login_method}
    for field in _PROFILE_FIELDS:
        if values[field] is not None:
            setattr(user, field, values[field])

    if role is not None:
        user.role = role
    if open_id == _owner_open_id():
        user.role = "admin"
    user.last_signed_in = last_signed_in or datetime.now(timezone.utc)

    db.session.flush()
    if created:
        logger.info("User created: id=%s open_id=%s role=%s", user.id, open_id, user.role)
    return user
