"""
GearGuard
Auth domain model.

Models:
    - User: an authenticated person, keyed by the external OAuth identifier.

Sign-in itself happens outside this service; the OAuth collaborator calls
``upsert_user`` and this table only mirrors the profile and role.
"""

from datetime import datetime, timezone

from gearguard.models import db

# ── Constants ────────────────────────────────────────────────────────────────

USER_ROLES = {"user", "admin"}


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    open_id = db.Column(
        db.String(64), unique=True, nullable=False,
        comment="OAuth identifier returned by the identity provider",
    )
    name = db.Column(db.Text)
    email = db.Column(db.String(320))
    login_method = db.Column(db.String(64))
    role = db.Column(db.String(10), nullable=False, default="user")
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_signed_in = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self):
        return {
            "id": self.id,
            "open_id": self.open_id,
            "name": self.name,
            "email": self.email,
            "login_method": self.login_method,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "last_signed_in": self.last_signed_in.isoformat() if self.last_signed_in else None,
        }

    def __repr__(self):
        return f"<User {self.id}: {self.open_id} ({self.role})>"
