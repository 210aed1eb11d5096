"""
GearGuard
Maintenance history domain model.

Models:
    - MaintenanceHistory: immutable, append-only audit trail for request
      lifecycle events.

Writes go through ``write_history`` with an explicit policy:

    DURABLE      the row is part of the caller's transaction; any failure
                 propagates and the whole operation fails.
    BEST_EFFORT  the row is written inside a SAVEPOINT; a failure rolls back
                 only the savepoint, is logged, and ``None`` is returned.
"""

import json
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from gearguard.models import db

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────────────────

HISTORY_ACTIONS = {"created", "status_changed"}

DURABLE = "durable"
BEST_EFFORT = "best_effort"
WRITE_POLICIES = {DURABLE, BEST_EFFORT}


class MaintenanceHistory(db.Model):
    """
    One row per recorded action on a maintenance request.

    ``equipment_id`` is denormalised from the request so an asset's full
    history is a single indexed read.  Never updated or deleted.
    """

    __tablename__ = "maintenance_history"
    __table_args__ = (
        db.Index("idx_history_request", "request_id"),
        db.Index("idx_history_equipment", "equipment_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    request_id = db.Column(db.Integer, db.ForeignKey("maintenance_requests.id"), nullable=False)
    equipment_id = db.Column(db.Integer, db.ForeignKey("equipment.id"), nullable=False)
    action = db.Column(db.String(100), nullable=False, comment="created | status_changed")
    old_value = db.Column(db.Text)
    new_value = db.Column(db.Text, comment="Plain value or JSON snapshot")
    changed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "request_id": self.request_id,
            "equipment_id": self.equipment_id,
            "action": self.action,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "changed_by": self.changed_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<MaintenanceHistory {self.id}: {self.action} on request {self.request_id}>"


# ── Writer ───────────────────────────────────────────────────────────────────

def _serialise(value):
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, default=str, sort_keys=True)


def write_history(
    *,
    request_id: int,
    equipment_id: int,
    action: str,
    old_value=None,
    new_value=None,
    changed_by: int | None = None,
    policy: str = DURABLE,
) -> MaintenanceHistory | None:
    """
    Append a single history row.  Uses ``flush`` so callers keep
    transaction control.

    Non-string values are JSON-serialised.  Returns the flushed row, or
    ``None`` when a BEST_EFFORT write failed.
    """
    if policy not in WRITE_POLICIES:
        raise ValueError(f"Unknown history write policy: {policy}")

    entry = MaintenanceHistory(
        request_id=request_id,
        equipment_id=equipment_id,
        action=action,
        old_value=_serialise(old_value),
        new_value=_serialise(new_value),
        changed_by=changed_by,
    )

    if policy == DURABLE:
        db.session.add(entry)
        db.session.flush()
        return entry

    try:
        with db.session.begin_nested():
            db.session.add(entry)
    except SQLAlchemyError:
        logger.warning(
            "History write skipped: action=%s request=%s",
            action, request_id, exc_info=True,
        )
        return None
    return entry
