"""
GearGuard
Maintenance request domain model.

Models:
    - MaintenanceRequest: a work order against one piece of equipment,
      handled by one maintenance team.

Status workflow: new → in_progress → repaired | scrap.  The workflow is not
enforced by default; ``FREE_STATUS_TRANSITIONS`` lets any status move to any
other, and ``WORKFLOW_STATUS_TRANSITIONS`` is available as a stricter table
(see ``REQUEST_STATUS_TRANSITIONS`` in config).
"""

from datetime import datetime, timezone

from gearguard.models import db


# ── Constants ────────────────────────────────────────────────────────────────

REQUEST_TYPES = {"corrective", "preventive"}
REQUEST_PRIORITIES = {"low", "medium", "high", "critical"}
REQUEST_STATUSES = ("new", "in_progress", "repaired", "scrap")
OPEN_STATUSES = {"new", "in_progress"}

FREE_STATUS_TRANSITIONS = {
    status: [other for other in REQUEST_STATUSES if other != status]
    for status in REQUEST_STATUSES
}

WORKFLOW_STATUS_TRANSITIONS = {
    "new":         ["in_progress", "scrap"],
    "in_progress": ["repaired", "scrap", "new"],
    "repaired":    ["in_progress"],
    "scrap":       [],
}


def validate_status_transition(old_status, new_status, transitions=None):
    """Return True if a request may move from *old_status* to *new_status*.

    ``transitions`` maps each status to the statuses reachable from it.
    ``None`` selects ``FREE_STATUS_TRANSITIONS``.
    """
    table = FREE_STATUS_TRANSITIONS if transitions is None else transitions
    return new_status in table.get(old_status, [])


class MaintenanceRequest(db.Model):
    """
    Work order for a repair (corrective) or routine check (preventive).

    ``request_number`` is human readable and globally unique: MR-2026-001.
    """

    __tablename__ = "maintenance_requests"
    __table_args__ = (
        db.Index("idx_mr_equipment", "equipment_id"),
        db.Index("idx_mr_team", "maintenance_team_id"),
        db.Index("idx_mr_status", "status"),
        db.Index("idx_mr_scheduled", "scheduled_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    request_number = db.Column(db.String(50), unique=True, nullable=False)
    type = db.Column(db.String(20), nullable=False, comment="corrective | preventive")
    subject = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    equipment_id = db.Column(db.Integer, db.ForeignKey("equipment.id"), nullable=False)
    maintenance_team_id = db.Column(db.Integer, db.ForeignKey("maintenance_teams.id"), nullable=False)
    assigned_to_user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    priority = db.Column(db.String(20), nullable=False, default="medium")
    status = db.Column(db.String(20), nullable=False, default="new")
    scheduled_date = db.Column(db.DateTime(timezone=True), comment="When maintenance should happen")
    started_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))
    duration_minutes = db.Column(db.Integer)
    notes = db.Column(db.Text, comment="Technician notes and findings")
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def to_dict(self):
        return {
            "id": self.id,
            "request_number": self.request_number,
            "type": self.type,
            "subject": self.subject,
            "description": self.description,
            "equipment_id": self.equipment_id,
            "maintenance_team_id": self.maintenance_team_id,
            "assigned_to_user_id": self.assigned_to_user_id,
            "priority": self.priority,
            "status": self.status,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_minutes": self.duration_minutes,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<MaintenanceRequest {self.id}: {self.request_number} ({self.status})>"


# ── Request number generation ────────────────────────────────────────────────

def next_request_number(year: int | None = None) -> str:
    """
    Generate the next sequential request number for a year.
    E.g. MR-2026-001, MR-2026-002, ...

    Uses SELECT ... FOR UPDATE where supported.  The unique constraint on
    ``request_number`` is the final guard against concurrent creates.
    """
    year = year or datetime.now(timezone.utc).year
    prefix = f"MR-{year}-"
    last = (
        MaintenanceRequest.query
        .filter(MaintenanceRequest.request_number.like(f"{prefix}%"))
        .order_by(MaintenanceRequest.id.desc())
        .with_for_update()
        .first()
    )
    num = 1
    if last:
        try:
            num = int(last.request_number.rsplit("-", 1)[1]) + 1
        except (IndexError, ValueError):
            num = 1
    return f"{prefix}{num:03d}"
