"""
Maintenance Request Lifecycle Service

Mediates every change to a MaintenanceRequest and keeps MaintenanceHistory
and Equipment consistent with it:

  - create: status=new, unique request number, "created" history row
    written BEST_EFFORT (a failed history write never fails the create)
  - update: direct field updates; on a real status change, a DURABLE
    "status_changed" history row and, for ``scrap``, the equipment cascade
  - transition validation against a configurable table
    (``REQUEST_STATUS_TRANSITIONS``; None = any status to any other)

The request row is read FOR UPDATE before a status change so that, on
databases with row locks, two concurrent updates serialise and the history
``old_value`` is the status actually replaced.  There is no version column:
the later commit still wins.

Usage:
    from gearguard.services.request_lifecycle import create_request, update_request

    req = create_request({"type": "corrective", ...}, actor=user)
    req = update_request(req.id, {"status": "scrap"}, actor=user)
"""

import logging

from flask import current_app, has_app_context

from gearguard.core.exceptions import NotFoundError, ValidationError
from gearguard.models import db
from gearguard.models.auth import User
from gearguard.models.equipment import Equipment
from gearguard.models.history import BEST_EFFORT, DURABLE, write_history
from gearguard.models.maintenance import (
    REQUEST_PRIORITIES,
    REQUEST_STATUSES,
    REQUEST_TYPES,
    MaintenanceRequest,
    next_request_number,
    validate_status_transition,
)
from gearguard.models.team import MaintenanceTeam
from gearguard.utils.helpers import (
    check_choice,
    degrade_on_store_error,
    optional_int,
    optional_text,
    parse_datetime,
    require_int,
    require_text,
)

logger = logging.getLogger(__name__)


class TransitionError(Exception):
    """Raised when a status change is not allowed by the transition table."""

    def __init__(self, request_number: str, current: str, target: str):
        super().__init__(
            f"Cannot move request {request_number} from '{current}' to '{target}'"
        )
        self.request_number = request_number
        self.current_status = current
        self.target_status = target


def _configured_transitions():
    if has_app_context():
        return current_app.config.get("REQUEST_STATUS_TRANSITIONS")
    return None


# ═════════════════════════════════════════════════════════════════════════
# Reads
# ═════════════════════════════════════════════════════════════════════════


def _newest_first(q):
    return q.order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())


@degrade_on_store_error(list)
def list_requests(
    *,
    status=None,
    priority=None,
    type=None,
    equipment_id=None,
    team_id=None,
    scheduled_from=None,
    scheduled_to=None,
):
    """All requests, newest first, with optional filters.

    ``scheduled_from`` / ``scheduled_to`` (inclusive) back the calendar view.
    """
    q = MaintenanceRequest.query
    if status:
        q = q.filter_by(status=status)
    if priority:
        q = q.filter_by(priority=priority)
    if type:
        q = q.filter_by(type=type)
    if equipment_id:
        q = q.filter_by(equipment_id=equipment_id)
    if team_id:
        q = q.filter_by(maintenance_team_id=team_id)
    if scheduled_from:
        q = q.filter(MaintenanceRequest.scheduled_date >= scheduled_from)
    if scheduled_to:
        q = q.filter(MaintenanceRequest.scheduled_date <= scheduled_to)
    return _newest_first(q).all()


def get_request(request_id):
    req = db.session.get(MaintenanceRequest, request_id)
    if not req:
        raise NotFoundError(resource="MaintenanceRequest", resource_id=request_id)
    return req


def requests_by_status(status):
    return list_requests(status=status)


def requests_by_equipment(equipment_id):
    return list_requests(equipment_id=equipment_id)


def requests_by_team(team_id):
    return list_requests(team_id=team_id)


# ═════════════════════════════════════════════════════════════════════════
# Create
# ═════════════════════════════════════════════════════════════════════════


def create_request(data, actor):
    """
    Open a new work order.

    Args:
        data: type, subject, equipment_id, maintenance_team_id (required);
              description, priority (default medium), scheduled_date.
        actor: the authenticated User creating the request.

    Returns:
        The flushed MaintenanceRequest (status ``new``).

    Raises:
        ValidationError: malformed input (nothing is written).
        NotFoundError: equipment or team does not exist.
    """
    req_type = check_choice(data.get("type"), "type", REQUEST_TYPES)
    subject = require_text(data, "subject")
    description = optional_text(data, "description")
    equipment_id = require_int(data, "equipment_id")
    team_id = require_int(data, "maintenance_team_id")
    priority = check_choice(data.get("priority") or "medium", "priority", REQUEST_PRIORITIES)
    scheduled_date = parse_datetime(data.get("scheduled_date"), "scheduled_date")

    if not db.session.get(Equipment, equipment_id):
        raise NotFoundError(resource="Equipment", resource_id=equipment_id)
    if not db.session.get(MaintenanceTeam, team_id):
        raise NotFoundError(resource="MaintenanceTeam", resource_id=team_id)

    req = MaintenanceRequest(
        request_number=next_request_number(),
        type=req_type,
        subject=subject,
        description=description,
        equipment_id=equipment_id,
        maintenance_team_id=team_id,
        priority=priority,
        status="new",
        scheduled_date=scheduled_date,
    )
    db.session.add(req)
    db.session.flush()

    write_history(
        request_id=req.id,
        equipment_id=equipment_id,
        action="created",
        new_value={
            "type": req_type,
            "subject": subject,
            "description": description,
            "equipment_id": equipment_id,
            "maintenance_team_id": team_id,
            "priority": priority,
            "scheduled_date": scheduled_date.isoformat() if scheduled_date else None,
        },
        changed_by=getattr(actor, "id", None),
        policy=BEST_EFFORT,
    )

    logger.info(
        "Maintenance request created: %s (%s) equipment=%s by user %s",
        req.request_number, req_type, equipment_id, getattr(actor, "id", None),
        extra={
            "request_number": req.request_number,
            "equipment_id": equipment_id,
            "to_status": "new",
        },
    )
    return req


# ═════════════════════════════════════════════════════════════════════════
# Update
# ═════════════════════════════════════════════════════════════════════════


def _validate_update(data):
    """Return the validated subset of *data* that will be applied."""
    changes = {}
    if data.get("status") is not None:
        changes["status"] = check_choice(data["status"], "status", set(REQUEST_STATUSES))
    if data.get("priority") is not None:
        changes["priority"] = check_choice(data["priority"], "priority", REQUEST_PRIORITIES)
    if "assigned_to_user_id" in data:
        changes["assigned_to_user_id"] = optional_int(data, "assigned_to_user_id")
    for field in ("started_at", "completed_at"):
        if field in data:
            changes[field] = parse_datetime(data[field], field)
    if "duration_minutes" in data:
        duration = optional_int(data, "duration_minutes")
        if duration is not None and duration < 0:
            raise ValidationError(
                "duration_minutes must be >= 0", details={"duration_minutes": duration},
            )
        changes["duration_minutes"] = duration
    if "notes" in data:
        changes["notes"] = optional_text(data, "notes")
    return changes


def _scrap_equipment(equipment_id, request_number):
    equipment = db.session.get(Equipment, equipment_id)
    if equipment is None:
        raise NotFoundError(resource="Equipment", resource_id=equipment_id)
    if equipment.status != "scrapped":
        equipment.status = "scrapped"
        logger.info(
            "Equipment %s scrapped by request cascade", equipment_id,
            extra={"request_number": request_number, "equipment_id": equipment_id},
        )


def update_request(request_id, data, actor, *, transitions=None):
    """
    Apply a partial update to a request.

    When ``status`` is present and differs from the stored value:
      1. the transition is checked against *transitions* (or the configured
         table; None means free transitions)
      2. the change is persisted
      3. a "status_changed" history row is appended (DURABLE)
      4. moving to ``scrap`` sets the equipment status to ``scrapped``

    An omitted or unchanged status updates fields only.

    Raises:
        ValidationError, NotFoundError, TransitionError
    """
    changes = _validate_update(data)

    req = (
        MaintenanceRequest.query
        .filter_by(id=request_id)
        .with_for_update()
        .first()
    )
    if not req:
        raise NotFoundError(resource="MaintenanceRequest", resource_id=request_id)

    assignee = changes.get("assigned_to_user_id")
    if assignee is not None and not db.session.get(User, assignee):
        raise NotFoundError(resource="User", resource_id=assignee)

    previous_status = req.status
    new_status = changes.get("status", previous_status)
    status_changed = new_status != previous_status

    if status_changed:
        table = transitions if transitions is not None else _configured_transitions()
        if not validate_status_transition(previous_status, new_status, table):
            raise TransitionError(req.request_number, previous_status, new_status)

    for field, value in changes.items():
        setattr(req, field, value)
    db.session.flush()

    if status_changed:
        write_history(
            request_id=req.id,
            equipment_id=req.equipment_id,
            action="status_changed",
            old_value=previous_status,
            new_value=new_status,
            changed_by=getattr(actor, "id", None),
            policy=DURABLE,
        )
        if new_status == "scrap":
            _scrap_equipment(req.equipment_id, req.request_number)
        db.session.flush()
        logger.info(
            "Request %s status %s -> %s by user %s",
            req.request_number, previous_status, new_status, getattr(actor, "id", None),
            extra={
                "request_number": req.request_number,
                "equipment_id": req.equipment_id,
                "from_status": previous_status,
                "to_status": new_status,
            },
        )

    return req
