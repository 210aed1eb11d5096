"""Equipment service layer: assets, categories and the per-asset service log.

Transaction policy: methods use flush() for ID generation, never commit().
Caller (route handler / CLI) is responsible for committing.

Operations:
- Equipment list/get (any user) and create/update (admin)
- Category list/get + default category seeding
- Maintenance log list (any user) and add (admin)
"""
import logging

from gearguard.core.exceptions import ConflictError, NotFoundError, ValidationError
from gearguard.models import db
from gearguard.models.equipment import (
    DEFAULT_CATEGORIES,
    EQUIPMENT_STATUSES,
    Equipment,
    EquipmentCategory,
    EquipmentMaintenanceLog,
)
from gearguard.models.maintenance import MaintenanceRequest
from gearguard.models.team import MaintenanceTeam
from gearguard.services.permission import ensure_admin
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

_OPTIONAL_TEXT_FIELDS = ("department", "assigned_to", "location")


def _get_category_or_raise(category_id):
    category = db.session.get(EquipmentCategory, category_id)
    if not category:
        raise NotFoundError(resource="EquipmentCategory", resource_id=category_id)
    return category


def _check_team_exists(team_id):
    if team_id is not None and not db.session.get(MaintenanceTeam, team_id):
        raise NotFoundError(resource="MaintenanceTeam", resource_id=team_id)


# ── Equipment ────────────────────────────────────────────────────────────


@degrade_on_store_error(list)
def list_equipment(status=None, category_id=None, team_id=None):
    """All equipment ordered by name, with optional exact-match filters."""
    q = Equipment.query
    if status:
        q = q.filter_by(status=status)
    if category_id:
        q = q.filter_by(category_id=category_id)
    if team_id:
        q = q.filter_by(maintenance_team_id=team_id)
    return q.order_by(Equipment.name.asc()).all()


def get_equipment(equipment_id):
    equipment = db.session.get(Equipment, equipment_id)
    if not equipment:
        raise NotFoundError(resource="Equipment", resource_id=equipment_id)
    return equipment


def create_equipment(data, actor):
    """Register a new asset with status ``active``.

    Raises:
        PermissionDenied: actor is not an admin.
        ValidationError: missing/invalid fields.
        NotFoundError: category or default team does not exist.
        ConflictError: serial number already registered.
    """
    ensure_admin(actor, "equipment.create")

    name = require_text(data, "name")
    serial_number = require_text(data, "serial_number")
    category_id = require_int(data, "category_id")
    team_id = optional_int(data, "maintenance_team_id")
    fields = {f: optional_text(data, f, max_len=255) for f in _OPTIONAL_TEXT_FIELDS}
    notes = optional_text(data, "notes")
    purchase_date = parse_datetime(data.get("purchase_date"), "purchase_date")
    warranty_expiry = parse_datetime(data.get("warranty_expiry"), "warranty_expiry")

    _get_category_or_raise(category_id)
    _check_team_exists(team_id)
    if Equipment.query.filter_by(serial_number=serial_number).first():
        raise ConflictError("Equipment", "serial_number", serial_number)

    equipment = Equipment(
        name=name,
        serial_number=serial_number,
        category_id=category_id,
        maintenance_team_id=team_id,
        purchase_date=purchase_date,
        warranty_expiry=warranty_expiry,
        notes=notes,
        status="active",
        **fields,
    )
    db.session.add(equipment)
    db.session.flush()
    logger.info(
        "Equipment created: id=%s serial=%s by user %s", equipment.id, serial_number, actor.id,
        extra={"equipment_id": equipment.id},
    )
    return equipment


def update_equipment(equipment_id, data, actor):
    """Partially update an asset, including its status.

    Only keys present in *data* are touched.  Returns the updated Equipment.
    """
    ensure_admin(actor, "equipment.update")

    changes = {}
    if "name" in data:
        changes["name"] = require_text(data, "name")
    if "category_id" in data:
        changes["category_id"] = require_int(data, "category_id")
    if "maintenance_team_id" in data:
        changes["maintenance_team_id"] = optional_int(data, "maintenance_team_id")
    for field in _OPTIONAL_TEXT_FIELDS:
        if field in data:
            changes[field] = optional_text(data, field, max_len=255)
    if "notes" in data:
        changes["notes"] = optional_text(data, "notes")
    if "status" in data:
        changes["status"] = check_choice(data["status"], "status", EQUIPMENT_STATUSES)
    for field in ("purchase_date", "warranty_expiry"):
        if field in data:
            changes[field] = parse_datetime(data[field], field)

    equipment = get_equipment(equipment_id)
    if "category_id" in changes:
        _get_category_or_raise(changes["category_id"])
    _check_team_exists(changes.get("maintenance_team_id"))

    for field, value in changes.items():
        setattr(equipment, field, value)
    db.session.flush()
    return equipment


# ── Categories ───────────────────────────────────────────────────────────


@degrade_on_store_error(list)
def list_categories():
    return EquipmentCategory.query.order_by(EquipmentCategory.name.asc()).all()


def get_category(category_id):
    return _get_category_or_raise(category_id)


def seed_default_categories():
    """Insert any missing default categories.  Returns the number added."""
    existing = {c.name for c in EquipmentCategory.query.all()}
    added = 0
    for name, description in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        db.session.add(EquipmentCategory(name=name, description=description))
        added += 1
    db.session.flush()
    return added


# ── Maintenance log ──────────────────────────────────────────────────────


@degrade_on_store_error(list)
def list_maintenance_log(equipment_id):
    """Service records for one asset, newest first."""
    return (
        EquipmentMaintenanceLog.query
        .filter_by(equipment_id=equipment_id)
        .order_by(EquipmentMaintenanceLog.created_at.desc(), EquipmentMaintenanceLog.id.desc())
        .all()
    )


def add_maintenance_log(equipment_id, data, actor):
    """Append a service record to an asset (admin only)."""
    ensure_admin(actor, "maintenance_log.add")

    service_type = require_text(data, "service_type", max_len=100)
    request_id = optional_int(data, "request_id")
    description = optional_text(data, "description")
    technician = optional_text(data, "technician", max_len=255)
    next_service_date = parse_datetime(data.get("next_service_date"), "next_service_date")
    cost = data.get("cost")
    if cost is not None:
        if isinstance(cost, bool) or not isinstance(cost, (str, int, float)):
            raise ValidationError("cost must be a string or number", details={"cost": "invalid"})
        cost = str(cost)

    get_equipment(equipment_id)
    if request_id is not None and not db.session.get(MaintenanceRequest, request_id):
        raise NotFoundError(resource="MaintenanceRequest", resource_id=request_id)

    entry = EquipmentMaintenanceLog(
        equipment_id=equipment_id,
        request_id=request_id,
        service_type=service_type,
        description=description,
        technician=technician,
        cost=cost,
        next_service_date=next_service_date,
    )
    db.session.add(entry)
    db.session.flush()
    return entry
