"""
GearGuard
Equipment domain models.

Models:
    - EquipmentCategory: reference classification (CNC Machine, Printer, Laptop, ...)
    - Equipment: a physical asset tracked for maintenance
    - EquipmentMaintenanceLog: service record for an asset, optionally tied to a request

Architecture chain: EquipmentCategory → Equipment → MaintenanceRequest (maintenance.py)
"""

from datetime import datetime, timezone

from gearguard.models import db


# ── Constants ────────────────────────────────────────────────────────────────

EQUIPMENT_STATUSES = {"active", "inactive", "scrapped"}

DEFAULT_CATEGORIES = [
    ("CNC Machine", "Computer-controlled machining centres"),
    ("Printer", "Office and label printers"),
    ("Laptop", "Portable workstations"),
    ("Vehicle", "Forklifts, carts and fleet vehicles"),
    ("HVAC", "Heating, ventilation and air conditioning units"),
]


class EquipmentCategory(db.Model):
    __tablename__ = "equipment_categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# ═══════════════════════════════════════════════════════════════════════════
#  EQUIPMENT
# ═══════════════════════════════════════════════════════════════════════════

class Equipment(db.Model):
    """
    A machine or device under maintenance.

    ``status`` flips to ``scrapped`` automatically when any of its
    maintenance requests moves to ``scrap``.
    """

    __tablename__ = "equipment"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    serial_number = db.Column(db.String(255), unique=True, nullable=False)
    category_id = db.Column(
        db.Integer, db.ForeignKey("equipment_categories.id"), nullable=False, index=True,
    )
    maintenance_team_id = db.Column(
        db.Integer,
        db.ForeignKey("maintenance_teams.id", ondelete="SET NULL"),
        nullable=True,
        comment="Default team for new requests against this asset",
    )
    department = db.Column(db.String(255))
    assigned_to = db.Column(db.String(255), comment="Employee name or ID")
    location = db.Column(db.String(255))
    purchase_date = db.Column(db.DateTime(timezone=True))
    warranty_expiry = db.Column(db.DateTime(timezone=True))
    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "serial_number": self.serial_number,
            "category_id": self.category_id,
            "maintenance_team_id": self.maintenance_team_id,
            "department": self.department,
            "assigned_to": self.assigned_to,
            "location": self.location,
            "purchase_date": self.purchase_date.isoformat() if self.purchase_date else None,
            "warranty_expiry": self.warranty_expiry.isoformat() if self.warranty_expiry else None,
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Equipment {self.id}: {self.serial_number} ({self.status})>"


# ═══════════════════════════════════════════════════════════════════════════
#  SERVICE LOG
# ═══════════════════════════════════════════════════════════════════════════

class EquipmentMaintenanceLog(db.Model):
    """Service record for an asset. Written by admins, independent of request status."""

    __tablename__ = "equipment_maintenance_log"

    id = db.Column(db.Integer, primary_key=True)
    equipment_id = db.Column(
        db.Integer, db.ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    request_id = db.Column(
        db.Integer, db.ForeignKey("maintenance_requests.id", ondelete="SET NULL"), nullable=True,
    )
    service_type = db.Column(db.String(100), nullable=False, comment="Oil Change | Inspection | Repair | ...")
    description = db.Column(db.Text)
    technician = db.Column(db.String(255))
    cost = db.Column(db.String(50))
    next_service_date = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "equipment_id": self.equipment_id,
            "request_id": self.request_id,
            "service_type": self.service_type,
            "description": self.description,
            "technician": self.technician,
            "cost": self.cost,
            "next_service_date": self.next_service_date.isoformat() if self.next_service_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
