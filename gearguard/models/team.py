"""
GearGuard
Maintenance team domain models.

Models:
    - MaintenanceTeam: a group of technicians organised by specialty
      (Mechanics, Electricians, IT Support, ...)
    - TeamMember: join row linking a user to a team with an optional role label
"""

from datetime import datetime, timezone

from gearguard.models import db


class MaintenanceTeam(db.Model):
    __tablename__ = "maintenance_teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
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
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<MaintenanceTeam {self.id}: {self.name}>"


class TeamMember(db.Model):
    __tablename__ = "team_members"
    __table_args__ = (
        db.Index("idx_team_members_team", "team_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    team_id = db.Column(
        db.Integer, db.ForeignKey("maintenance_teams.id", ondelete="CASCADE"), nullable=False,
    )
    role = db.Column(db.String(100), comment="Lead | Technician | Apprentice | ...")
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "team_id": self.team_id,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
