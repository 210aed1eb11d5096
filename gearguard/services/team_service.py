"""Maintenance team service layer: teams and their members.

Transaction policy: methods use flush(), never commit().
Reads are open to any authenticated user; every write requires admin.
"""
import logging

from gearguard.core.exceptions import NotFoundError
from gearguard.models import db
from gearguard.models.auth import User
from gearguard.models.team import MaintenanceTeam, TeamMember
from gearguard.services.permission import ensure_admin
from gearguard.utils.helpers import (
    degrade_on_store_error,
    optional_text,
    require_int,
    require_text,
)

logger = logging.getLogger(__name__)


# ── Teams ────────────────────────────────────────────────────────────────


@degrade_on_store_error(list)
def list_teams():
    return MaintenanceTeam.query.order_by(MaintenanceTeam.name.asc()).all()


def get_team(team_id):
    team = db.session.get(MaintenanceTeam, team_id)
    if not team:
        raise NotFoundError(resource="MaintenanceTeam", resource_id=team_id)
    return team


def create_team(data, actor):
    ensure_admin(actor, "teams.create")
    team = MaintenanceTeam(
        name=require_text(data, "name"),
        description=optional_text(data, "description"),
    )
    db.session.add(team)
    db.session.flush()
    logger.info("Team created: id=%s name=%s", team.id, team.name)
    return team


def update_team(team_id, data, actor):
    ensure_admin(actor, "teams.update")
    changes = {}
    if "name" in data:
        changes["name"] = require_text(data, "name")
    if "description" in data:
        changes["description"] = optional_text(data, "description")

    team = get_team(team_id)
    for field, value in changes.items():
        setattr(team, field, value)
    db.session.flush()
    return team


# ── Members ──────────────────────────────────────────────────────────────


@degrade_on_store_error(list)
def get_members(team_id):
    return TeamMember.query.filter_by(team_id=team_id).order_by(TeamMember.id).all()


def add_member(team_id, data, actor):
    """Link a user to a team with an optional role label (Lead, Technician, ...)."""
    ensure_admin(actor, "teams.add_member")
    user_id = require_int(data, "user_id")
    role = optional_text(data, "role", max_len=100)

    get_team(team_id)
    if not db.session.get(User, user_id):
        raise NotFoundError(resource="User", resource_id=user_id)

    member = TeamMember(team_id=team_id, user_id=user_id, role=role)
    db.session.add(member)
    db.session.flush()
    return member


def remove_member(member_id, actor):
    ensure_admin(actor, "teams.remove_member")
    member = db.session.get(TeamMember, member_id)
    if not member:
        raise NotFoundError(resource="TeamMember", resource_id=member_id)
    db.session.delete(member)
    db.session.flush()
