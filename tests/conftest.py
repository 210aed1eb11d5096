"""
Shared pytest fixtures for the GearGuard test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - admin / member: persisted users with roles admin / user
    - admin_headers / member_headers: Authorization headers with real JWTs
    - category / team / equipment: reference rows for request tests
"""

import pytest

from gearguard import create_app
from gearguard.models import db as _db
from gearguard.models.auth import User
from gearguard.models.equipment import Equipment, EquipmentCategory
from gearguard.models.team import MaintenanceTeam
from gearguard.services.jwt_service import generate_access_token


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Factories ────────────────────────────────────────────────────────────


def make_user(open_id, role="user", **kw):
    user = User(open_id=open_id, role=role, name=kw.pop("name", open_id), **kw)
    _db.session.add(user)
    _db.session.commit()
    return user


def make_category(name="CNC Machine"):
    category = EquipmentCategory(name=name, description=f"{name} category")
    _db.session.add(category)
    _db.session.commit()
    return category


def make_team(name="Mechanics"):
    team = MaintenanceTeam(name=name, description=f"{name} team")
    _db.session.add(team)
    _db.session.commit()
    return team


def make_equipment(category, team=None, name="CNC-1", serial_number="SN-1", status="active"):
    equipment = Equipment(
        name=name,
        serial_number=serial_number,
        category_id=category.id,
        maintenance_team_id=team.id if team else None,
        status=status,
    )
    _db.session.add(equipment)
    _db.session.commit()
    return equipment


def auth_headers(user):
    return {"Authorization": f"Bearer {generate_access_token(user)}"}


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def admin():
    return make_user("admin-1", role="admin")


@pytest.fixture()
def member():
    return make_user("tech-1", role="user")


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def member_headers(member):
    return auth_headers(member)


@pytest.fixture()
def category():
    return make_category()


@pytest.fixture()
def team():
    return make_team()


@pytest.fixture()
def equipment(category, team):
    return make_equipment(category, team)


@pytest.fixture()
def request_payload(equipment, team):
    """Valid create-request body against the default equipment and team."""
    return {
        "type": "corrective",
        "subject": "Spindle vibration",
        "description": "Loud noise at high RPM",
        "equipment_id": equipment.id,
        "maintenance_team_id": team.id,
    }
