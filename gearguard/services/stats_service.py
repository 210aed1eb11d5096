"""
Statistics Service: dashboard counters and upcoming preventive work.

Every figure is derived by loading the relevant tables into memory and
filtering in Python.  Fine for a single site with a few thousand requests;
past that the counters should move to SQL aggregates.

All functions are read-only and take an optional ``now`` so callers (and
tests) can pin the clock.  A store outage degrades to zero counts / empty
lists rather than failing the dashboard.
"""

from datetime import datetime, timedelta, timezone

from gearguard.models.equipment import Equipment
from gearguard.models.maintenance import OPEN_STATUSES, REQUEST_STATUSES, MaintenanceRequest
from gearguard.models.team import MaintenanceTeam
from gearguard.utils.helpers import as_utc, degrade_on_store_error

DEFAULT_UPCOMING_DAYS = 7
# Widest look-ahead window accepted from callers (ten years)
MAX_UPCOMING_DAYS = 3650


def _empty_snapshot():
    return {
        "open_requests": 0,
        "overdue_requests": 0,
        "upcoming_maintenance_count": 0,
        "total_requests": 0,
        "total_equipment": 0,
        "active_equipment": 0,
        "total_teams": 0,
        "requests_by_status": {status: 0 for status in REQUEST_STATUSES},
    }


def _is_upcoming(req, now, until):
    if req.type != "preventive" or req.scheduled_date is None:
        return False
    return now <= as_utc(req.scheduled_date) <= until


# ═════════════════════════════════════════════════════════════════════════
# Dashboard
# ═════════════════════════════════════════════════════════════════════════


@degrade_on_store_error(_empty_snapshot)
def dashboard_snapshot(days=DEFAULT_UPCOMING_DAYS, now=None):
    """
    Counters for the dashboard.

    open_requests               status in {new, in_progress}
    overdue_requests            open requests whose scheduled_date is in the past
    upcoming_maintenance_count  preventive requests scheduled within ``days`` from now
    requests_by_status          histogram over every status value
    """
    now = now or datetime.now(timezone.utc)
    until = now + timedelta(days=days)

    requests = MaintenanceRequest.query.all()
    equipment = Equipment.query.all()
    team_count = len(MaintenanceTeam.query.all())

    snapshot = _empty_snapshot()
    open_requests = [r for r in requests if r.status in OPEN_STATUSES]
    snapshot["open_requests"] = len(open_requests)
    snapshot["overdue_requests"] = len([
        r for r in open_requests
        if r.scheduled_date is not None and as_utc(r.scheduled_date) < now
    ])
    snapshot["upcoming_maintenance_count"] = len([r for r in requests if _is_upcoming(r, now, until)])
    snapshot["total_requests"] = len(requests)
    snapshot["total_equipment"] = len(equipment)
    snapshot["active_equipment"] = len([e for e in equipment if e.status == "active"])
    snapshot["total_teams"] = team_count
    for r in requests:
        snapshot["requests_by_status"][r.status] = snapshot["requests_by_status"].get(r.status, 0) + 1
    return snapshot


# ── Listings ─────────────────────────────────────────────────────────────


@degrade_on_store_error(list)
def upcoming_maintenance(days=DEFAULT_UPCOMING_DAYS, now=None):
    """Preventive requests with now <= scheduled_date <= now + days, soonest first."""
    now = now or datetime.now(timezone.utc)
    until = now + timedelta(days=days)
    upcoming = [r for r in MaintenanceRequest.query.all() if _is_upcoming(r, now, until)]
    return sorted(upcoming, key=lambda r: as_utc(r.scheduled_date))


@degrade_on_store_error(list)
def requests_by_priority(priority):
    return (
        MaintenanceRequest.query
        .filter_by(priority=priority)
        .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())
        .all()
    )
