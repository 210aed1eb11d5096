"""
Statistics blueprint.

Endpoints:
    GET /api/v1/stats/dashboard?days=N
    GET /api/v1/stats/upcoming-maintenance?days=N
    GET /api/v1/stats/requests-by-priority/<priority>

``days`` defaults to UPCOMING_MAINTENANCE_DAYS (7) and must lie in 0..3650.
"""

from flask import Blueprint, current_app, jsonify

from gearguard.blueprints import int_arg, list_response
from gearguard.core.exceptions import ValidationError
from gearguard.services import stats_service

stats_bp = Blueprint("stats", __name__, url_prefix="/api/v1/stats")


def _days():
    days = int_arg("days")
    if days is None:
        return current_app.config.get("UPCOMING_MAINTENANCE_DAYS", stats_service.DEFAULT_UPCOMING_DAYS)
    if not 0 <= days <= stats_service.MAX_UPCOMING_DAYS:
        raise ValidationError(
            f"days must be between 0 and {stats_service.MAX_UPCOMING_DAYS}",
            details={"days": days},
        )
    return days


@stats_bp.route("/dashboard", methods=["GET"])
def dashboard():
    return jsonify(stats_service.dashboard_snapshot(days=_days()))


@stats_bp.route("/upcoming-maintenance", methods=["GET"])
def upcoming_maintenance():
    return list_response(stats_service.upcoming_maintenance(days=_days()))


@stats_bp.route("/requests-by-priority/<priority>", methods=["GET"])
def requests_by_priority(priority):
    return list_response(stats_service.requests_by_priority(priority))
