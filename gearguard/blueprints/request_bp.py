"""
GearGuard
Maintenance request blueprint.

Endpoints summary:
    REQUEST  /api/v1/requests                        GET (filters), POST
             /api/v1/requests/<id>                   GET, PUT
             /api/v1/requests/status/<status>        GET
             /api/v1/equipment/<id>/requests         GET
             /api/v1/teams/<id>/requests             GET

GET /requests filters: status, priority, type, equipment_id, team_id,
scheduled_from, scheduled_to (ISO dates, inclusive; calendar view).

Any authenticated user may create and update requests.
"""

import logging

from flask import Blueprint, jsonify, request

from gearguard.auth import current_actor
from gearguard.blueprints import int_arg, json_body, list_response
from gearguard.services import request_lifecycle
from gearguard.services.request_lifecycle import TransitionError
from gearguard.utils.errors import E, api_error
from gearguard.utils.helpers import commit_or_raise, parse_datetime

logger = logging.getLogger(__name__)

request_bp = Blueprint("requests", __name__, url_prefix="/api/v1")


@request_bp.errorhandler(TransitionError)
def _handle_transition(error: TransitionError):
    logger.info("Rejected transition: %s", error)
    return api_error(
        E.CONFLICT_STATE,
        str(error),
        details={"current_status": error.current_status, "target_status": error.target_status},
    )


# ═══════════════════════════════════════════════════════════════════════════
#  LIST / GET
# ═══════════════════════════════════════════════════════════════════════════

@request_bp.route("/requests", methods=["GET"])
def list_requests():
    items = request_lifecycle.list_requests(
        status=request.args.get("status"),
        priority=request.args.get("priority"),
        type=request.args.get("type"),
        equipment_id=int_arg("equipment_id"),
        team_id=int_arg("team_id"),
        scheduled_from=parse_datetime(request.args.get("scheduled_from"), "scheduled_from"),
        scheduled_to=parse_datetime(request.args.get("scheduled_to"), "scheduled_to"),
    )
    return list_response(items)


@request_bp.route("/requests/<int:request_id>", methods=["GET"])
def get_request(request_id):
    return jsonify(request_lifecycle.get_request(request_id).to_dict())


@request_bp.route("/requests/status/<status>", methods=["GET"])
def requests_by_status(status):
    return list_response(request_lifecycle.requests_by_status(status))


@request_bp.route("/equipment/<int:equipment_id>/requests", methods=["GET"])
def requests_by_equipment(equipment_id):
    return list_response(request_lifecycle.requests_by_equipment(equipment_id))


@request_bp.route("/teams/<int:team_id>/requests", methods=["GET"])
def requests_by_team(team_id):
    return list_response(request_lifecycle.requests_by_team(team_id))


# ═══════════════════════════════════════════════════════════════════════════
#  CREATE / UPDATE
# ═══════════════════════════════════════════════════════════════════════════

@request_bp.route("/requests", methods=["POST"])
def create_request():
    req = request_lifecycle.create_request(json_body(), current_actor())
    commit_or_raise("requests.create")
    return jsonify(req.to_dict()), 201


@request_bp.route("/requests/<int:request_id>", methods=["PUT"])
def update_request(request_id):
    req = request_lifecycle.update_request(request_id, json_body(), current_actor())
    commit_or_raise("requests.update")
    return jsonify(req.to_dict())
