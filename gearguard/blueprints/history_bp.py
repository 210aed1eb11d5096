"""
Maintenance history blueprint (read only, newest first).

Endpoints:
    GET /api/v1/requests/<id>/history
    GET /api/v1/equipment/<id>/history
"""

from flask import Blueprint

from gearguard.blueprints import list_response
from gearguard.services import history_service

history_bp = Blueprint("history", __name__, url_prefix="/api/v1")


@history_bp.route("/requests/<int:request_id>/history", methods=["GET"])
def history_by_request(request_id):
    return list_response(history_service.get_history_by_request(request_id))


@history_bp.route("/equipment/<int:equipment_id>/history", methods=["GET"])
def history_by_equipment(equipment_id):
    return list_response(history_service.get_history_by_equipment(equipment_id))
