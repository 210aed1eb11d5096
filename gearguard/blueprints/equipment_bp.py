"""
GearGuard
Equipment blueprint: assets and their per-asset service log.

Endpoints summary:
    EQUIPMENT  /api/v1/equipment                       GET, POST
               /api/v1/equipment/<id>                  GET, PUT

    LOG        /api/v1/equipment/<id>/maintenance-log  GET, POST

Requests and history by equipment live in request_bp / history_bp.
Writes are admin only (enforced in the service).
"""

from flask import Blueprint, jsonify, request

from gearguard.auth import current_actor
from gearguard.blueprints import int_arg, json_body, list_response
from gearguard.services import equipment_service
from gearguard.utils.helpers import commit_or_raise

equipment_bp = Blueprint("equipment", __name__, url_prefix="/api/v1")


# ═══════════════════════════════════════════════════════════════════════════
#  EQUIPMENT CRUD
# ═══════════════════════════════════════════════════════════════════════════

@equipment_bp.route("/equipment", methods=["GET"])
def list_equipment():
    items = equipment_service.list_equipment(
        status=request.args.get("status"),
        category_id=int_arg("category_id"),
        team_id=int_arg("team_id"),
    )
    return list_response(items)


@equipment_bp.route("/equipment/<int:equipment_id>", methods=["GET"])
def get_equipment(equipment_id):
    return jsonify(equipment_service.get_equipment(equipment_id).to_dict())


@equipment_bp.route("/equipment", methods=["POST"])
def create_equipment():
    equipment = equipment_service.create_equipment(json_body(), current_actor())
    commit_or_raise("equipment.create")
    return jsonify(equipment.to_dict()), 201


@equipment_bp.route("/equipment/<int:equipment_id>", methods=["PUT"])
def update_equipment(equipment_id):
    equipment = equipment_service.update_equipment(equipment_id, json_body(), current_actor())
    commit_or_raise("equipment.update")
    return jsonify(equipment.to_dict())


# ═══════════════════════════════════════════════════════════════════════════
#  MAINTENANCE LOG
# ═══════════════════════════════════════════════════════════════════════════

@equipment_bp.route("/equipment/<int:equipment_id>/maintenance-log", methods=["GET"])
def list_maintenance_log(equipment_id):
    return list_response(equipment_service.list_maintenance_log(equipment_id))


@equipment_bp.route("/equipment/<int:equipment_id>/maintenance-log", methods=["POST"])
def add_maintenance_log(equipment_id):
    entry = equipment_service.add_maintenance_log(equipment_id, json_body(), current_actor())
    commit_or_raise("maintenance_log.add")
    return jsonify(entry.to_dict()), 201
