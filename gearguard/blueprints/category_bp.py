"""
Equipment category blueprint (read only; categories are seeded reference data).

Endpoints:
    GET /api/v1/categories
    GET /api/v1/categories/<id>
"""

from flask import Blueprint, jsonify

from gearguard.blueprints import list_response
from gearguard.services import equipment_service

category_bp = Blueprint("categories", __name__, url_prefix="/api/v1/categories")


@category_bp.route("", methods=["GET"])
def list_categories():
    return list_response(equipment_service.list_categories())


@category_bp.route("/<int:category_id>", methods=["GET"])
def get_category(category_id):
    return jsonify(equipment_service.get_category(category_id).to_dict())
