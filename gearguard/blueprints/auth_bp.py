"""
Auth blueprint.

Endpoints:
    GET /api/v1/auth/me   the acting user
"""

from flask import Blueprint, jsonify

from gearguard.auth import current_actor

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@auth_bp.route("/me", methods=["GET"])
def me():
    return jsonify(current_actor().to_dict())
