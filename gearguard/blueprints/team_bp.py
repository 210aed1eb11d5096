"""
GearGuard
Maintenance team blueprint.

Endpoints summary:
    TEAM    /api/v1/teams                      GET, POST
            /api/v1/teams/<id>                 GET, PUT

    MEMBER  /api/v1/teams/<id>/members         GET, POST
            /api/v1/team-members/<member_id>   DELETE
"""

from flask import Blueprint, jsonify

from gearguard.auth import current_actor
from gearguard.blueprints import json_body, list_response
from gearguard.services import team_service
from gearguard.utils.helpers import commit_or_raise

team_bp = Blueprint("teams", __name__, url_prefix="/api/v1")


# ── Teams ────────────────────────────────────────────────────────────────────

@team_bp.route("/teams", methods=["GET"])
def list_teams():
    return list_response(team_service.list_teams())


@team_bp.route("/teams/<int:team_id>", methods=["GET"])
def get_team(team_id):
    return jsonify(team_service.get_team(team_id).to_dict())


@team_bp.route("/teams", methods=["POST"])
def create_team():
    team = team_service.create_team(json_body(), current_actor())
    commit_or_raise("teams.create")
    return jsonify(team.to_dict()), 201


@team_bp.route("/teams/<int:team_id>", methods=["PUT"])
def update_team(team_id):
    team = team_service.update_team(team_id, json_body(), current_actor())
    commit_or_raise("teams.update")
    return jsonify(team.to_dict())


# ── Members ──────────────────────────────────────────────────────────────────

@team_bp.route("/teams/<int:team_id>/members", methods=["GET"])
def list_members(team_id):
    return list_response(team_service.get_members(team_id))


@team_bp.route("/teams/<int:team_id>/members", methods=["POST"])
def add_member(team_id):
    member = team_service.add_member(team_id, json_body(), current_actor())
    commit_or_raise("teams.add_member")
    return jsonify(member.to_dict()), 201


@team_bp.route("/team-members/<int:member_id>", methods=["DELETE"])
def remove_member(member_id):
    team_service.remove_member(member_id, current_actor())
    commit_or_raise("teams.remove_member")
    return jsonify({"deleted": True, "id": member_id})
