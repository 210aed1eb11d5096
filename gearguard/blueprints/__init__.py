"""
GearGuard
Blueprint registry and shared response helpers.
"""

import logging

from flask import jsonify, request
from sqlalchemy.exc import IntegrityError, OperationalError

from gearguard.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDenied,
    StoreUnavailableError,
    ValidationError,
)
from gearguard.models import db
from gearguard.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def list_response(items):
    """Serialise a list of models as ``{"items": [...], "total": n}``."""
    return jsonify({"items": [i.to_dict() for i in items], "total": len(items)})


def json_body():
    """Request JSON object, or {} when the body is empty.

    A body that does not parse as JSON, or parses to a non-object, is a
    ValidationError.
    """
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def int_arg(name):
    """Optional integer query parameter; ValidationError on junk."""
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer", details={name: raw}) from exc


def register_blueprints(app):
    from gearguard.blueprints.auth_bp import auth_bp
    from gearguard.blueprints.category_bp import category_bp
    from gearguard.blueprints.equipment_bp import equipment_bp
    from gearguard.blueprints.health_bp import health_bp
    from gearguard.blueprints.history_bp import history_bp
    from gearguard.blueprints.request_bp import request_bp
    from gearguard.blueprints.stats_bp import stats_bp
    from gearguard.blueprints.team_bp import team_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(equipment_bp)
    app.register_blueprint(category_bp)
    app.register_blueprint(team_bp)
    app.register_blueprint(request_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(stats_bp)


def register_error_handlers(app):
    """Map service exceptions to JSON error bodies, once for the whole API."""

    @app.errorhandler(ValidationError)
    def _handle_validation(error):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error):
        return api_error(E.NOT_FOUND, str(error))

    @app.errorhandler(PermissionDenied)
    def _handle_forbidden(error):
        return api_error(E.FORBIDDEN, str(error))

    @app.errorhandler(ConflictError)
    def _handle_conflict(error):
        return api_error(E.CONFLICT_DUPLICATE, str(error), details={error.field: error.value})

    @app.errorhandler(IntegrityError)
    def _handle_integrity(error):
        db.session.rollback()
        logger.warning("Integrity error on %s %s: %s", request.method, request.path, error.orig)
        return api_error(E.CONFLICT_DUPLICATE, "Write conflicts with existing data")

    @app.errorhandler(StoreUnavailableError)
    def _handle_store_unavailable(error):
        return api_error(E.STORE_UNAVAILABLE, str(error))

    @app.errorhandler(OperationalError)
    def _handle_operational(error):
        db.session.rollback()
        logger.error("Store unavailable on %s %s", request.method, request.path, exc_info=error)
        return api_error(E.STORE_UNAVAILABLE, "Store unavailable")

    @app.errorhandler(404)
    def _not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(500)
    def _server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")
