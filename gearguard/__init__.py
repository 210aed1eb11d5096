"""
GearGuard
Flask Application Factory.

Usage:
    from gearguard import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_migrate import Migrate

from gearguard.config import config
from gearguard.models import db
from gearguard.auth import init_auth
from gearguard.blueprints import register_blueprints, register_error_handlers
from gearguard.cli import register_commands
from gearguard.middleware.jwt_auth import init_jwt_middleware
from gearguard.middleware.logging_config import configure_logging
from gearguard.middleware.rate_limiter import init_rate_limits, rate_limit_key
from gearguard.middleware.timing import init_request_timing

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[],                     # no global limit; limits are per-blueprint
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    config_class = config[config_name]
    # Instantiate so ProductionConfig can validate required env vars
    app.config.from_object(config_class())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing, identity, rate limits, then the auth gate ────────
    # The limiter hook must run after g.current_user is resolved so
    # rate_limit_key can key by user.
    init_request_timing(app)
    init_jwt_middleware(app)
    limiter.init_app(app)
    init_auth(app)

    # ── Import all models so create_all / Alembic can see them ───────────
    from gearguard.models import auth as _auth_models                # noqa: F401
    from gearguard.models import team as _team_models                # noqa: F401
    from gearguard.models import equipment as _equipment_models      # noqa: F401
    from gearguard.models import maintenance as _maintenance_models  # noqa: F401
    from gearguard.models import history as _history_models          # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    if config_name != "testing":
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///"):
            os.makedirs(app.instance_path, exist_ok=True)
        with app.app_context():
            db.create_all()
            app.logger.info("db.create_all() completed successfully")

    # ── Blueprints, error handlers, rate limits ──────────────────────────
    register_blueprints(app)
    register_error_handlers(app)
    init_rate_limits(app, limiter)

    # ── CLI commands ─────────────────────────────────────────────────────
    register_commands(app)

    return app
