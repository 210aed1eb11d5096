"""
GearGuard
SQLAlchemy extension + model registry.

The ``db`` handle is created unbound here and attached to a Flask app in
``create_app`` via ``db.init_app(app)``. Sessions are scoped to the app
context and removed when it tears down.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
