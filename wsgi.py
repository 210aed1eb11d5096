"""
WSGI / Flask CLI entry point.

Usage:
    FLASK_APP=wsgi.py flask seed-categories
    FLASK_APP=wsgi.py flask db migrate -m "description"
    gunicorn wsgi:app
"""

from gearguard import create_app

app = create_app()
