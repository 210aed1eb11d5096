"""
GearGuard
Flask CLI commands.

    flask seed-categories
    flask create-user --open-id alice --name Alice --role admin
    flask issue-token --open-id alice
"""

import logging

import click

from gearguard.models import db

logger = logging.getLogger(__name__)


def register_commands(app):
    @app.cli.command("seed-categories")
    def seed_categories_cmd():
        """Insert the default equipment categories (idempotent)."""
        from gearguard.services.equipment_service import seed_default_categories
        count = seed_default_categories()
        db.session.commit()
        logger.info("Seeded %s new equipment categories.", count)
        click.echo(f"Seeded {count} new equipment categories.")

    @app.cli.command("create-user")
    @click.option("--open-id", required=True, help="External OAuth identifier")
    @click.option("--name", default=None)
    @click.option("--email", default=None)
    @click.option("--role", type=click.Choice(["user", "admin"]), default=None)
    def create_user_cmd(open_id, name, email, role):
        """Create or update a user."""
        from gearguard.services.user_service import upsert_user
        user = upsert_user(open_id, name=name, email=email, login_method="cli", role=role)
        db.session.commit()
        click.echo(f"User {user.id} ({user.open_id}) role={user.role}")

    @app.cli.command("issue-token")
    @click.option("--open-id", required=True)
    def issue_token_cmd(open_id):
        """Print a bearer token for an existing user (local use)."""
        from gearguard.services.jwt_service import generate_access_token
        from gearguard.services.user_service import get_user_by_open_id
        user = get_user_by_open_id(open_id)
        if user is None:
            raise click.ClickException(f"No user with open_id {open_id!r}")
        click.echo(generate_access_token(user))
