import os

import click
from flask.cli import with_appcontext
from flask_migrate import upgrade, migrate, init

from bovann import create_app
from bovann.seed import seed_admin

app = create_app()

@app.cli.command("db-init")
@with_appcontext
def db_init():
    """Initializes migrations directory"""
    init()

@app.cli.command("db-migrate")
@with_appcontext
def db_migrate():
    """Creates a new migration"""
    migrate()

@app.cli.command("db-upgrade")
@with_appcontext
def db_upgrade():
    """Applies migrations"""
    upgrade()

@app.cli.command("seed-admin")
@click.option("--email", default=lambda: os.getenv("ADMIN_EMAIL", "admin@bovann.com"))
@click.option("--password", default=lambda: os.getenv("ADMIN_PASSWORD"))
@with_appcontext
def seed_admin_command(email, password):
    """Creates the first ADMIN account"""
    if not password:
        raise click.UsageError("Provide --password or set ADMIN_PASSWORD")

    admin = seed_admin(email, password)
    if admin:
        click.echo(f"Admin user created: {admin.email}")
    else:
        click.echo("Admin user already exists")
