# Overview: Flask CLI command groups for bootstrap, accounts, and data maintenance.

# backend/gesti/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Accounts:
# - python -m flask users list
# - python -m flask users create --name "Tienda" --email tienda@example.com --password "Password123"
#
# Tenant data:
# - python -m flask data seed-demo --email tienda@example.com [--yes]
#   Replace the account's data with the demo dataset.
# - python -m flask data export --email tienda@example.com --output backup.json
# - python -m flask data import --email tienda@example.com --input backup.json [--yes]
#   Replace the account's data with a backup file.

import json

import click
from flask.cli import with_appcontext

from .errors import GestiError
from .extensions import db
from .models import User
from .services.auth_service import create_user
from .services import backup_service, demo_data_service
from .services.repository import TenantRepository


def _user_by_email(email: str) -> User:
    user = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not user:
        raise click.ClickException(f"No account with email {email}")
    return user


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """Account inspection and bootstrap."""


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.query(User).order_by(User.id).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<30} {'Active'}")
    click.echo("="*70)
    for user in users:
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<30} {'yes' if user.is_active else 'no'}")
    click.echo("="*70 + "\n")


@users_group.command('create')
@click.option('--name', prompt=True, help='Business or owner name')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(name, email, password):
    try:
        user = create_user(name, email, password)
    except GestiError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.email} (ID: {user.id})")


@click.group('data')
def data_group():
    """Per-account data maintenance."""


@data_group.command('seed-demo')
@click.option('--email', required=True, help='Account email')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def seed_demo(email, yes):
    """Replace the account's data with the demo dataset."""
    user = _user_by_email(email)
    if not yes:
        click.confirm(f"WARN This will REPLACE all data of {user.email}. Are you sure?", abort=True)
    try:
        counts = demo_data_service.reset_to_demo(TenantRepository(user.id))
    except GestiError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Demo data loaded: {counts}")


@data_group.command('export')
@click.option('--email', required=True, help='Account email')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), required=True)
@with_appcontext
def export_cli(email, output):
    user = _user_by_email(email)
    data = backup_service.export_data(TenantRepository(user.id))
    with open(output, "w", encoding="utf-8") as fh:
        json.dump(data, fh, ensure_ascii=False, indent=2)
    click.echo(f"PASS Exported {len(data['products'])} products and {len(data['transactions'])} sales to {output}")


@data_group.command('import')
@click.option('--email', required=True, help='Account email')
@click.option('--input', 'input_path', type=click.Path(exists=True, dir_okay=False), required=True)
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def import_cli(email, input_path, yes):
    """Replace the account's data with a backup file."""
    user = _user_by_email(email)
    try:
        with open(input_path, encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}")

    if not yes:
        click.confirm(f"WARN This will REPLACE all data of {user.email}. Are you sure?", abort=True)
    try:
        counts = backup_service.import_data(TenantRepository(user.id), data)
    except GestiError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Imported: {counts}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(data_group)
