# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/treasures/cli.py
# Commands Legend (run from the backend directory, FLASK_APP=wsgi.py):
# - python -m flask shop init-db
#   Create all tables (idempotent).
# - python -m flask shop reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask shop seed-catalog
#   Insert the sample watches and a sample branch when the catalog is empty.
# - python -m flask users create-admin --name "Admin" --email admin@timestreasures.local --password "secret1"
# - python -m flask users list
# - python -m flask maintenance cleanup-sessions --retention-days 30

import click
from flask.cli import with_appcontext

from .errors import ShopError
from .extensions import db
from .models import Branch, User, Watch
from .services.auth_service import create_user
from .services import session_service

SAMPLE_WATCHES = [
    {
        "name": "Navigator Chronograph",
        "price_cents": 24_900,
        "image": "https://images.timestreasures.local/navigator.jpg",
        "category": "men-watches",
        "description": "Steel chronograph with a tachymeter bezel and 100m water resistance.",
        "inventory": 12,
    },
    {
        "name": "Rose Petite",
        "price_cents": 18_500,
        "image": "https://images.timestreasures.local/rose-petite.jpg",
        "category": "women-watches",
        "description": "Rose gold case with a mother-of-pearl dial.",
        "inventory": 8,
    },
    {
        "name": "Heritage Tourbillon",
        "price_cents": 1_250_000,
        "image": "https://images.timestreasures.local/heritage.jpg",
        "category": "luxury-watches",
        "description": "Hand-finished tourbillon movement in a platinum case.",
        "inventory": 2,
    },
    {
        "name": "Pulse Active",
        "price_cents": 29_900,
        "image": "https://images.timestreasures.local/pulse.jpg",
        "category": "smartwatches",
        "description": "Heart rate, GPS and a week of battery life.",
        "inventory": 25,
    },
]

SAMPLE_BRANCH = {
    "name": "Times Treasures Downtown",
    "lat": 32.0853,
    "lng": 34.7818,
    "phone_number": "+972-3-555-0100",
    "opening_hour": "09:00",
    "closing_hour": "20:00",
    "address": "1 Market Street",
}


@click.group('shop')
def shop_group():
    """Database bootstrap and catalog seeding."""


@shop_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@shop_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset complete. Run 'python -m flask shop seed-catalog' to add sample data.")


@shop_group.command('seed-catalog')
@with_appcontext
def seed_catalog():
    """Insert sample watches and a branch. Skips whatever already has rows."""
    if db.session.query(Watch).count():
        click.echo("SKIP Catalog already has watches.")
    else:
        for data in SAMPLE_WATCHES:
            db.session.add(Watch(**data))
        click.echo(f"PASS Added {len(SAMPLE_WATCHES)} watches.")

    if db.session.query(Branch).count():
        click.echo("SKIP Branches already exist.")
    else:
        db.session.add(Branch(**SAMPLE_BRANCH))
        click.echo("PASS Added 1 branch.")

    db.session.commit()


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create-admin')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(name, email, password):
    """Create an administrator account. Password must be 6+ characters."""
    try:
        user = create_user(name=name, email=email, password=password, role="admin")
    except ShopError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created admin: {user.name} ({user.email})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role and active status."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<20} {'Email':<35} {'Role':<8} {'Active'}")
    click.echo("="*90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<20} {user.email:<35} {user.role:<8} {active_str}")

    click.echo("="*90 + "\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked session tokens older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} sessions older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(shop_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
