# Overview: Flask CLI command groups for bootstrap, seeding, inspection, reports and maintenance.

# backend/salonflow/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables (if missing) and the default manager account.
# - python -m flask system seed
#   Demo barbers and catalog services (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
# - python -m flask users create --username "Alex Johnson" --password barber123 --role barber
#
# Reports:
# - python -m flask reports generate --date 2024-01-15 [--timezone Asia/Colombo]
#   Generate and save a daily report (attributed to the first manager, or --manager).
# - python -m flask reports show --date 2024-01-15
#   Print the latest saved report for a date.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired/revoked sessions older than the retention window.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Service
from .models.auth import ROLE_MANAGER, ROLE_BARBER, VALID_ROLES
from .formatting import format_currency, format_date, format_datetime, format_percentage
from .services.auth_service import create_user
from .services.permission_service import Actor
from .services import reporting_service
from .services import session_service
from .validation import ValidationError, ConflictError
from .time_utils import parse_calendar_date


DEFAULT_MANAGER_PASSWORD = "manager123"
DEFAULT_BARBER_PASSWORD = "barber123"

SEED_BARBERS = [
    ("Alex Johnson", "barber1"),
    ("Maria Garcia", "barber2"),
    ("James Smith", "barber3"),
]

# (name, price, duration minutes, commission rate)
SEED_SERVICES = [
    ("Haircut", 1500, 30, 0.45),
    ("Beard Trim", 800, 15, 0.40),
    ("Shave", 1000, 20, 0.40),
    ("Hair Color", 5000, 90, 0.50),
    ("Kids Cut", 1200, 20, 0.40),
]


def _email(local_part: str) -> str:
    return f"{local_part}@{current_app.config['ACCOUNT_EMAIL_DOMAIN']}"


def _ensure_user(username: str, email: str, password: str, role: str) -> tuple[User, bool]:
    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        return existing, False
    return create_user(username=username, password=password, role=role, email=email), True


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--username', default='Manager', help='Manager username')
@click.option('--email', default=None, help='Manager email (default: manager@ACCOUNT_EMAIL_DOMAIN)')
@click.option('--password', default=DEFAULT_MANAGER_PASSWORD, help='Manager password')
@with_appcontext
def init_system(username, email, password):
    """
    Create tables and the default manager account. Idempotent.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing SalonFlow...")

    db.create_all()
    click.echo("PASS Tables ready")

    user, created = _ensure_user(username, email or _email("manager"), password, ROLE_MANAGER)
    if created:
        click.echo(f"PASS Created manager: {user.username} <{user.email}>")
    else:
        click.echo(f"SKIP Manager exists: {user.username} <{user.email}>")

    click.echo("DONE System initialized.")


@system_group.command('seed')
@with_appcontext
def seed_demo_data():
    """Create demo barbers and catalog services (skips existing ones)."""
    click.echo("\nUSERS Seeding barbers...")
    for username, local_part in SEED_BARBERS:
        user, created = _ensure_user(username, _email(local_part), DEFAULT_BARBER_PASSWORD, ROLE_BARBER)
        state = "PASS Created" if created else "SKIP Exists"
        click.echo(f"{state}: {user.username} <{user.email}>")

    click.echo("\nCATALOG Seeding services...")
    for name, price, duration, rate in SEED_SERVICES:
        if db.session.query(Service).filter_by(name=name).first():
            click.echo(f"SKIP Exists: {name}")
            continue
        db.session.add(Service(name=name, price=float(price), duration=duration, commission_rate=rate))
        db.session.commit()
        click.echo(
            f"PASS Created: {name} {format_currency(price, current_app.config['CURRENCY_CODE'])} "
            f"({duration} min, {format_percentage(rate)} commission)"
        )


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(sorted(VALID_ROLES)), help='Filter by role')
@with_appcontext
def list_users(role):
    """List all users with their role."""
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.role.asc(), User.username.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<38} {'Username':<20} {'Email':<30} {'Active':<8} {'Role'}")
    click.echo("="*100)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<38} {user.username:<20} {user.email:<30} {active_str:<8} {user.role}")

    click.echo("="*100 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', default=None, help='Default: <username>@ACCOUNT_EMAIL_DOMAIN')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(sorted(VALID_ROLES)), default=ROLE_BARBER, show_default=True)
@with_appcontext
def create_user_command(username, email, password, role):
    """Create a user."""
    try:
        user = create_user(username=username, password=password, role=role, email=email)
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created {user.role}: {user.username} <{user.email}> (ID: {user.id})")


@click.group('reports')
def reports_group():
    """Daily financial report commands."""


def _print_report(report: dict) -> None:
    currency = current_app.config["CURRENCY_CODE"]
    click.echo("\n" + "="*60)
    click.echo(f"Daily report: {format_date(parse_calendar_date(report['date']))} ({report['timezone']})")
    click.echo("="*60)
    click.echo(f"{'Approved services:':<28} {report['approved_service_count']}")
    click.echo(f"{'Total revenue:':<28} {format_currency(report['total_revenue'], currency)}")
    click.echo(f"{'Barber commissions:':<28} {format_currency(report['total_barber_commissions'], currency)}")
    click.echo(f"{'Profit:':<28} {format_currency(report['profit'], currency)}")
    click.echo(f"{'Manager commission:':<28} {format_currency(report['manager_commission'], currency)}")
    click.echo(f"{'Owner cut:':<28} {format_currency(report['owner_cut'], currency)}")

    if report["barber_breakdown"]:
        click.echo("-"*60)
        click.echo(f"{'Barber':<20} {'Services':>8} {'Revenue':>15} {'Commission':>15}")
        for line in report["barber_breakdown"]:
            click.echo(
                f"{line['barber_name']:<20} {line['service_count']:>8} "
                f"{format_currency(line['revenue'], currency):>15} "
                f"{format_currency(line['commission'], currency):>15}"
            )
    click.echo("="*60 + "\n")


@reports_group.command('generate')
@click.option('--date', 'report_date', default=None, help='YYYY-MM-DD (default: today)')
@click.option('--timezone', 'tz_name', default=None, help='IANA zone (default: SALON_TIMEZONE)')
@click.option('--manager', 'manager_username', default=None, help='Attribute to this manager')
@with_appcontext
def generate_report(report_date, tz_name, manager_username):
    """Generate and save a daily report."""
    query = db.session.query(User).filter_by(role=ROLE_MANAGER, is_active=True)
    if manager_username:
        query = query.filter_by(username=manager_username)
    manager = query.order_by(User.created_at.asc()).first()
    if manager is None:
        raise click.ClickException("No active manager found. Run 'python -m flask system init' first.")

    try:
        report = reporting_service.generate_and_save_daily_report(
            Actor.from_user(manager), report_date, tz_name
        )
    except reporting_service.ReportError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Saved report {report.id} at {format_datetime(report.created_at, report.timezone)}")
    _print_report(report.to_dict())


@reports_group.command('show')
@click.option('--date', 'report_date', required=True, help='YYYY-MM-DD')
@with_appcontext
def show_report(report_date):
    """Print the latest saved report for a date."""
    try:
        report = reporting_service.get_daily_report_by_date(report_date)
    except reporting_service.ReportError as e:
        raise click.ClickException(str(e))
    if report is None:
        raise click.ClickException(f"No report saved for {report_date}")
    _print_report(report.to_dict())


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', default=30, show_default=True, type=int)
@with_appcontext
def cleanup_sessions(retention_days):
    """Delete expired and revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} session(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(reports_group)
    app.cli.add_command(maintenance_group)
