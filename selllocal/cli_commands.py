"""
Flask CLI commands for platform administration.

Commands:
- flask create-admin: Create a new admin user
- flask init-db: Create tables and seed platform settings
- flask suspend-expired-sellers: Suspend sellers whose trial has ended
"""

import click
from email_validator import validate_email, EmailNotValidError

from selllocal import database
from selllocal.database import db_session
from selllocal.models import ConfigSetting, User, UserRole
from selllocal.services.broadcast_service import BROADCASTS_ENABLED_KEY


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('create-admin')
    @click.option('--email', prompt=True, help='Admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    @click.option('--name', default='Platform Admin', show_default=True, help='Display name')
    def create_admin(email, password, name):
        """Create a new admin user."""
        try:
            email = validate_email(email, check_deliverability=False).normalized.lower()
        except EmailNotValidError as e:
            click.echo(click.style(f'Invalid email: {e}', fg='red'))
            return

        if len(password) < 6:
            click.echo(click.style('Password must be at least 6 characters.', fg='red'))
            return

        if db_session.query(User).filter_by(email=email).first():
            click.echo(click.style(f'A user with email {email} already exists', fg='red'))
            return

        try:
            admin = User(email=email, name=name, role=UserRole.ADMIN, is_approved=True)
            admin.set_password(password)

            db_session.add(admin)
            db_session.commit()

            click.echo(click.style('\nAdmin created successfully!', fg='green', bold=True))
            click.echo(f'   Email: {email}')
            click.echo(f'   ID: {admin.id}')

        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'Failed to create admin: {e}', fg='red'))

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables and seed the global broadcast toggle."""
        database.create_all()
        if ConfigSetting.get_value(db_session, BROADCASTS_ENABLED_KEY) is None:
            ConfigSetting.set_value(
                db_session, BROADCASTS_ENABLED_KEY, True,
                description='Global toggle for WhatsApp broadcasts'
            )
            db_session.commit()
        click.echo(click.style('Database initialized.', fg='green'))

    @app.cli.command('suspend-expired-sellers')
    def suspend_expired_sellers():
        """Suspend every seller whose trial window has ended."""
        try:
            count = User.auto_suspend_expired_sellers(db_session)
            db_session.commit()
        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'Failed to suspend sellers: {e}', fg='red'))
            return
        click.echo(f'Suspended {count} seller(s).')
