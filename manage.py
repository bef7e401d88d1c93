#!/usr/bin/env python
"""
Clinic Management CLI

Command-line tool for database migrations, the token counter and the doctor
directory.

Usage:
    python manage.py migrate [revision]            # Apply migrations (default: head)
    python manage.py rollback [revision]           # Roll back (default: one step)
    python manage.py makemigration "message"       # Autogenerate a migration
    python manage.py migration-status              # Show current revision and history
    python manage.py init-counter                  # Create the token counter row
    python manage.py show-counter                  # Show the last issued token
    python manage.py add-doctor <name> <email>     # Register a doctor
    python manage.py list-doctors                  # List active doctors
"""
import asyncio
import os
import sys

from alembic import command
from alembic.config import Config
from sqlalchemy.exc import IntegrityError

from app.config.config import settings
from app.core.settings_service import TokenCounterService, initialize_token_counter
from app.core.utils import configure_logging
from app.db.session import AsyncSessionLocal as async_session_maker
from app.models.user_model import User, UserRole
from app.repositories.user_repo import UserRepository

alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))


# ============= Migrations =============
def upgrade_migrations(revision: str = "head"):
    """Apply migrations up to the specified revision."""
    try:
        print(f"Upgrading database to: {revision}")
        command.upgrade(alembic_cfg, revision)
        print("Database upgraded successfully")
    except Exception as e:
        print(f"Error upgrading database: {str(e)}")
        sys.exit(1)


def downgrade_migrations(revision: str = "-1"):
    """Roll back migrations to the specified revision."""
    try:
        print(f"Downgrading database to: {revision}")
        command.downgrade(alembic_cfg, revision)
        print("Database downgraded successfully")
    except Exception as e:
        print(f"Error downgrading database: {str(e)}")
        sys.exit(1)


def create_migration(message: str):
    """Autogenerate a migration from the current models."""
    try:
        command.revision(alembic_cfg, message=message, autogenerate=True)
        print(f"Migration '{message}' created; run 'python manage.py migrate' to apply it")
    except Exception as e:
        print(f"Error creating migration: {str(e)}")
        sys.exit(1)


def migration_status():
    command.current(alembic_cfg, verbose=True)
    command.history(alembic_cfg)


# ============= Token counter =============
async def init_counter():
    async with async_session_maker() as db:
        counter = await initialize_token_counter(db)
        print(f"Token counter ready (last token: {counter.last_token})")


async def show_counter():
    async with async_session_maker() as db:
        counter = await TokenCounterService(db).get_counter()
        print(f"Timezone:        {settings.TOKEN_TIMEZONE}")
        print(f"Last token:      {counter.last_token}")
        print(f"Last issued at:  {counter.last_token_date.isoformat()} UTC")


# ============= Doctors =============
async def add_doctor(name: str, email: str):
    """Register a doctor so patients can be attended by them."""
    async with async_session_maker() as db:
        try:
            doctor = await UserRepository(db).create_user(
                User(name=name, email=email, role=UserRole.DOCTOR)
            )
            print(f"Doctor '{doctor.name}' created with id {doctor.id}")
        except IntegrityError:
            await db.rollback()
            print(f"A user with email '{email}' already exists.")
            sys.exit(1)


async def list_doctors():
    async with async_session_maker() as db:
        doctors = await UserRepository(db).get_doctors()

        if not doctors:
            print("No doctors found.")
            return

        print(f"\n{'ID':<38} {'Name':<30} {'Email':<30}")
        print("-" * 98)
        for doctor in doctors:
            print(f"{str(doctor.id):<38} {doctor.name:<30} {doctor.email:<30}")


def print_usage():
    """Print usage information."""
    print(__doc__)


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    configure_logging(settings.LOG_LEVEL)
    action = sys.argv[1].lower()

    if action == "migrate":
        upgrade_migrations(sys.argv[2] if len(sys.argv) > 2 else "head")

    elif action == "rollback":
        downgrade_migrations(sys.argv[2] if len(sys.argv) > 2 else "-1")

    elif action == "makemigration":
        if len(sys.argv) < 3:
            print("Error: Migration message required")
            print("Usage: python manage.py makemigration 'migration message'")
            sys.exit(1)
        create_migration(sys.argv[2])

    elif action == "migration-status":
        migration_status()

    elif action == "init-counter":
        asyncio.run(init_counter())

    elif action == "show-counter":
        asyncio.run(show_counter())

    elif action == "add-doctor":
        if len(sys.argv) < 4:
            print("Error: Doctor name and email required")
            print("Usage: python manage.py add-doctor <name> <email>")
            sys.exit(1)
        asyncio.run(add_doctor(sys.argv[2], sys.argv[3]))

    elif action == "list-doctors":
        asyncio.run(list_doctors())

    else:
        print(f"Unknown command: {action}")
        print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
