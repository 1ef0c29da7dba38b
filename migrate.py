#!/usr/bin/env python3
"""
Database management script.
Creates and drops tables and provisions user accounts. Accounts are never
created through the API, so this is the only way to add admins and agents.
"""

import asyncio
import getpass
import sys
import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from realty_portal.config import settings
from realty_portal.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from realty_portal.models.user import UserRole
from realty_portal.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class MigrationManager:
    """Manages schema creation and account provisioning."""

    async def create_schema(self) -> None:
        logger.info(f"Creating tables on {self._safe_url()}")
        await create_tables()

    async def drop_schema(self) -> None:
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def reset_database(self) -> None:
        """Reset the database by dropping and recreating all tables."""
        await self.drop_schema()
        await self.create_schema()
        logger.info("Database reset completed")

    async def create_user(
        self,
        email: str,
        full_name: str,
        password: str,
        role: UserRole = UserRole.AGENT
    ) -> None:
        """Provision one account."""
        async with AsyncSessionLocal() as session:
            repo = UserRepository(session)
            try:
                user = await repo.create_user({
                    "email": email,
                    "full_name": full_name,
                    "password": password,
                    "role": role
                })
            except (ValueError, SQLAlchemyError) as e:
                await session.rollback()
                logger.error(f"Failed to create user {email}: {e}")
                raise

        logger.info(f"Created {user.role.value} {user.email} (ID: {user.id})")

    async def seed_database(self) -> None:
        """Seed a development database with one admin account."""
        if not settings.is_development:
            raise RuntimeError("Seeding is only allowed in development")

        async with AsyncSessionLocal() as session:
            existing_admin = await UserRepository(session).get_by_email("admin@example.com")

        if existing_admin:
            logger.info("Admin user already exists, skipping seed")
            return

        await self.create_user("admin@example.com", "System Administrator", "admin123456", UserRole.ADMIN)
        logger.warning("Seeded admin@example.com / admin123456 - change this password!")

    def _safe_url(self) -> str:
        url = settings.database_url
        return url.split("@", 1)[1] if "@" in url else url


async def _run(args: argparse.Namespace, manager: MigrationManager) -> None:
    try:
        if args.command == "create-tables":
            await manager.create_schema()

        elif args.command == "drop-tables":
            await manager.drop_schema()

        elif args.command == "reset":
            await manager.reset_database()

        elif args.command == "seed":
            await manager.seed_database()

        elif args.command == "create-user":
            password = args.password or getpass.getpass("Password: ")
            await manager.create_user(args.email, args.full_name, password, UserRole(args.role))
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Realty Portal database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")
    subparsers.add_parser("drop-tables", help="Drop all tables (development/testing only)")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    subparsers.add_parser("seed", help="Create the development admin account")

    user_parser = subparsers.add_parser("create-user", help="Provision an admin or agent account")
    user_parser.add_argument("email", help="Login email")
    user_parser.add_argument("full_name", help="Display name")
    user_parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.AGENT.value)
    user_parser.add_argument("--password", help="Password (prompted when omitted)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "reset" and not args.confirm:
        print("Database reset requires --confirm flag")
        return

    try:
        asyncio.run(_run(args, MigrationManager()))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
