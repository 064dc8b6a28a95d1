"""
Database management commands.

Usage:
    python -m homelyhub.manage create
    python -m homelyhub.manage drop --confirm
    python -m homelyhub.manage reset --confirm
    python -m homelyhub.manage create-admin --email admin@example.com --password <password>
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from sqlalchemy import select

from homelyhub.config import settings
from homelyhub.database import AsyncSessionLocal, close_db_connection, create_tables, drop_tables
from homelyhub.models import User, UserRole

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def create_admin(email: str, password: str, name: str = "Administrator") -> User:
    """
    Create an admin account. Admins cannot be registered through the API.

    Raises:
        ValueError: If the email is already registered or the password is too short
    """
    email = User.validate_email_format(email)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            raise ValueError(f"User with email {email} already exists")

        admin = User(name=name, email=email, role=UserRole.ADMIN, is_active=True)
        admin.set_password(password)
        session.add(admin)
        await session.commit()

    logger.info(f"Admin user created: {email}")
    return admin


async def reset_database() -> None:
    """Drop and recreate every table."""
    if settings.is_production:
        raise RuntimeError("Database reset is not allowed in production")

    logger.warning("Resetting database - all data will be lost!")
    await drop_tables()
    await create_tables()
    logger.info("Database reset completed")


async def _run(args: argparse.Namespace) -> None:
    try:
        if args.command == "create":
            await create_tables()
        elif args.command == "drop":
            await drop_tables()
        elif args.command == "reset":
            await reset_database()
        elif args.command == "create-admin":
            await create_admin(args.email, args.password, args.name)
    finally:
        await close_db_connection()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HomelyHub database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables (not in production)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping all data")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables (not in production)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm dropping all data")

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin account")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", required=True)
    admin_parser.add_argument("--name", default="Administrator")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command in ("drop", "reset") and not args.confirm:
        print(f"'{args.command}' requires the --confirm flag")
        return 1

    try:
        asyncio.run(_run(args))
    except (RuntimeError, ValueError) as e:
        logger.error(f"Command failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
