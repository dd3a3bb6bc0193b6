"""
ReportDesk — Bootstrap an Administrator
=========================================

Registration only ever creates role 'user', so the first admin has to be
made out-of-band. This script either creates a new admin account or promotes
an existing user (matched by username) to admin.

Usage:
    python -m scripts.create_admin --username root --email root@example.com
    python -m scripts.create_admin --username alice --promote

The password is prompted for unless ADMIN_PASSWORD is set.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from typing import List, Optional

from sqlalchemy import select

from reportdesk.database import async_session_factory, dispose_engine
from reportdesk.exceptions import ReportDeskError
from reportdesk.main import setup_logging
from reportdesk.models.user import Role, User
from reportdesk.services.auth_service import auth_service

logger = logging.getLogger("reportdesk.scripts.create_admin")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote a ReportDesk administrator")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", help="Required when creating a new account")
    parser.add_argument(
        "--promote",
        action="store_true",
        help="Only promote an existing user; never create one",
    )
    return parser.parse_args(argv)


async def create_or_promote(
    username: str,
    email: Optional[str],
    password: Optional[str],
    promote_only: bool = False,
    session_factory=async_session_factory,
) -> User:
    """
    Returns the admin User row.

    Raises:
        ValueError: user missing with --promote, or email/password missing
        ReportDeskError: registration rules rejected the new account
    """
    async with session_factory() as db:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if user is not None:
            if user.role != Role.ADMIN.value:
                user.role = Role.ADMIN.value
                await db.commit()
                logger.info("Promoted existing user %s to admin", username)
            else:
                logger.info("User %s is already an admin", username)
            return user

        if promote_only:
            raise ValueError(f"No user named '{username}' to promote")
        if not email or not password:
            raise ValueError("--email and a password are required to create a new admin")

        user = await auth_service.register(db, username=username, email=email, password=password)
        user.role = Role.ADMIN.value
        await db.commit()
        logger.info("Created admin %s (id=%s)", username, user.id)
        return user


async def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = parse_args(argv)

    password = None
    if not args.promote:
        password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")

    try:
        await create_or_promote(args.username, args.email, password, promote_only=args.promote)
    except (ValueError, ReportDeskError) as e:
        logger.error("Could not create admin: %s", e)
        return 1
    finally:
        await dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
