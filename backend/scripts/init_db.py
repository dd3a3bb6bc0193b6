"""
ReportDesk — Create Database Tables
=====================================

Creates every table on Base.metadata that doesn't exist yet. Intended for
local development and throwaway databases; deployments use
`alembic upgrade head`.

Usage:
    python -m scripts.init_db
"""

import asyncio
import logging

from reportdesk.database import create_all_tables, dispose_engine
from reportdesk.main import setup_logging

logger = logging.getLogger("reportdesk.scripts.init_db")


async def main() -> None:
    setup_logging()
    try:
        await create_all_tables()
        logger.info("Tables created (existing tables left untouched)")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
