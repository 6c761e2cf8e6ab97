"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, chat_tracking.configs
System role: Database schema initialization

Usage:
    python -m chat_tracking.boundary.db.create_tables
    python -m chat_tracking.boundary.db.create_tables --drop
"""

import argparse
import asyncio
import logging

from chat_tracking.boundary.db.connection import Database
from chat_tracking.configs import get_settings
from chat_tracking.observability.logger import configure_logging

logger = logging.getLogger(__name__)


async def create_all_tables(drop_first: bool = False) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: CREATE TABLE IF NOT EXISTS for each model, so safe to
    run multiple times. Existing tables remain unchanged.

    Args:
        drop_first: Drop every table before creating (irreversible data loss)

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    database = Database.from_settings(get_settings().database)
    try:
        if drop_first:
            await database.drop_schema()
            logger.warning("All tables dropped")
        await database.create_schema()
        logger.info("All tables created successfully")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create chat tracking tables")
    parser.add_argument("--drop", action="store_true", help="Drop tables before creating")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(create_all_tables(drop_first=args.drop))
