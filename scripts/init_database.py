#!/usr/bin/env python3
"""
Initialize Database Script

Creates any missing tables for the fantasy league pipeline. Existing tables
are left alone, so running it twice is harmless.

Usage:
    python scripts/init_database.py
    python scripts/init_database.py --database-url sqlite:///data/db/fantrax.db
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from fantrax_pipeline.core.config import settings
from fantrax_pipeline.core.database import Store
from fantrax_pipeline.core.logging import configure_logging

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Create the pipeline's database tables")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args()

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON, sql_echo=settings.SQL_ECHO)

    with Store(args.database_url) as store:
        logger.info(f"Initializing database at {store.url}")
        store.create_all()

        tables = inspect(store.engine).get_table_names()
        logger.info(f"Database ready with {len(tables)} tables:")
        for table in sorted(tables):
            logger.info(f"  - {table}")


if __name__ == "__main__":
    main()
