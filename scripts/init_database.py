#!/usr/bin/env python3
"""
Initialize the Lending Library database.

This script:
1. Creates all database tables
2. Optionally loads books from a JSON file or a generated fake catalog
3. Verifies the expected tables exist

Usage:
    python scripts/init_database.py [--drop-existing] [--books FILE] [--sample-data N]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect

from lending_library.database import SqlLibraryRepository, get_db_manager
from lending_library.database.seed import generate_books, load_books, seed_books
from lending_library.library import make_lending_library

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"books", "book_checkouts"}


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Lending Library database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--books",
        help="JSON file of addBook requests to load after creating tables",
    )
    parser.add_argument(
        "--sample-data",
        type=int,
        metavar="N",
        help="Generate and load N fake books",
    )
    parser.add_argument(
        "--database-url",
        help="Override default database URL",
    )

    args = parser.parse_args()

    db_manager = get_db_manager(args.database_url)

    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        db_manager.init_database(drop_existing=args.drop_existing)

        books = []
        if args.books:
            books.extend(load_books(args.books))
        if args.sample_data:
            books.extend(generate_books(args.sample_data))

        if books:
            with db_manager.session_scope() as session:
                seed_books(make_lending_library(SqlLibraryRepository(session)), books)

        tables = set(inspect(db_manager.engine).get_table_names())
        logger.info("Tables: %s", ", ".join(sorted(tables)))

        missing_tables = EXPECTED_TABLES - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", missing_tables)
            sys.exit(1)

        logger.info("Database initialization complete")

    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
