"""Utility script to manage the configured Postgres database."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql

from qa_forum.core.settings import settings

logger = logging.getLogger(__name__)


def normalize_to_psycopg(uri: str) -> str:
    """Return a Postgres URI suitable for psycopg.connect().

    - Strips quotes and whitespace.
    - Converts SQLAlchemy schemes (postgresql+*) to plain "postgresql".
    """
    uri = (uri or "").strip()
    if len(uri) >= 2 and uri[0] == uri[-1] and uri[0] in "'\"":
        uri = uri[1:-1]
    if not uri:
        raise ValueError("DATABASE_URL is empty")

    parts = urlsplit(uri)
    scheme = parts.scheme
    if scheme.startswith("postgresql+"):
        scheme = "postgresql"
    if not scheme.startswith("postgresql"):
        raise ValueError(f"Not a Postgres DATABASE_URL: {uri!r}")

    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def split_db_url(db_url: str) -> tuple[str, str]:
    """Return ``(admin_url, target_db)`` using the maintenance database."""
    parts = urlsplit(normalize_to_psycopg(db_url))
    target_db = parts.path.lstrip("/") or "postgres"

    if parts.netloc:
        admin_url = urlunsplit(
            ("postgresql", parts.netloc, "/postgres", parts.query, parts.fragment)
        )
    else:
        # hostless/local-socket style
        admin_url = "postgresql:///postgres"

    return admin_url, target_db


def ensure_database_exists(db_url: str) -> None:
    """Create the configured database if it is missing."""
    admin_url, target_db = split_db_url(db_url)

    if os.getenv("ENSURE_DB_DEBUG") == "1":
        logger.info("admin_url=%r, target_db=%r", admin_url, target_db)

    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target_db,))
        if cur.fetchone() is None:
            cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
            logger.info("Created database %s", target_db)
        else:
            logger.info("Database %s already exists", target_db)


def drop_all_tables(db_url: str) -> None:
    """Drop and recreate the public schema for the configured database."""
    with psycopg.connect(db_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("DROP SCHEMA IF EXISTS public CASCADE")
        cur.execute("CREATE SCHEMA public")
        cur.execute("GRANT ALL ON SCHEMA public TO CURRENT_USER")
        cur.execute("GRANT ALL ON SCHEMA public TO public")
    logger.info("Dropped all tables in public schema")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[ensure_db] %(message)s")
    parser = argparse.ArgumentParser(description="Ensure or reset the configured database")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop and recreate the public schema before creating tables.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create all tables from the ORM metadata (skip when using Alembic).",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to effective settings URL)",
    )
    args = parser.parse_args()

    raw_url = args.url or settings.effective_database_url
    try:
        normalized_url = normalize_to_psycopg(raw_url)
        ensure_database_exists(normalized_url)
        if args.drop_tables:
            drop_all_tables(normalized_url)
        if args.create_tables:
            from qa_forum.db.session import create_tables

            create_tables()
            logger.info("Created all tables")
    except (ValueError, psycopg.Error) as exc:
        logger.error("ERROR: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
