"""
Table registration.

`init_schema()` runs once at startup and creates any missing table. Every
statement is idempotent, so restarting against a populated database is safe.
"""

from __future__ import annotations

import logging

from . import db

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS children (
  id integer GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
  name text NOT NULL,
  delivered smallint NOT NULL DEFAULT 0 CHECK (delivered IN (0, 1))
);

CREATE TABLE IF NOT EXISTS toys (
  id integer GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
  name text NOT NULL,
  child_id integer NOT NULL REFERENCES children (id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS toys_child_id_idx ON toys (child_id);

CREATE TABLE IF NOT EXISTS reindeer (
  id integer GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
  name text NOT NULL
);

CREATE TABLE IF NOT EXISTS favorite_reindeer (
  id integer GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
  child_id integer NOT NULL REFERENCES children (id) ON DELETE CASCADE,
  reindeer_id integer NOT NULL REFERENCES reindeer (id) ON DELETE CASCADE,
  UNIQUE (child_id, reindeer_id)
);

CREATE TABLE IF NOT EXISTS users (
  id integer GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
  username text NOT NULL UNIQUE,
  password_hash text NOT NULL,
  roles text[] NOT NULL DEFAULT '{}',
  created_at timestamptz NOT NULL DEFAULT now()
);
"""

# Bounds of the integer identity columns.
INT4_MIN = -(2**31)
INT4_MAX = 2**31 - 1

# Reverse dependency order.
TABLES = ("favorite_reindeer", "toys", "users", "reindeer", "children")


async def init_schema() -> None:
    # No bind arguments: asyncpg runs this as one multi-statement simple query.
    await db.execute(SCHEMA_SQL)
    logger.info("schema_ready tables=%s", ",".join(reversed(TABLES)))


async def drop_schema() -> None:
    """
    Drop every table. Used by integration tests to start from a clean store.
    """
    async with db.transaction() as conn:
        for table in TABLES:
            await db.execute(f"DROP TABLE IF EXISTS {table} CASCADE", conn=conn)
