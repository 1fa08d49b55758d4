"""
User persistence helpers.
"""

from __future__ import annotations

import asyncpg

from core import db


def normalize_username(username: str) -> str:
    return (username or "").strip()


async def get_user_by_username(username: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, password_hash, roles, created_at
        FROM users
        WHERE username = $1
        """,
        normalize_username(username),
    )


async def create_user(
    *,
    username: str,
    password_hash: str,
    roles: list[str],
    conn: asyncpg.Connection | None = None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (username, password_hash, roles)
        VALUES ($1, $2, $3)
        RETURNING id, username, roles, created_at
        """,
        normalize_username(username),
        password_hash,
        list(roles),
        conn=conn,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row
