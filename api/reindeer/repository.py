"""
Reindeer persistence (raw SQL).

A reindeer is returned with its "fans": the children linked to it through
favorite_reindeer. Join rows themselves are never exposed.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db


async def _attach_fans(
    reindeer: list[dict[str, Any]],
    *,
    conn: asyncpg.Connection | None = None,
) -> list[dict[str, Any]]:
    if not reindeer:
        return reindeer

    ids = [int(r["id"]) for r in reindeer]
    rows = await db.fetch_all(
        """
        SELECT f.reindeer_id, c.id, c.name, c.delivered
        FROM favorite_reindeer f
        JOIN children c ON c.id = f.child_id
        WHERE f.reindeer_id = ANY($1::int[])
        ORDER BY f.reindeer_id, c.id
        """,
        ids,
        conn=conn,
    )

    fans: dict[int, list[dict[str, Any]]] = {reindeer_id: [] for reindeer_id in ids}
    for row in rows:
        reindeer_id = int(row.pop("reindeer_id"))
        fans[reindeer_id].append(row)
    for r in reindeer:
        r["fans"] = fans[int(r["id"])]
    return reindeer


async def list_reindeer() -> list[dict[str, Any]]:
    rows = await db.fetch_all("SELECT id, name FROM reindeer ORDER BY id")
    return await _attach_fans(rows)


async def get_reindeer(reindeer_id: int, *, conn: asyncpg.Connection | None = None) -> dict[str, Any] | None:
    row = await db.fetch_one("SELECT id, name FROM reindeer WHERE id = $1", reindeer_id, conn=conn)
    if row is None:
        return None
    (reindeer,) = await _attach_fans([row], conn=conn)
    return reindeer


async def reindeer_exists(reindeer_id: int) -> bool:
    n = await db.fetch_value("SELECT count(*) FROM reindeer WHERE id = $1", reindeer_id)
    return int(n or 0) > 0


async def count_reindeer(*, conn: asyncpg.Connection | None = None) -> int:
    return int(await db.fetch_value("SELECT count(*) FROM reindeer", conn=conn) or 0)


async def insert_reindeer(
    *,
    name: str,
    reindeer_id: int | None = None,
    conn: asyncpg.Connection | None = None,
) -> dict[str, Any]:
    """
    Raises asyncpg.UniqueViolationError when an explicit id is already taken.
    """
    if reindeer_id is None:
        row = await db.fetch_one(
            "INSERT INTO reindeer (name) VALUES ($1) RETURNING id, name",
            name,
            conn=conn,
        )
    else:
        row = await db.fetch_one(
            "INSERT INTO reindeer (id, name) VALUES ($1, $2) RETURNING id, name",
            reindeer_id,
            name,
            conn=conn,
        )
    if row is None:
        raise RuntimeError("Failed to insert reindeer.")
    row["fans"] = []
    return row


async def insert_favorite(*, child_id: int, reindeer_id: int, conn: asyncpg.Connection | None = None) -> None:
    await db.execute(
        """
        INSERT INTO favorite_reindeer (child_id, reindeer_id)
        VALUES ($1, $2)
        ON CONFLICT (child_id, reindeer_id) DO NOTHING
        """,
        child_id,
        reindeer_id,
        conn=conn,
    )


async def update_reindeer(reindeer_id: int, *, name: str) -> bool:
    row = await db.fetch_one(
        "UPDATE reindeer SET name = $2 WHERE id = $1 RETURNING id",
        reindeer_id,
        name,
    )
    return row is not None


async def delete_reindeer(reindeer_id: int) -> dict[str, Any] | None:
    """
    Delete a reindeer (favorite links cascade) and return it as it was.
    """
    async with db.transaction() as conn:
        reindeer = await get_reindeer(reindeer_id, conn=conn)
        if reindeer is None:
            return None
        row = await db.fetch_one("DELETE FROM reindeer WHERE id = $1 RETURNING id", reindeer_id, conn=conn)
        if row is None:
            return None
        return reindeer
