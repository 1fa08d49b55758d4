"""
Child and toy persistence (raw SQL).

Children are always returned with their toys attached under "toys".
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

_CHILD_COLUMNS = "id, name, delivered"


async def _attach_toys(
    children: list[dict[str, Any]],
    *,
    conn: asyncpg.Connection | None = None,
) -> list[dict[str, Any]]:
    if not children:
        return children

    ids = [int(c["id"]) for c in children]
    toys = await db.fetch_all(
        """
        SELECT id, name, child_id
        FROM toys
        WHERE child_id = ANY($1::int[])
        ORDER BY id
        """,
        ids,
        conn=conn,
    )

    by_child: dict[int, list[dict[str, Any]]] = {child_id: [] for child_id in ids}
    for toy in toys:
        by_child[int(toy["child_id"])].append(toy)
    for child in children:
        child["toys"] = by_child[int(child["id"])]
    return children


async def list_children(*, delivered: int | None = None, name: str | None = None) -> list[dict[str, Any]]:
    """
    `delivered` is an equality filter, `name` a case-sensitive substring filter.
    None disables either filter.
    """
    rows = await db.fetch_all(
        f"""
        SELECT {_CHILD_COLUMNS}
        FROM children
        WHERE ($1::smallint IS NULL OR delivered = $1)
          AND ($2::text IS NULL OR strpos(name, $2) > 0)
        ORDER BY id
        """,
        delivered,
        name,
    )
    return await _attach_toys(rows)


async def get_child(child_id: int, *, conn: asyncpg.Connection | None = None) -> dict[str, Any] | None:
    row = await db.fetch_one(
        f"SELECT {_CHILD_COLUMNS} FROM children WHERE id = $1",
        child_id,
        conn=conn,
    )
    if row is None:
        return None
    (child,) = await _attach_toys([row], conn=conn)
    return child


async def child_exists(child_id: int) -> bool:
    n = await db.fetch_value("SELECT count(*) FROM children WHERE id = $1", child_id)
    return int(n or 0) > 0


async def count_children(*, conn: asyncpg.Connection | None = None) -> int:
    return int(await db.fetch_value("SELECT count(*) FROM children", conn=conn) or 0)


async def insert_child(
    *,
    name: str,
    delivered: int = 0,
    child_id: int | None = None,
    conn: asyncpg.Connection | None = None,
) -> dict[str, Any]:
    """
    Insert a child. When `child_id` is None the store assigns the identity.

    Raises asyncpg.UniqueViolationError when the id is already taken.
    """
    if child_id is None:
        row = await db.fetch_one(
            f"""
            INSERT INTO children (name, delivered)
            VALUES ($1, $2)
            RETURNING {_CHILD_COLUMNS}
            """,
            name,
            delivered,
            conn=conn,
        )
    else:
        row = await db.fetch_one(
            f"""
            INSERT INTO children (id, name, delivered)
            VALUES ($1, $2, $3)
            RETURNING {_CHILD_COLUMNS}
            """,
            child_id,
            name,
            delivered,
            conn=conn,
        )
    if row is None:
        raise RuntimeError("Failed to insert child.")
    row["toys"] = []
    return row


async def insert_toy(*, name: str, child_id: int, conn: asyncpg.Connection | None = None) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO toys (name, child_id)
        VALUES ($1, $2)
        RETURNING id, name, child_id
        """,
        name,
        child_id,
        conn=conn,
    )
    if row is None:
        raise RuntimeError("Failed to insert toy.")
    return row


async def insert_child_with_toy(*, child_name: str, toy_name: str) -> dict[str, Any]:
    """
    Insert a child and one toy it owns in a single transaction.

    The toy's child_id is the identity returned by the child insert.
    """
    async with db.transaction() as conn:
        child = await insert_child(name=child_name, conn=conn)
        toy = await insert_toy(name=toy_name, child_id=int(child["id"]), conn=conn)
        child["toys"] = [toy]
        return child


async def update_child(child_id: int, *, name: str, delivered: int) -> bool:
    """
    Overwrite a child's fields. Returns False when the row does not exist.
    """
    row = await db.fetch_one(
        """
        UPDATE children
        SET name = $2,
            delivered = $3
        WHERE id = $1
        RETURNING id
        """,
        child_id,
        name,
        delivered,
    )
    return row is not None


async def delete_child(child_id: int) -> dict[str, Any] | None:
    """
    Delete a child (toys and favorite links cascade).

    Returns the child as it was before deletion, or None when absent.
    """
    async with db.transaction() as conn:
        child = await get_child(child_id, conn=conn)
        if child is None:
            return None
        row = await db.fetch_one("DELETE FROM children WHERE id = $1 RETURNING id", child_id, conn=conn)
        if row is None:
            return None
        return child
