"""
Demo data for an empty store.

Runs once per process from the FastAPI lifespan. Each group of rows is only
inserted when its table is empty, so restarts never duplicate data.
"""

from __future__ import annotations

import logging
import os

from auth import repository as auth_repository
from auth import security
from children import repository as children_repository
from core import db
from reindeer import repository as reindeer_repository

logger = logging.getLogger(__name__)

CHILD_TOYS = (
    ("Svetlana", "Marbles"),
    ("Nigel", "Silly Putty"),
    ("Sequina", "Wonder Woman"),
)

REINDEER_NAMES = (
    "Dasher",
    "Dancer",
    "Prancer",
    "Vixen",
    "Comet",
    "Cupid",
    "Donner",
    "Blitzen",
    "Rudolph",
)

# (child name, reindeer name)
FAVORITES = (
    ("Svetlana", "Rudolph"),
    ("Svetlana", "Comet"),
    ("Nigel", "Dasher"),
    ("Sequina", "Rudolph"),
)


def seeding_enabled() -> bool:
    raw = os.environ.get("SEED_DATABASE", "1").strip().lower()
    return raw not in {"0", "false", "no", "off"}


async def seed_children() -> dict[str, int]:
    """
    Insert the demo children and their toys when no child exists.

    Returns {child name: id} for the rows it inserted.
    """
    async with db.transaction() as conn:
        if await children_repository.count_children(conn=conn) > 0:
            return {}

        ids: dict[str, int] = {}
        for child_name, toy_name in CHILD_TOYS:
            child = await children_repository.insert_child(name=child_name, conn=conn)
            ids[child_name] = int(child["id"])
            await children_repository.insert_toy(name=toy_name, child_id=ids[child_name], conn=conn)

    logger.info("seed_children inserted=%s", len(ids))
    return ids


async def seed_reindeer(child_ids: dict[str, int]) -> int:
    """
    Insert the reindeer team when the table is empty, plus favorite links for
    children seeded in the same run.
    """
    async with db.transaction() as conn:
        if await reindeer_repository.count_reindeer(conn=conn) > 0:
            return 0

        ids: dict[str, int] = {}
        for name in REINDEER_NAMES:
            row = await reindeer_repository.insert_reindeer(name=name, conn=conn)
            ids[name] = int(row["id"])

        links = 0
        for child_name, reindeer_name in FAVORITES:
            if child_name not in child_ids:
                continue
            await reindeer_repository.insert_favorite(
                child_id=child_ids[child_name],
                reindeer_id=ids[reindeer_name],
                conn=conn,
            )
            links += 1

    logger.info("seed_reindeer inserted=%s favorites=%s", len(ids), links)
    return len(ids)


async def seed_admin_user() -> bool:
    """
    Create the account named by SEED_ADMIN_USERNAME / SEED_ADMIN_PASSWORD.

    Both must be set; an existing user with that name is left untouched.
    """
    username = os.environ.get("SEED_ADMIN_USERNAME", "").strip()
    password = os.environ.get("SEED_ADMIN_PASSWORD", "")
    if not username or not password:
        return False

    if await auth_repository.get_user_by_username(username) is not None:
        return False

    await auth_repository.create_user(
        username=username,
        password_hash=security.hash_password(password),
        roles=[security.default_role()],
    )
    logger.info("seed_user username=%s", username)
    return True


async def run() -> None:
    if not seeding_enabled():
        logger.info("seed_skipped reason=disabled")
        return

    child_ids = await seed_children()
    await seed_reindeer(child_ids)
    await seed_admin_user()
