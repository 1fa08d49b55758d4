"""
Child business logic.

Persistence failures are mapped here:
- lookup misses -> 404
- uniqueness violations -> 409 when the clashing id exists, re-raised otherwise
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from core import db

from . import repository, schemas

logger = logging.getLogger(__name__)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Child not found.")


def parse_delivered_filter(raw: str | None) -> int | None:
    """
    Only the literal strings "1" and "0" filter; anything else lists every child.
    """
    if raw == "1":
        return 1
    if raw == "0":
        return 0
    return None


async def list_children(*, delivered: str | None = None, name: str | None = None) -> list[dict]:
    return await repository.list_children(
        delivered=parse_delivered_filter(delivered),
        name=name,
    )


async def get_child(child_id: int) -> dict:
    child = await repository.get_child(child_id)
    if child is None:
        raise _not_found()
    return child


async def _raise_conflict_if_exists(child_id: int | None, exc: asyncpg.UniqueViolationError) -> None:
    if child_id is not None and await repository.child_exists(child_id):
        logger.info("child_conflict child_id=%s", child_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A child with this id already exists.",
        ) from exc


async def create_child(payload: schemas.ChildRequest) -> dict:
    try:
        child = await repository.insert_child(
            name=payload.name,
            delivered=payload.delivered,
            child_id=payload.id,
        )
    except asyncpg.UniqueViolationError as exc:
        # Without an explicit id the clash comes from the generated identity.
        clashing_id = payload.id if payload.id is not None else db.conflicting_id(exc)
        await _raise_conflict_if_exists(clashing_id, exc)
        raise

    logger.info("child_created child_id=%s", child["id"])
    return child


async def create_child_with_toy(payload: schemas.ChildToyRequest) -> dict:
    try:
        child = await repository.insert_child_with_toy(
            child_name=payload.child_name,
            toy_name=payload.toy_name,
        )
    except asyncpg.UniqueViolationError as exc:
        # A generated id can clash with a row inserted earlier under an explicit id.
        await _raise_conflict_if_exists(db.conflicting_id(exc), exc)
        raise

    logger.info("child_created child_id=%s toy_count=%s", child["id"], len(child["toys"]))
    return child


async def replace_child(child_id: int, payload: schemas.ChildRequest) -> None:
    if payload.id != child_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path id and body id do not match.",
        )

    updated = await repository.update_child(child_id, name=payload.name, delivered=payload.delivered)
    if not updated:
        raise _not_found()
    logger.info("child_replaced child_id=%s", child_id)


async def delete_child(child_id: int) -> dict:
    child = await repository.delete_child(child_id)
    if child is None:
        raise _not_found()
    logger.info("child_deleted child_id=%s toy_count=%s", child_id, len(child.get("toys") or []))
    return child
