"""
Reindeer business logic.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from core import db

from . import repository, schemas

logger = logging.getLogger(__name__)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reindeer not found.")


async def list_reindeer() -> list[dict]:
    return await repository.list_reindeer()


async def get_reindeer(reindeer_id: int) -> dict:
    reindeer = await repository.get_reindeer(reindeer_id)
    if reindeer is None:
        raise _not_found()
    return reindeer


async def create_reindeer(payload: schemas.ReindeerRequest) -> dict:
    try:
        reindeer = await repository.insert_reindeer(name=payload.name, reindeer_id=payload.id)
    except asyncpg.UniqueViolationError as exc:
        clashing_id = payload.id if payload.id is not None else db.conflicting_id(exc)
        if clashing_id is not None and await repository.reindeer_exists(clashing_id):
            logger.info("reindeer_conflict reindeer_id=%s", clashing_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A reindeer with this id already exists.",
            ) from exc
        raise

    logger.info("reindeer_created reindeer_id=%s", reindeer["id"])
    return reindeer


async def replace_reindeer(reindeer_id: int, payload: schemas.ReindeerRequest) -> None:
    if payload.id != reindeer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path id and body id do not match.",
        )

    if not await repository.update_reindeer(reindeer_id, name=payload.name):
        raise _not_found()
    logger.info("reindeer_replaced reindeer_id=%s", reindeer_id)


async def delete_reindeer(reindeer_id: int) -> dict:
    reindeer = await repository.delete_reindeer(reindeer_id)
    if reindeer is None:
        raise _not_found()
    logger.info("reindeer_deleted reindeer_id=%s", reindeer_id)
    return reindeer
