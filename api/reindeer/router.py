"""
Reindeer API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Request, Response, status

from core.schema import INT4_MAX, INT4_MIN

from . import schemas, service

router = APIRouter(prefix="/api/reindeer")


@router.get("")
async def list_reindeer() -> list[dict]:
    """
    Every reindeer with the children who picked it as a favorite.
    """
    return await service.list_reindeer()


@router.get("/{reindeer_id}", name="get_reindeer")
async def get_reindeer(reindeer_id: int = Path(ge=INT4_MIN, le=INT4_MAX)) -> dict:
    return await service.get_reindeer(reindeer_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reindeer(
    payload: schemas.ReindeerRequest,
    request: Request,
    response: Response,
) -> dict:
    reindeer = await service.create_reindeer(payload)
    response.headers["Location"] = str(request.url_for("get_reindeer", reindeer_id=int(reindeer["id"])))
    return reindeer


@router.put("/{reindeer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def replace_reindeer(
    payload: schemas.ReindeerRequest,
    reindeer_id: int = Path(ge=INT4_MIN, le=INT4_MAX),
) -> Response:
    await service.replace_reindeer(reindeer_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{reindeer_id}")
async def delete_reindeer(reindeer_id: int = Path(ge=INT4_MIN, le=INT4_MAX)) -> dict:
    return await service.delete_reindeer(reindeer_id)
