"""
Child API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Query, Request, Response, status

from core.schema import INT4_MAX, INT4_MIN

from . import schemas, service

router = APIRouter(prefix="/api/child")


def _set_location(request: Request, response: Response, child_id: int) -> None:
    response.headers["Location"] = str(request.url_for("get_child", child_id=child_id))


@router.get("")
async def list_children(
    delivered: str | None = Query(default=None),
    name: str | None = Query(default=None, max_length=200),
) -> list[dict]:
    """
    List children with their toys.

    `delivered=1` or `delivered=0` filters on the delivered flag, `name`
    matches a substring of the child's name.
    """
    return await service.list_children(delivered=delivered, name=name)


@router.get("/{child_id}", name="get_child")
async def get_child(child_id: int = Path(ge=INT4_MIN, le=INT4_MAX)) -> dict:
    return await service.get_child(child_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_child(
    payload: schemas.ChildRequest,
    request: Request,
    response: Response,
) -> dict:
    child = await service.create_child(payload)
    _set_location(request, response, int(child["id"]))
    return child


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_child_with_toy(
    payload: schemas.ChildToyRequest,
    request: Request,
    response: Response,
) -> dict:
    """
    Create a child and a first toy for it in one step.
    """
    child = await service.create_child_with_toy(payload)
    _set_location(request, response, int(child["id"]))
    return child


@router.put("/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
async def replace_child(
    payload: schemas.ChildRequest,
    child_id: int = Path(ge=INT4_MIN, le=INT4_MAX),
) -> Response:
    await service.replace_child(child_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{child_id}")
async def delete_child(child_id: int = Path(ge=INT4_MIN, le=INT4_MAX)) -> dict:
    return await service.delete_child(child_id)
