"""
Token API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from . import dependencies, schemas, service

router = APIRouter(prefix="/api/token")

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_credentials(request: Request) -> tuple[str | None, str | None]:
    """
    Credentials may come from the query string or a form body; the form wins.
    """
    values = {k: v for k, v in request.query_params.items()}
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        values.update({k: v for k, v in form.items() if isinstance(v, str)})
    return values.get("username"), values.get("password")


@router.post("", response_model=schemas.TokenResponse)
async def create_token(request: Request) -> schemas.TokenResponse:
    username, password = await _read_credentials(request)
    return await service.issue(username, password)


@router.get("", response_model=schemas.CurrentUserResponse)
async def current_user(
    identity: dict = Depends(dependencies.get_current_user),
) -> schemas.CurrentUserResponse:
    return service.me(identity)


@router.put("", response_model=schemas.TokenResponse)
async def refresh_token(
    identity: dict = Depends(dependencies.get_current_user),
) -> schemas.TokenResponse:
    return service.refresh(identity)
