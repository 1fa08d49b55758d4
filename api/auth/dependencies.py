"""
Bearer-token dependencies for protected routes.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import service

# auto_error is off so every failure is a 401 carrying the Bearer challenge.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials.strip()


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict:
    return service.identity_from_access_token(access_token)
