"""
Token business logic: issue, identify, refresh.
"""

from __future__ import annotations

import logging
import os

from fastapi import HTTPException, status

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


def require_registered_user() -> bool:
    return _env_flag("AUTH_REQUIRE_REGISTERED_USER", False)


def _bad_credentials() -> HTTPException:
    # One message for every rejection so callers cannot tell which part failed.
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid username or password.",
    )


def _token_response(*, username: str, roles: list[str]) -> schemas.TokenResponse:
    return schemas.TokenResponse(
        access_token=security.build_access_token(username=username, roles=roles),
        expires_in=security.access_token_lifetime_s(),
    )


async def issue(username: str | None, password: str | None) -> schemas.TokenResponse:
    # The same normalized name is looked up and signed into the token.
    username = repository.normalize_username(username or "")
    if not security.is_acceptable_credential_pair(username, password):
        logger.info("token_rejected reason=structural")
        raise _bad_credentials()

    user_row = await repository.get_user_by_username(username)
    if user_row is not None:
        if not security.verify_password(password or "", str(user_row.get("password_hash") or "")):
            logger.info("token_rejected reason=password username=%s", username)
            raise _bad_credentials()
        roles = [str(r) for r in (user_row.get("roles") or [])] or [security.default_role()]
    elif require_registered_user():
        logger.info("token_rejected reason=unknown_user username=%s", username)
        raise _bad_credentials()
    else:
        roles = [security.default_role()]

    logger.info("token_issued username=%s roles=%s", username, ",".join(roles))
    return _token_response(username=username, roles=roles)


def identity_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    return {
        "username": str(payload["sub"]),
        "roles": security.roles_from_claims(payload),
    }


def refresh(identity: dict) -> schemas.TokenResponse:
    username = str(identity["username"])
    roles = list(identity.get("roles") or []) or [security.default_role()]
    logger.info("token_refreshed username=%s", username)
    return _token_response(username=username, roles=roles)


def me(identity: dict) -> schemas.CurrentUserResponse:
    return schemas.CurrentUserResponse(username=str(identity["username"]))
