"""
Token and password primitives.

Access tokens are HS256-signed JWTs carrying:
- sub: username
- role: list of role names
- nbf / iat: issue time (epoch seconds)
- exp: issue time + ACCESS_TOKEN_EXPIRE_HOURS
"""

from __future__ import annotations

import os
import time
from typing import Any

import bcrypt
import jwt

JWT_ALGORITHM = "HS256"


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    secret = os.environ.get("JWT_SECRET", "").strip()
    if not secret:
        raise RuntimeError("JWT_SECRET is not set.")
    return secret


def access_token_expire_hours() -> int:
    return _env_int("ACCESS_TOKEN_EXPIRE_HOURS", 24)


def access_token_lifetime_s() -> int:
    return access_token_expire_hours() * 3600


def clock_skew_s() -> int:
    return _env_int("JWT_CLOCK_SKEW_SECONDS", 300)


def default_role() -> str:
    return os.environ.get("DEFAULT_ROLE", "Administrator").strip() or "Administrator"


def now_epoch_s() -> int:
    return int(time.time())


def is_acceptable_credential_pair(username: str | None, password: str | None) -> bool:
    """
    Structural check applied before any lookup: a username is required and it
    may not double as the password.
    """
    return bool(username) and username != password


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(*, username: str, roles: list[str], issued_at: int | None = None) -> str:
    issued_at = now_epoch_s() if issued_at is None else issued_at
    payload = {
        "sub": username,
        "role": list(roles),
        "nbf": issued_at,
        "iat": issued_at,
        "exp": issued_at + access_token_lifetime_s(),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and lifetime (with clock-skew leeway) and return claims.

    Issuer and audience are not checked.
    """
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[JWT_ALGORITHM],
            leeway=clock_skew_s(),
            options={"require": ["sub", "exp"], "verify_aud": False, "verify_iss": False},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token is expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    if not str(payload.get("sub") or "").strip():
        raise AuthSecurityError("Access token has no subject.")
    return payload


def roles_from_claims(payload: dict[str, Any]) -> list[str]:
    role = payload.get("role")
    if isinstance(role, str):
        return [role]
    if isinstance(role, list):
        return [str(r) for r in role]
    return []
