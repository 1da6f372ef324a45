from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID, uuid4

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from userhub.core.config import settings
from userhub.core.errors import TokenExpired, TokenInvalid

ACCESS = "access"
REFRESH = "refresh"

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"


# ---- 공통 ----
def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _secret_for(kind: str) -> str:
    if kind == ACCESS:
        return settings.jwt_access_secret
    if kind == REFRESH:
        return settings.jwt_refresh_secret
    raise ValueError(f"unknown token kind: {kind}")


def _make_jwt(payload: Dict[str, Any], kind: str, lifetime: timedelta) -> str:
    now = _utcnow()
    to_encode = payload.copy()
    to_encode["typ"] = kind
    to_encode["jti"] = str(uuid4())
    to_encode["iat"] = int(now.timestamp())
    to_encode["exp"] = int((now + lifetime).timestamp())
    return jwt.encode(to_encode, _secret_for(kind), algorithm=settings.jwt_algorithm)


# ---- Access Token ----
def create_access_token(sub: UUID | str, claims: Dict[str, Any] | None = None) -> str:
    payload: Dict[str, Any] = {}
    if claims:
        payload.update(claims)
    payload["sub"] = str(sub)
    return _make_jwt(payload, ACCESS, timedelta(minutes=settings.access_token_expire_minutes))


# ---- Refresh Token (회전 전제) ----
def create_refresh_token(sub: UUID | str) -> str:
    # refresh token carries only the account id; jti keeps every mint unique
    return _make_jwt({"sub": str(sub)}, REFRESH, timedelta(days=settings.refresh_token_expire_days))


def verify_token(token: str, expected_kind: str) -> Dict[str, Any]:
    """
    Decode a token of the expected kind.
    Raises TokenExpired for an expired signature and TokenInvalid for everything
    else (bad signature, wrong kind, missing subject, garbage input).
    """
    if not token:
        raise TokenInvalid("Unauthorized request")
    try:
        payload = jwt.decode(token, _secret_for(expected_kind), algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpired(f"{expected_kind.capitalize()} token expired")
    except JWTError:
        raise TokenInvalid(f"Invalid {expected_kind} token")

    if payload.get("typ") != expected_kind:
        raise TokenInvalid(f"Invalid {expected_kind} token")
    if not payload.get("sub"):
        raise TokenInvalid(f"Invalid {expected_kind} token payload")
    return payload


def verify_access_token(token: str) -> Dict[str, Any]:
    return verify_token(token, ACCESS)


def verify_refresh_token(token: str) -> Dict[str, Any]:
    return verify_token(token, REFRESH)


# ---- 쿠키 ----
def _cookie_options() -> Dict[str, Any]:
    # no max_age: the browser keeps the cookie, the token's own exp decides validity
    return {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
        "path": "/",
    }


def set_auth_cookies(response, access_token: str, refresh_token: str) -> None:
    options = _cookie_options()
    response.set_cookie(key=ACCESS_COOKIE_NAME, value=access_token, **options)
    response.set_cookie(key=REFRESH_COOKIE_NAME, value=refresh_token, **options)


def clear_auth_cookies(response) -> None:
    options = _cookie_options()
    response.delete_cookie(key=ACCESS_COOKIE_NAME, **options)
    response.delete_cookie(key=REFRESH_COOKIE_NAME, **options)
