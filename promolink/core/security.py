from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from promolink.core.config import Settings
from promolink.core.context import get_request_settings
from promolink.core.exceptions import ApiException

bearer_scheme = HTTPBearer(auto_error=False)


def verify_admin_credentials(settings: Settings, username: str, password: str) -> bool:
    username_ok = secrets.compare_digest(username.encode("utf-8"), settings.admin_username.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), settings.admin_password.encode("utf-8"))
    return username_ok and password_ok


def create_access_token(settings: Settings, *, subject: str, username: str) -> tuple[str, int]:
    now = datetime.now(UTC)
    expire_at = now + timedelta(seconds=settings.jwt_access_token_expires_seconds)
    claims = {
        "sub": subject,
        "username": username,
        "iss": settings.jwt_issuer,
        "iat": int(now.timestamp()),
        "exp": int(expire_at.timestamp()),
    }
    token = jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, settings.jwt_access_token_expires_seconds


def decode_access_token(settings: Settings, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError as exc:
        raise ApiException(status_code=401, code="token_expired", message="Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise ApiException(status_code=401, code="invalid_token", message="Invalid token") from exc


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_request_settings),
) -> dict[str, Any]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise ApiException(status_code=401, code="unauthorized", message="Missing bearer token")
    return decode_access_token(settings, credentials.credentials)
