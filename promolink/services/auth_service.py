from __future__ import annotations

import logging

from promolink.core.config import Settings
from promolink.core.exceptions import ApiException
from promolink.core.security import create_access_token, verify_admin_credentials
from promolink.schemas.auth import LoginTokenData

logger = logging.getLogger(__name__)


def login_user(settings: Settings, *, username: str, password: str) -> LoginTokenData:
    if not verify_admin_credentials(settings, username, password):
        logger.info("Rejected login attempt")
        raise ApiException(status_code=401, code="invalid_credentials", message="Invalid credentials")

    token, expires_in = create_access_token(settings, subject="admin", username=username)
    return LoginTokenData(accessToken=token, expiresIn=expires_in)
