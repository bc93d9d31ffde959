from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import get_settings

logger = logging.getLogger(__name__)

_security = HTTPBasic(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


# PUBLIC_INTERFACE
async def require_basic_auth(creds: Optional[HTTPBasicCredentials] = Depends(_security)) -> None:
    """
    Enforce HTTP Basic Auth on the task manager routes when ENABLE_BASIC_AUTH is set.

    Settings are read per request so the switch can be flipped without rebuilding
    the app. When auth is disabled this dependency does nothing.

    Raises:
        HTTPException(401) if credentials are missing, unconfigured or wrong.
    """
    settings = get_settings()
    if not settings.enable_basic_auth:
        return None

    if creds is None:
        raise _unauthorized("Not authenticated")

    expected_user = settings.basic_auth_username
    expected_pass = settings.basic_auth_password
    if expected_user is None or expected_pass is None:
        # Auth enabled but username/password not provided
        logger.error("Basic auth is enabled but BASIC_AUTH_USERNAME/BASIC_AUTH_PASSWORD are not set")
        raise _unauthorized("Server authentication not configured")

    user_ok = secrets.compare_digest(creds.username.encode("utf-8"), expected_user.encode("utf-8"))
    pass_ok = secrets.compare_digest(creds.password.encode("utf-8"), expected_pass.encode("utf-8"))
    if not (user_ok and pass_ok):
        logger.info("Rejected basic auth attempt for user %r", creds.username)
        raise _unauthorized("Invalid authentication credentials")
    return None
