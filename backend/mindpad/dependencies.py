"""
MindPad Backend — Request Dependencies
=======================================

What:  FastAPI dependencies that resolve the caller of a request.
How:   The bearer token from `Authorization` is validated by AuthService.
       Page routes also accept the `access_token` cookie, so a browser
       navigating to /app can be recognised without script-set headers.

    get_current_user   → AuthenticatedUser or AuthenticationError (401)
    get_optional_user  → AuthenticatedUser or None
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param

from mindpad.exceptions import AuthenticationError
from mindpad.schemas.auth import AuthenticatedUser
from mindpad.services.auth_service import auth_service

logger = logging.getLogger(__name__)

SESSION_COOKIE = "access_token"


def bearer_token(request: Request) -> Optional[str]:
    """The token of an `Authorization: Bearer ...` header, if any."""
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None
    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token:
        return None
    return token


async def get_current_user(request: Request) -> AuthenticatedUser:
    token = bearer_token(request)
    if token is None:
        raise AuthenticationError(message="No authorization header")
    return auth_service.validate_token(token)


async def get_optional_user(request: Request) -> Optional[AuthenticatedUser]:
    """Session from the bearer header or the session cookie; None if absent or invalid."""
    token = bearer_token(request) or request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    try:
        return auth_service.validate_token(token)
    except AuthenticationError as e:
        logger.debug("Ignoring unusable session: %s", e.message)
        return None
