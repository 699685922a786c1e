"""
MindPad Backend — Session Token Service
========================================

What:  Validates bearer sessions and resolves them to an AuthenticatedUser.
How:   Sessions are HS256 JWTs (PyJWT). `sub` carries the user UUID, `email`
       is optional, `aud` is checked when JWT_AUDIENCE is non-empty.
Who:   FastAPI dependencies in mindpad.dependencies; tests and local tooling
       use create_access_token() to mint sessions.

MindPad never signs users in itself; tokens are issued by the auth service
that shares JWT_SECRET_KEY.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from mindpad.config import settings
from mindpad.exceptions import AuthenticationError
from mindpad.schemas.auth import AuthenticatedUser, TokenPayload

logger = logging.getLogger(__name__)


class AuthService:
    """Issue and validate session tokens."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        audience: Optional[str] = None,
        token_ttl_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.jwt_secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.audience = audience if audience is not None else settings.jwt_audience
        self.token_ttl_minutes = token_ttl_minutes or settings.access_token_ttl_minutes

    def _require_secret(self) -> str:
        if not self.secret_key:
            logger.error("JWT_SECRET_KEY is not configured; rejecting session")
            raise AuthenticationError(
                message="Authentication is not configured",
                context={"reason": "missing_jwt_secret"},
            )
        return self.secret_key

    def create_access_token(
        self,
        user_id: uuid.UUID,
        email: Optional[str] = None,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        """Mint a session token for `user_id`."""
        now = datetime.now(timezone.utc)
        expires_at = now + (expires_in or timedelta(minutes=self.token_ttl_minutes))
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        if email:
            payload["email"] = email
        if self.audience:
            payload["aud"] = self.audience
        return jwt.encode(payload, self._require_secret(), algorithm=self.algorithm)

    def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Decode and verify a session token.

        Raises:
            AuthenticationError: missing secret, expired, malformed, bad
                signature, wrong audience, or a `sub` that is not a UUID.
        """
        secret = self._require_secret()
        options = {"require": ["exp", "sub"]}
        if not self.audience:
            options["verify_aud"] = False

        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=self.audience or None,
                options=options,
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError(message="Session expired") from exc
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected session token: %s", type(exc).__name__)
            raise AuthenticationError(
                message="Invalid session token",
                context={"error_type": type(exc).__name__},
            ) from exc

        try:
            payload = TokenPayload(**decoded)
            user_id = uuid.UUID(payload.sub)
        except (PydanticValidationError, ValueError) as exc:
            raise AuthenticationError(message="Invalid session token") from exc

        return AuthenticatedUser(id=user_id, email=payload.email)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
