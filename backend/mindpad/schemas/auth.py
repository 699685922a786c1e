"""MindPad Backend — Session/User Schemas."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """Claims MindPad reads from a session token."""
    sub: str = Field(description="User id (UUID string)")
    email: Optional[str] = None
    exp: int
    iat: Optional[int] = None
    aud: Optional[str] = None


class AuthenticatedUser(BaseModel):
    """The caller of a request, resolved from its bearer session."""
    id: uuid.UUID
    email: Optional[str] = None


class UserResponse(BaseModel):
    """Body of GET /auth/user."""
    id: uuid.UUID
    email: Optional[str] = None
