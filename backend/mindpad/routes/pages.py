"""
MindPad Backend — Page Routes
==============================

What:  The three navigable entry points: landing (/), sign-in (/auth) and the
       workspace (/app).
How:   Session presence is read from the bearer header or the
       `access_token` cookie. Pages answer with JSON documents; rendering is
       the client's business.

Routing rules:
    /      with a session    → 307 /app
    /app   without a session → 307 /auth
    anything else            → served as-is
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from mindpad.config import settings
from mindpad.database import get_db_session
from mindpad.dependencies import SESSION_COOKIE, get_optional_user
from mindpad.schemas.auth import AuthenticatedUser, UserResponse
from mindpad.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

APP_PATH = "/app"

FEATURES = [
    {
        "name": "Rich Text Editor",
        "description": "Write freely with a clean, distraction-free Notion-style editor",
    },
    {
        "name": "AI Assistant",
        "description": "Summarize, rewrite, and generate ideas with powerful AI tools",
    },
    {
        "name": "Real-time Sync",
        "description": "Access your notes anywhere with automatic cloud synchronization",
    },
]


@router.get("/", summary="Landing page", response_model=None)
async def landing(user: Optional[AuthenticatedUser] = Depends(get_optional_user)):
    if user is not None:
        return RedirectResponse(url=APP_PATH, status_code=307)
    return {
        "name": "MindPad",
        "headline": "Smart Notes, AI-Powered",
        "description": (
            "Write, organize, and enhance your notes with AI. MindPad helps you think "
            "better with intelligent summarization, rewriting, and idea generation."
        ),
        "features": FEATURES,
        "get_started": settings.auth_entry_path,
    }


@router.get("/auth", summary="Sign-in entry point")
async def auth_entry() -> dict:
    return {
        "title": "Sign in to MindPad",
        "message": (
            "Sign in with the authentication service, then send the session token as "
            f"'Authorization: Bearer <token>' or in the '{SESSION_COOKIE}' cookie."
        ),
        "next": APP_PATH,
    }


@router.get(
    "/app",
    summary="Workspace bootstrap",
    description="The signed-in user and their notes. Redirects to /auth without a session.",
    response_model=None,
)
async def workspace(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return RedirectResponse(url=settings.auth_entry_path, status_code=307)

    notes = await note_service.list_notes(db=db, user_id=user.id)
    return {
        "user": UserResponse(id=user.id, email=user.email).model_dump(mode="json"),
        "notes": [note.model_dump(mode="json") for note in notes],
    }
