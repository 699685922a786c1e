"""
MindPad Backend — Notes Route Handlers
=======================================

What:  The store API for notes and their AI history.
How:   Resolves the caller from the bearer session, delegates to NoteService,
       returns JSON.
Who:   mindpad.client (sidebar, editor, AI panel).

Every route is scoped to the caller: a note id that belongs to another user
answers 404, exactly like an unknown id.

Caching:
    Notes change on every autosave, so responses are `Cache-Control: no-store`.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from mindpad.database import get_db_session
from mindpad.dependencies import get_current_user
from mindpad.schemas.auth import AuthenticatedUser
from mindpad.schemas.note import (
    AIHistoryItem,
    ErrorResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from mindpad.services.note_service import note_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Notes"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid session", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={200: {"description": "The caller's notes, newest edit first"}, **_AUTH_ERRORS},
    summary="List notes",
    description="Returns every note of the caller ordered by updated_at descending.",
)
async def list_notes(
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    notes = await note_service.list_notes(db=db, user_id=user.id)
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Total-Count"] = str(len(notes))
    return notes


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteResponse,
    responses={201: {"description": "Note created"}, **_AUTH_ERRORS},
    summary="Create a note",
    description=(
        "Creates a note owned by the caller. With an empty body the note is "
        "titled 'Untitled' and has no content."
    ),
)
async def create_note(
    data: Optional[NoteCreate] = Body(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.create_note(db=db, user_id=user.id, data=data)


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={**_NOT_FOUND, **_AUTH_ERRORS},
    summary="Get a single note",
)
async def get_note(
    note_id: UUID,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    """
    The editor loads title and content from here; the AI panel reads the
    persisted content from here before calling the proxy.

    Invalid UUIDs return 422 (FastAPI path validation).
    """
    note = await note_service.get_note(db=db, user_id=user.id, note_id=note_id)
    response.headers["Cache-Control"] = "no-store"
    return note


@router.patch(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={**_NOT_FOUND, **_AUTH_ERRORS},
    summary="Update a note",
    description=(
        "Partial update of title and/or content. Bumps updated_at. "
        "No version check: the last write wins."
    ),
)
async def update_note(
    note_id: UUID,
    data: NoteUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.update_note(db=db, user_id=user.id, note_id=note_id, data=data)


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    responses={204: {"description": "Note and its AI history deleted"}, **_NOT_FOUND, **_AUTH_ERRORS},
    summary="Delete a note",
)
async def delete_note(
    note_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db=db, user_id=user.id, note_id=note_id)
    return Response(status_code=204)


@router.get(
    "/notes/{note_id}/history",
    response_model=List[AIHistoryItem],
    responses={**_NOT_FOUND, **_AUTH_ERRORS},
    summary="AI history of a note",
    description="Past AI results for the note, newest first.",
)
async def list_history(
    note_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[AIHistoryItem]:
    return await note_service.list_history(db=db, user_id=user.id, note_id=note_id)
