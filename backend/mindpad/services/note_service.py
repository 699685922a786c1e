"""
MindPad Backend — Note Service (Store Facade)
==============================================

What:  User-scoped CRUD over `notes`, read access to `ai_history`, and change
       publication to the realtime feed.
How:   Every query filters on the caller's user id, so a note owned by
       somebody else behaves exactly like a missing one (404). Writes commit
       and then publish one ChangeEvent on the ("notes", user_id) feed.
Who:   Called by the /api/notes route handlers.

Flow (PATCH /api/notes/{id}):
    ┌──────────┐    ┌──────────────┐    ┌──────────┐    ┌──────────────┐
    │  Route   │───▶│ Load (owner) │───▶│  Commit  │───▶│ Publish      │
    │          │    │ + apply      │    │          │    │ UPDATE event │
    └──────────┘    └──────────────┘    └──────────┘    └──────────────┘

NoteService is stateless: it receives the session for each call and holds
only a reference to the change feed.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mindpad.exceptions import DatabaseError, NotFoundError
from mindpad.models.ai_history import AIHistory
from mindpad.models.note import DEFAULT_TITLE, Note, utcnow
from mindpad.schemas.note import AIHistoryItem, NoteCreate, NoteResponse, NoteUpdate
from mindpad.services.realtime import ChangeFeed, change_feed

logger = logging.getLogger(__name__)

NOTES_TABLE = "notes"


def _aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_title(title: Optional[str]) -> str:
    """Blank or whitespace-only titles become "Untitled"."""
    if title is None or not title.strip():
        return DEFAULT_TITLE
    return title


def to_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        user_id=note.user_id,
        title=note.title,
        content=note.content,
        created_at=_aware(note.created_at),
        updated_at=_aware(note.updated_at),
    )


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        NotFoundError propagates as-is. SQLAlchemy failures are logged with
        their detail and re-raised as DatabaseError with a generic message.
    """

    def __init__(self, feed: Optional[ChangeFeed] = None):
        self.feed = feed or change_feed

    async def _load_owned(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> Note:
        result = await db.execute(
            select(Note).where(Note.id == note_id, Note.user_id == user_id)
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def list_notes(self, db: AsyncSession, user_id: UUID) -> List[NoteResponse]:
        """
        All of the caller's notes, most recently updated first.

        Query plan:
            SELECT * FROM notes WHERE user_id = :uid ORDER BY updated_at DESC
            → idx_notes_user_updated_at
        """
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(desc(Note.updated_at), desc(Note.created_at))
            )
            return [to_response(note) for note in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def create_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: Optional[NoteCreate] = None,
    ) -> NoteResponse:
        """
        Insert a note owned by the caller.

        With no overrides the note is {"title": "Untitled", "content": ""}.
        """
        data = data or NoteCreate()
        now = utcnow()
        note = Note(
            user_id=user_id,
            title=normalize_title(data.title),
            content=data.content or "",
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(note)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the note. Please try again.",
                context={"error_type": type(e).__name__},
            )

        response = to_response(note)
        logger.info("Note created: %s (user=%s)", note.id, user_id)
        self.feed.publish(NOTES_TABLE, user_id, "INSERT", note.id, response)
        return response

    async def get_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> NoteResponse:
        """
        Retrieve one of the caller's notes.

        Raises:
            NotFoundError: absent, or owned by someone else (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            note = await self._load_owned(db, user_id, note_id)
            return to_response(note)
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )

    async def update_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
        data: NoteUpdate,
    ) -> NoteResponse:
        """
        Apply a partial update and bump `updated_at`.

        Fields left out of the body are untouched. There is no version check:
        the last write wins.
        """
        try:
            note = await self._load_owned(db, user_id, note_id)
            if data.title is not None:
                note.title = normalize_title(data.title)
            if data.content is not None:
                note.content = data.content
            # Set explicitly so an unchanged save still counts as an edit.
            note.updated_at = utcnow()
            await db.commit()
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        response = to_response(note)
        logger.debug("Note updated: %s", note_id)
        self.feed.publish(NOTES_TABLE, user_id, "UPDATE", note.id, response)
        return response

    async def delete_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> None:
        """
        Delete one of the caller's notes.

        The note's AI history is removed by the foreign key's ON DELETE
        CASCADE, not by this method.
        """
        try:
            await self._load_owned(db, user_id, note_id)
            await db.execute(
                delete(Note).where(Note.id == note_id, Note.user_id == user_id)
            )
            await db.commit()
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        logger.info("Note deleted: %s (user=%s)", note_id, user_id)
        self.feed.publish(NOTES_TABLE, user_id, "DELETE", note_id, None)

    async def list_history(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
    ) -> List[AIHistoryItem]:
        """AI history of one of the caller's notes, newest first."""
        try:
            await self._load_owned(db, user_id, note_id)
            result = await db.execute(
                select(AIHistory)
                .where(AIHistory.note_id == note_id)
                .order_by(desc(AIHistory.created_at))
            )
            return [
                AIHistoryItem(
                    id=entry.id,
                    note_id=entry.note_id,
                    prompt=entry.prompt,
                    ai_response=entry.ai_response,
                    created_at=_aware(entry.created_at),
                )
                for entry in result.scalars().all()
            ]
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error listing history for %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve AI history. Please try again.",
                context={"note_id": str(note_id)},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
