"""
MindPad Backend — Note SQLAlchemy Model
========================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key generated in Python (works on PostgreSQL and SQLite)
    - user_id: owner; every query filters on it
    - title: never empty, "Untitled" stands in for a blank title
    - content: free text, may be empty
    - created_at / updated_at: UTC, timezone-aware

    Index on (user_id, updated_at DESC) serves the only list query:
    "this user's notes, most recently edited first".
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from mindpad.database import Base

DEFAULT_TITLE = "Untitled"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A user's text note.

    Lifecycle:
        1. Created blank ("Untitled", "") on explicit user action
        2. Updated by the editor's debounced autosave
        3. Deleted explicitly; its AI history goes with it (FK cascade)
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        comment="Owning user (auth subject)",
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_TITLE,
        server_default=text("'Untitled'"),
        comment="Note title; 'Untitled' when left blank",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
        comment="Note body",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was last saved (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_user_updated_at", user_id, updated_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, user_id={self.user_id}, "
            f"title='{self.title}', updated_at='{self.updated_at}')>"
        )
