"""
MindPad Backend — AI History SQLAlchemy Model
==============================================

What:  ORM model for the `ai_history` table: one row per successful AI call.
Who:   Written by AssistantService, read by NoteService.list_history.

Rows are insert-only. `prompt` holds the action name that produced the row
and doubles as its display label. Deleting the parent note removes its rows
through the `ON DELETE CASCADE` foreign key; application code never deletes
history directly.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from mindpad.database import Base
from mindpad.models.note import utcnow


class AIHistory(Base):
    """An immutable record of one AI invocation against a note."""

    __tablename__ = "ai_history"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        comment="Note the response was generated from",
    )

    prompt: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Action name (summarize, rewrite_formal, ...)",
    )

    ai_response: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Generated text returned by the gateway",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_ai_history_note_created_at", note_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<AIHistory(id={self.id}, note_id={self.note_id}, prompt='{self.prompt}')>"
