"""Create notes and ai_history tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  The two MindPad tables: `notes` (one row per user note) and
       `ai_history` (one row per successful AI action on a note).
How:   UUID keys are generated by the application; ai_history.note_id
       cascades on delete so removing a note removes its AI history.

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Unique identifier"),
        sa.Column("user_id", sa.Uuid(), nullable=False, comment="Owning user (auth subject)"),
        sa.Column(
            "title",
            sa.Text(),
            nullable=False,
            server_default=sa.text("'Untitled'"),
            comment="Note title; 'Untitled' when left blank",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Note body",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When this note was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When this note was last saved (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Serves the only list query: a user's notes, most recently edited first.
    op.create_index(
        "idx_notes_user_updated_at",
        "notes",
        ["user_id", sa.text("updated_at DESC")],
    )

    op.create_table(
        "ai_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("note_id", sa.Uuid(), nullable=False, comment="Note the response was generated from"),
        sa.Column(
            "prompt",
            sa.String(50),
            nullable=False,
            comment="Action name (summarize, rewrite_formal, ...)",
        ),
        sa.Column(
            "ai_response",
            sa.Text(),
            nullable=False,
            comment="Generated text returned by the gateway",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_ai_history_note_created_at",
        "ai_history",
        ["note_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_ai_history_note_created_at", table_name="ai_history")
    op.drop_table("ai_history")
    op.drop_index("idx_notes_user_updated_at", table_name="notes")
    op.drop_table("notes")
