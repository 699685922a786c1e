"""
MindPad Backend — Realtime Change Event Schema
===============================================

One event per committed insert/update/delete on a user's rows. `seq` counts
up by one per (table, user) feed, so a subscriber that sees a jump knows it
missed something and must reload.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from mindpad.schemas.note import NoteResponse

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]


class ChangeEvent(BaseModel):
    seq: int = Field(description="Per-feed sequence number, starting at 1")
    table: str = Field(description="Table the change happened on")
    event_type: ChangeType
    record_id: uuid.UUID = Field(description="Primary key of the changed row")
    record: Optional[NoteResponse] = Field(
        default=None,
        description="New row state for INSERT/UPDATE; null for DELETE",
    )
    commit_timestamp: datetime
