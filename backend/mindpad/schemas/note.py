"""
MindPad Backend — Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the note API contract between client and service.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate the OpenAPI document.
Who:   Used by route handlers and by `mindpad.client` when decoding responses.

Schemas are kept separate from the SQLAlchemy models: the API never exposes
columns it does not list here.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    Body of POST /api/notes.

    Both fields are optional; an empty request creates an "Untitled" note
    with an empty body.
    """
    title: Optional[str] = Field(default=None, description="Initial title (blank → 'Untitled')")
    content: Optional[str] = Field(default=None, description="Initial body text")


class NoteUpdate(BaseModel):
    """
    Body of PATCH /api/notes/{id}.

    Omitted fields are left untouched. A blank title is stored as "Untitled".
    """
    title: Optional[str] = Field(default=None, description="New title")
    content: Optional[str] = Field(default=None, description="New body text")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Full representation of a note, as listed and as edited."""
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    user_id: uuid.UUID = Field(description="Owning user")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last update timestamp (UTC)")

    model_config = {"from_attributes": True}


class AIHistoryItem(BaseModel):
    """One past AI interaction for a note, shown newest first."""
    id: uuid.UUID
    note_id: uuid.UUID
    prompt: str = Field(description="Action name that produced this entry")
    ai_response: str = Field(description="Generated text")
    created_at: datetime

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for the store API.

    Example:
        {
            "error": "not_found",
            "message": "note with ID '...' was not found",
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gateway: str = Field(description="AI gateway: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
