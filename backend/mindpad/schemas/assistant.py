"""
MindPad Backend — AI Proxy Schemas
===================================

Wire contract of POST /functions/ai-assistant:

    request   {"action": "...", "content": "...", "noteId": "<uuid>"}
    200       {"response": "<generated text>"}
    401/402/429/500  {"error": "<message>"}

`action` accepts any JSON value (or none at all) so that a missing, null,
non-string or unknown action reaches the service and fails with the proxy's
own "Invalid action" error instead of a schema error.
"""

import uuid
from typing import Any, Optional

from pydantic import BaseModel, Field


class AssistantRequest(BaseModel):
    action: Any = Field(
        default=None,
        description="summarize | rewrite_formal | rewrite_concise | generate_ideas",
    )
    content: str = Field(default="", description="Note content to send to the model")
    note_id: Optional[uuid.UUID] = Field(
        default=None,
        alias="noteId",
        description="Note the generated text is recorded against",
    )

    model_config = {"populate_by_name": True}


class AssistantResponse(BaseModel):
    response: str = Field(description="Text generated by the AI gateway")


class AssistantErrorResponse(BaseModel):
    error: str = Field(description="Message suitable for showing to the user verbatim")
