"""
MindPad Backend — Realtime Notes Stream
========================================

What:  GET /realtime/notes, a Server-Sent Events stream of the caller's note
       changes.
How:   Subscribes to the ("notes", user_id) feed for as long as the client
       stays connected. sse-starlette handles framing, keep-alive pings and
       disconnect detection.

Stream:
    event: ready   data: {"seq": <current sequence number>}
    event: change  data: <ChangeEvent JSON>
    ...

A client that sees `seq` jump by more than one after `ready` has missed
events and should reload the list.
"""

import json
import logging

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from mindpad.dependencies import get_current_user
from mindpad.schemas.auth import AuthenticatedUser
from mindpad.schemas.note import ErrorResponse
from mindpad.services.note_service import NOTES_TABLE
from mindpad.services.realtime import change_feed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])


@router.get(
    "/notes",
    responses={
        200: {"description": "text/event-stream of note changes"},
        401: {"description": "Missing or invalid session", "model": ErrorResponse},
    },
    summary="Stream note changes",
    description="INSERT/UPDATE/DELETE events for the caller's notes, as Server-Sent Events.",
)
async def stream_note_changes(
    user: AuthenticatedUser = Depends(get_current_user),
) -> EventSourceResponse:

    async def event_generator():
        async with change_feed.subscribe(NOTES_TABLE, user.id) as subscription:
            yield {"event": "ready", "data": json.dumps({"seq": subscription.start_seq})}
            async for event in subscription:
                yield {"event": "change", "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())
