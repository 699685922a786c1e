"""
MindPad Client — HTTP API Client
=================================

What:  Async client for the MindPad service: the notes store, the AI proxy,
       session introspection and the realtime change stream.
How:   One httpx.AsyncClient per MindPadClient. Every non-2xx answer is
       raised as ApiError carrying the server's message, so view-models can
       put it in a toast verbatim. Nothing is retried.

Example:
    async with MindPadClient(token=session.access_token) as client:
        notes = await client.list_notes()
        async for event in client.subscribe_notes():
            ...
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Union
from uuid import UUID

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mindpad.client.config import client_settings
from mindpad.schemas.auth import UserResponse
from mindpad.schemas.note import AIHistoryItem, NoteResponse
from mindpad.schemas.realtime import ChangeEvent

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    A request the service refused or could not be sent.

    Attributes:
        status_code: HTTP status, or 0 when no response was received
        message:     Server-provided message suitable for display
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class ReadyEvent(BaseModel):
    """First frame of the realtime stream: the feed's sequence number at subscribe time."""
    seq: int


FeedEvent = Union[ReadyEvent, ChangeEvent]


def error_message(response: httpx.Response) -> str:
    """
    Pull a displayable message out of an error response.

    Store errors carry {"message"}, proxy errors {"error"}, FastAPI
    validation errors {"detail"}.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return response.text or f"HTTP {response.status_code}"


class MindPadClient:
    """
    Args:
        base_url:  Service URL (default: MINDPAD_API_URL)
        token:     Bearer session token; can be changed later with set_token()
        transport: Optional httpx transport (ASGITransport / MockTransport in tests)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or client_settings.api_url).rstrip("/")
        self.token = token
        self._http = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def __aenter__(self) -> "MindPadClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, str(e))
            raise ApiError(0, f"Network error: {e}") from e

        if not response.is_success:
            message = error_message(response)
            logger.debug("%s %s → %d %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response

    # ── Session ───────────────────────────────────────────────────────────

    async def get_user(self) -> UserResponse:
        response = await self._request("GET", "/auth/user")
        return UserResponse.model_validate(response.json())

    # ── Notes ─────────────────────────────────────────────────────────────

    async def list_notes(self) -> List[NoteResponse]:
        response = await self._request("GET", "/api/notes")
        return [NoteResponse.model_validate(item) for item in response.json()]

    async def create_note(
        self,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> NoteResponse:
        body = {key: value for key, value in (("title", title), ("content", content)) if value is not None}
        response = await self._request("POST", "/api/notes", json=body)
        return NoteResponse.model_validate(response.json())

    async def get_note(self, note_id: UUID) -> NoteResponse:
        response = await self._request("GET", f"/api/notes/{note_id}")
        return NoteResponse.model_validate(response.json())

    async def update_note(
        self,
        note_id: UUID,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> NoteResponse:
        body = {key: value for key, value in (("title", title), ("content", content)) if value is not None}
        response = await self._request("PATCH", f"/api/notes/{note_id}", json=body)
        return NoteResponse.model_validate(response.json())

    async def delete_note(self, note_id: UUID) -> None:
        await self._request("DELETE", f"/api/notes/{note_id}")

    async def list_history(self, note_id: UUID) -> List[AIHistoryItem]:
        response = await self._request("GET", f"/api/notes/{note_id}/history")
        return [AIHistoryItem.model_validate(item) for item in response.json()]

    # ── AI proxy ──────────────────────────────────────────────────────────

    async def run_assistant(self, action: str, content: str, note_id: Optional[UUID]) -> str:
        """Invoke the AI proxy; returns the generated text."""
        payload = {
            "action": action,
            "content": content,
            "noteId": str(note_id) if note_id is not None else None,
        }
        response = await self._request("POST", "/functions/ai-assistant", json=payload)
        return response.json()["response"]

    # ── Realtime ──────────────────────────────────────────────────────────

    async def subscribe_notes(self) -> AsyncIterator[FeedEvent]:
        """
        Stream the caller's note changes.

        Yields a ReadyEvent first, then ChangeEvents until the server closes
        the stream or the caller stops iterating.
        """
        headers = {**self._headers(), "Accept": "text/event-stream"}
        try:
            async with self._http.stream("GET", "/realtime/notes", headers=headers, timeout=None) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise ApiError(response.status_code, error_message(response))

                event_name = "message"
                data_lines: List[str] = []
                async for line in response.aiter_lines():
                    if not line:
                        event = self._decode_feed_event(event_name, data_lines)
                        event_name, data_lines = "message", []
                        if event is not None:
                            yield event
                        continue
                    if line.startswith(":"):
                        # keep-alive comment
                        continue
                    field, _, value = line.partition(":")
                    if value.startswith(" "):
                        value = value[1:]
                    if field == "event":
                        event_name = value
                    elif field == "data":
                        data_lines.append(value)

                event = self._decode_feed_event(event_name, data_lines)
                if event is not None:
                    yield event
        except httpx.RequestError as e:
            raise ApiError(0, f"Network error: {e}") from e

    @staticmethod
    def _decode_feed_event(event_name: str, data_lines: List[str]) -> Optional[FeedEvent]:
        if not data_lines:
            return None
        data = "\n".join(data_lines)
        try:
            if event_name == "ready":
                return ReadyEvent.model_validate_json(data)
            if event_name == "change":
                return ChangeEvent.model_validate_json(data)
        except PydanticValidationError as e:
            logger.warning("Failed to parse realtime %s event: %s", event_name, e)
            return None
        logger.debug("Ignoring realtime event %r", event_name)
        return None
