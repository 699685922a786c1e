"""
MindPad Client — Note Sidebar
==============================

What:  The note list: load, search, create, and keep it current from the
       realtime feed.
How:   The list is loaded once, then patched in place from change events.
       Each event's `seq` must follow the previous one; a gap (a dropped
       event, a reconnect) or an event that cannot be applied falls back to
       a full reload.

Realtime flow:
    ready(seq=n)            → remember n, reload the list
    change(seq=n+1, INSERT) → insert, keep updated_at descending
    change(seq=n+2, UPDATE) → replace in place, re-sort
    change(seq=n+3, DELETE) → remove
    change(seq=n+5, ...)    → gap: reload, continue from n+5

Search is purely local: case-insensitive substring on title or content.
"""

import asyncio
import logging
from typing import Callable, List, Optional
from uuid import UUID

from mindpad.client.api import ApiError, FeedEvent, MindPadClient, ReadyEvent
from mindpad.client.notifications import Notifier
from mindpad.schemas.note import NoteResponse
from mindpad.schemas.realtime import ChangeEvent

logger = logging.getLogger(__name__)


class NoteSidebar:
    """
    Args:
        client:    API client carrying the session
        notifier:  Toast sink for failed user actions
        on_select: Called with the id of a note to open (e.g. after create)
    """

    def __init__(
        self,
        client: MindPadClient,
        notifier: Optional[Notifier] = None,
        on_select: Optional[Callable[[UUID], None]] = None,
    ):
        self.client = client
        self.notifier = notifier or Notifier()
        self.on_select = on_select
        self.notes: List[NoteResponse] = []
        self.query = ""
        self.loading = True
        self.selected_id: Optional[UUID] = None
        self._last_seq: Optional[int] = None
        self._task: Optional[asyncio.Task] = None
        # True between the feed's ready frame and the end of the stream.
        self.live = False

    # ── Listing ───────────────────────────────────────────────────────────

    async def refresh(self) -> List[NoteResponse]:
        """Reload the list. On failure the current list is kept."""
        try:
            notes = await self.client.list_notes()
        except ApiError as e:
            logger.warning("Could not load notes: %s", e.message)
            self.loading = False
            return self.notes
        self.notes = notes
        self.loading = False
        return notes

    def set_query(self, query: str) -> List[NoteResponse]:
        self.query = query
        return self.filtered

    @property
    def filtered(self) -> List[NoteResponse]:
        if not self.query:
            return list(self.notes)
        needle = self.query.lower()
        return [
            note
            for note in self.notes
            if needle in note.title.lower() or needle in note.content.lower()
        ]

    @property
    def empty_message(self) -> Optional[str]:
        if self.loading:
            return "Loading notes..."
        if self.filtered:
            return None
        return "No notes found" if self.query else "No notes yet"

    # ── Actions ───────────────────────────────────────────────────────────

    def select(self, note_id: Optional[UUID]) -> None:
        self.selected_id = note_id
        if note_id is not None and self.on_select is not None:
            self.on_select(note_id)

    async def create(self) -> Optional[NoteResponse]:
        """Create an "Untitled" note and select it."""
        try:
            note = await self.client.create_note()
        except ApiError as e:
            self.notifier.error("Error creating note", e.message)
            return None
        self._upsert(note)
        self.select(note.id)
        return note

    def remove(self, note_id: UUID) -> None:
        self.notes = [note for note in self.notes if note.id != note_id]
        if self.selected_id == note_id:
            self.selected_id = None

    # ── Realtime ──────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Load the list and follow the realtime feed in the background."""
        await self.refresh()
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._listen())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.live = False
        self._last_seq = None

    async def _listen(self) -> None:
        try:
            async for event in self.client.subscribe_notes():
                await self.handle_feed_event(event)
            logger.warning("Realtime feed ended; the note list is no longer live")
        except ApiError as e:
            logger.warning("Realtime feed closed: %s", e.message)

        # start() may be called again to resubscribe.
        self.live = False
        self._last_seq = None
        if self._task is asyncio.current_task():
            self._task = None

    async def handle_feed_event(self, event: FeedEvent) -> None:
        if isinstance(event, ReadyEvent):
            self._last_seq = event.seq
            self.live = True
            await self.refresh()
        else:
            await self.apply_change(event)

    async def apply_change(self, event: ChangeEvent) -> bool:
        """
        Apply one change event.

        Returns True when the list was patched in place, False when it was
        reloaded instead.
        """
        expected = None if self._last_seq is None else self._last_seq + 1
        self._last_seq = event.seq

        if expected is None or event.seq != expected:
            logger.info("Realtime gap (expected seq %s, got %d); reloading", expected, event.seq)
            await self.refresh()
            return False

        if event.event_type == "DELETE":
            self.remove(event.record_id)
            return True

        if event.record is None:
            await self.refresh()
            return False

        self._upsert(event.record)
        return True

    def _upsert(self, note: NoteResponse) -> None:
        notes = [existing for existing in self.notes if existing.id != note.id]
        notes.append(note)
        notes.sort(key=lambda item: item.updated_at, reverse=True)
        self.notes = notes
