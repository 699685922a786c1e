"""
MindPad Client — Note Editor
=============================

What:  Title/content editing of the selected note with debounced autosave.
How:   Edits change the local buffer immediately and (re)arm a timer on the
       running event loop. When the timer fires, one PATCH is sent with the
       buffer as it is at that moment.

Save tagging:
    Each pending save is tagged with (note_id, generation) when the edit is
    made. open() and delete() bump the generation, so a save that outlives
    its note is dropped instead of writing one note's text into another.
    open() flushes the pending save of the previous note before loading the
    next one.

States:
    EMPTY    no note selected; edits are ignored
    LOADING  a note is being fetched; edits are ignored
    LOADED   a note is open and editable
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional, Set, Tuple
from uuid import UUID

from mindpad.client.api import ApiError, MindPadClient
from mindpad.client.config import client_settings
from mindpad.client.notifications import Notifier

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

SaveTag = Tuple[UUID, int]


class EditorState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"


class NoteEditor:
    """
    Args:
        client:         API client carrying the session
        notifier:       Toast sink for save/delete outcomes
        on_deleted:     Called with the note id after a successful delete
        autosave_delay: Debounce in seconds (default: MINDPAD_AUTOSAVE_DELAY_MS)
    """

    def __init__(
        self,
        client: MindPadClient,
        notifier: Optional[Notifier] = None,
        on_deleted: Optional[Callable[[UUID], None]] = None,
        autosave_delay: Optional[float] = None,
    ):
        self.client = client
        self.notifier = notifier or Notifier()
        self.on_deleted = on_deleted
        self.autosave_delay = (
            autosave_delay if autosave_delay is not None else client_settings.autosave_delay
        )

        self.state = EditorState.EMPTY
        self.note_id: Optional[UUID] = None
        self.title = ""
        self.content = ""
        self.generation = 0
        self.is_saving = False

        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[SaveTag] = None
        self._save_tasks: Set[asyncio.Task] = set()

    @property
    def has_pending_save(self) -> bool:
        return self._pending is not None

    def _clear(self) -> None:
        self.state = EditorState.EMPTY
        self.note_id = None
        self.title = ""
        self.content = ""

    # ── Loading ───────────────────────────────────────────────────────────

    async def open(self, note_id: Optional[UUID]) -> None:
        """Show `note_id`, or clear the editor for None."""
        # Edits are ignored until the next note has loaded.
        self.state = EditorState.LOADING
        await self.flush()
        self.generation += 1
        generation = self.generation

        if note_id is None:
            self._clear()
            return

        self.note_id = note_id
        self.title = ""
        self.content = ""
        try:
            note = await self.client.get_note(note_id)
        except ApiError as e:
            if generation == self.generation:
                self._clear()
                self.notifier.error("Error loading note", e.message)
            return

        # Another open() may have started while this one was loading.
        if generation != self.generation:
            return
        self.title = note.title
        self.content = note.content
        self.state = EditorState.LOADED

    # ── Editing ───────────────────────────────────────────────────────────

    def set_title(self, title: str) -> None:
        if self.state is not EditorState.LOADED:
            return
        self.title = title
        self._schedule_save()

    def set_content(self, content: str) -> None:
        if self.state is not EditorState.LOADED:
            return
        self.content = content
        self._schedule_save()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_save(self) -> None:
        self._cancel_timer()
        self._pending = (self.note_id, self.generation)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.autosave_delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        tag, self._pending = self._pending, None
        if tag is None:
            return
        task = asyncio.create_task(self._save(tag))
        self._save_tasks.add(task)
        task.add_done_callback(self._save_tasks.discard)

    # ── Saving ────────────────────────────────────────────────────────────

    async def _save(self, tag: SaveTag) -> bool:
        note_id, generation = tag
        if note_id != self.note_id or generation != self.generation:
            logger.debug("Dropping stale save for note %s (generation %d)", note_id, generation)
            return False
        if not self.title and not self.content:
            return False

        self.is_saving = True
        try:
            await self.client.update_note(
                note_id,
                title=self.title or UNTITLED,
                content=self.content,
            )
        except ApiError as e:
            self.notifier.error("Error saving note", e.message)
            return False
        finally:
            self.is_saving = False
        return True

    async def flush(self) -> None:
        """Send the pending save now and wait for saves already in flight."""
        self._cancel_timer()
        tag, self._pending = self._pending, None
        if tag is not None:
            await self._save(tag)
        if self._save_tasks:
            await asyncio.gather(*list(self._save_tasks))

    # ── Deleting ──────────────────────────────────────────────────────────

    async def delete(self) -> bool:
        """Delete the open note. A pending edit of it is discarded."""
        note_id = self.note_id
        if note_id is None:
            return False

        self._cancel_timer()
        self._pending = None
        try:
            await self.client.delete_note(note_id)
        except ApiError as e:
            self.notifier.error("Error deleting note", e.message)
            return False

        self.generation += 1
        self._clear()
        self.notifier.success("Note deleted")
        if self.on_deleted is not None:
            self.on_deleted(note_id)
        return True

    async def close(self) -> None:
        await self.flush()
