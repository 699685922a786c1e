"""
MindPad Client — AI Panel
==========================

What:  The four AI actions for the selected note and that note's AI history.
How:   Each note has its own state, Idle or Running(action). While a note is
       Running its buttons are disabled; other notes stay usable. The proxy
       is called with the note's persisted content, not the editor buffer.

Outcomes (as toasts):
    no note selected  → "No note selected" / "Please select a note first"
    empty content     → "Empty note" / "Add some content first" (no proxy call)
    success           → "AI Processing Complete" / "<action> completed successfully"
    any failure       → "AI Error" / the proxy's message, verbatim
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from mindpad.client.api import ApiError, MindPadClient
from mindpad.client.notifications import Notifier
from mindpad.schemas.note import AIHistoryItem

logger = logging.getLogger(__name__)

ACTION_LABELS: Dict[str, str] = {
    "summarize": "Summarize",
    "rewrite_formal": "Rewrite (Formal)",
    "rewrite_concise": "Rewrite (Concise)",
    "generate_ideas": "Generate Ideas",
}

PROCESSING_LABEL = "Processing..."
EMPTY_HISTORY_MESSAGE = "No AI interactions yet. Try using the AI tools above!"


class AIPanel:

    def __init__(self, client: MindPadClient, notifier: Optional[Notifier] = None):
        self.client = client
        self.notifier = notifier or Notifier()
        self.note_id: Optional[UUID] = None
        self.history: List[AIHistoryItem] = []
        self._running: Dict[UUID, str] = {}

    # ── Selection & history ───────────────────────────────────────────────

    async def select(self, note_id: Optional[UUID]) -> None:
        self.note_id = note_id
        if note_id is None:
            self.history = []
            return
        await self.refresh_history()

    async def refresh_history(self) -> List[AIHistoryItem]:
        note_id = self.note_id
        if note_id is None:
            return []
        try:
            history = await self.client.list_history(note_id)
        except ApiError as e:
            logger.warning("Could not load AI history for %s: %s", note_id, e.message)
            return self.history
        # Ignore the answer if the selection moved on meanwhile.
        if note_id == self.note_id:
            self.history = history
        return history

    # ── Per-note state ────────────────────────────────────────────────────

    def running_action(self, note_id: Optional[UUID] = None) -> Optional[str]:
        """The action running for `note_id` (default: the selected note), or None when Idle."""
        target = note_id if note_id is not None else self.note_id
        if target is None:
            return None
        return self._running.get(target)

    def is_enabled(self, action: Optional[str] = None) -> bool:
        return self.note_id is not None and self.note_id not in self._running

    def label(self, action: str) -> str:
        if self.running_action() == action:
            return PROCESSING_LABEL
        return ACTION_LABELS.get(action, action)

    # ── Running actions ───────────────────────────────────────────────────

    async def run(self, action: str) -> Optional[str]:
        """
        Run `action` on the selected note.

        Returns the generated text, or None when nothing was produced.
        """
        note_id = self.note_id
        if note_id is None:
            self.notifier.error("No note selected", "Please select a note first")
            return None
        if note_id in self._running:
            logger.debug("AI action already running for note %s", note_id)
            return None

        self._running[note_id] = action
        try:
            try:
                note = await self.client.get_note(note_id)
            except ApiError as e:
                self.notifier.error("AI Error", e.message)
                return None

            if not note.content:
                self.notifier.error("Empty note", "Add some content first")
                return None

            try:
                text = await self.client.run_assistant(action, note.content, note_id)
            except ApiError as e:
                self.notifier.error("AI Error", e.message)
                return None

            self.notifier.success("AI Processing Complete", f"{action} completed successfully")
            if note_id == self.note_id:
                await self.refresh_history()
            return text
        finally:
            self._running.pop(note_id, None)
