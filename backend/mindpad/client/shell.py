"""
MindPad Client — Workspace Shell
=================================

What:  Wires header, sidebar, editor and AI panel around one selected note.
How:   The shell owns the selection. Selecting a note flushes the editor's
       pending save, opens the note and loads its AI history; deleting the
       open note deselects it everywhere and drops it from the list.
"""

import logging
from typing import Optional
from uuid import UUID

from mindpad.client.api import MindPadClient
from mindpad.client.assistant import AIPanel
from mindpad.client.editor import NoteEditor
from mindpad.client.header import AppHeader
from mindpad.client.notifications import Notifier
from mindpad.client.session import APP_PATH, AUTH_PATH, LANDING_PATH, Session, SessionController
from mindpad.client.sidebar import NoteSidebar
from mindpad.schemas.note import NoteResponse

logger = logging.getLogger(__name__)


class AppShell:

    def __init__(
        self,
        client: MindPadClient,
        session: SessionController,
        notifier: Optional[Notifier] = None,
        autosave_delay: Optional[float] = None,
    ):
        self.client = client
        self.session = session
        self.notifier = notifier or Notifier()

        self.header = AppHeader(session, self.notifier)
        self.sidebar = NoteSidebar(client, self.notifier)
        self.editor = NoteEditor(
            client,
            self.notifier,
            on_deleted=self._on_note_deleted,
            autosave_delay=autosave_delay,
        )
        self.panel = AIPanel(client, self.notifier)

        self.selected_note_id: Optional[UUID] = None
        self.route = LANDING_PATH
        self._unsubscribe = session.on_change(self._on_session_change)

    async def start(self) -> str:
        """Restore the session and load the workspace; returns the route to show."""
        if not self.session.is_signed_in:
            await self.session.restore()
        if not self.session.is_signed_in:
            self.route = AUTH_PATH
            return self.route

        await self.sidebar.start()
        self.route = APP_PATH
        return self.route

    async def select_note(self, note_id: Optional[UUID]) -> None:
        self.selected_note_id = note_id
        self.sidebar.selected_id = note_id
        await self.editor.open(note_id)
        await self.panel.select(note_id)

    async def create_note(self) -> Optional[NoteResponse]:
        note = await self.sidebar.create()
        if note is not None:
            await self.select_note(note.id)
        return note

    def _on_note_deleted(self, note_id: UUID) -> None:
        self.sidebar.remove(note_id)
        if self.selected_note_id == note_id:
            self.selected_note_id = None
            self.panel.note_id = None
            self.panel.history = []

    def _on_session_change(self, session: Optional[Session]) -> None:
        if session is None:
            self.route = AUTH_PATH

    async def sign_out(self) -> str:
        # Pending edits go out while the token is still valid.
        await self.editor.close()
        await self.sidebar.stop()
        self.route = await self.header.sign_out()
        return self.route

    async def close(self) -> None:
        await self.editor.close()
        await self.sidebar.stop()
        self._unsubscribe()
