"""
MindPad Client — Headless View-Models
======================================

What:  The behavior of the MindPad workspace without any rendering: session
       handling, the note list, the editor with autosave, the AI panel and
       the header.
How:   Each view-model talks to the service through MindPadClient (httpx) and
       reports user-visible outcomes as toasts through a Notifier.

    AppShell
    ├── AppHeader          (theme, sign out)
    ├── NoteSidebar        (list, search, create, realtime patching)
    ├── NoteEditor         (load, debounced autosave, delete)
    └── AIPanel            (per-note AI actions, history)
        all sharing SessionController + MindPadClient + Notifier
"""

from mindpad.client.api import ApiError, MindPadClient
from mindpad.client.assistant import AIPanel
from mindpad.client.editor import EditorState, NoteEditor
from mindpad.client.header import AppHeader
from mindpad.client.notifications import Notifier, Toast
from mindpad.client.session import Session, SessionController
from mindpad.client.shell import AppShell
from mindpad.client.sidebar import NoteSidebar

__all__ = [
    "AIPanel",
    "ApiError",
    "AppHeader",
    "AppShell",
    "EditorState",
    "MindPadClient",
    "NoteEditor",
    "NoteSidebar",
    "Notifier",
    "Session",
    "SessionController",
    "Toast",
]
