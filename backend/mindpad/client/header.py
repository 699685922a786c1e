"""MindPad Client — workspace header: theme toggle, user badge, sign out."""

from typing import Optional

from mindpad.client.notifications import Notifier
from mindpad.client.session import AUTH_PATH, SessionController

LIGHT = "light"
DARK = "dark"


class AppHeader:

    def __init__(self, session: SessionController, notifier: Notifier, theme: str = LIGHT):
        self.session = session
        self.notifier = notifier
        self.theme = theme

    @property
    def user_email(self) -> Optional[str]:
        current = self.session.session
        return current.email if current else None

    def toggle_theme(self) -> str:
        self.theme = LIGHT if self.theme == DARK else DARK
        return self.theme

    async def sign_out(self) -> str:
        """End the session; returns the route to navigate to."""
        await self.session.sign_out()
        self.notifier.success("Signed out", "Come back soon!")
        return AUTH_PATH
