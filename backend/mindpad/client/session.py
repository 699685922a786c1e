"""
MindPad Client — Session Controller
====================================

What:  Holds the current session, tells listeners when it changes, and
       decides which route a path resolves to.
How:   A session is a validated bearer token: sign_in() checks it against
       GET /auth/user before accepting it. The token is handed to the shared
       MindPadClient so every later request carries it.

Routing:
    /app  without a session → /auth
    /     with a session    → /app
    anything else           → unchanged
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from uuid import UUID

from mindpad.client.api import ApiError, MindPadClient

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth"
APP_PATH = "/app"
LANDING_PATH = "/"

SessionListener = Callable[[Optional["Session"]], None]


@dataclass(frozen=True)
class Session:
    user_id: UUID
    email: Optional[str]
    access_token: str


class SessionController:

    def __init__(self, client: MindPadClient, token: Optional[str] = None):
        self.client = client
        self._stored_token = token
        self._session: Optional[Session] = None
        self._listeners: List[SessionListener] = []

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_signed_in(self) -> bool:
        return self._session is not None

    def on_change(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, session: Optional[Session]) -> None:
        self._session = session
        self.client.set_token(session.access_token if session else None)
        for listener in list(self._listeners):
            listener(session)

    async def restore(self) -> Optional[Session]:
        """
        Re-validate the stored token, if any.

        An expired or rejected token leaves the controller signed out.
        """
        if not self._stored_token:
            return None
        try:
            return await self.sign_in(self._stored_token)
        except ApiError as e:
            logger.info("Stored session is no longer valid: %s", e.message)
            self._stored_token = None
            return None

    async def sign_in(self, token: str) -> Session:
        """
        Accept a bearer token issued by the auth service.

        Raises:
            ApiError: the service rejected the token (401).
        """
        self.client.set_token(token)
        try:
            user = await self.client.get_user()
        except ApiError:
            self.client.set_token(self._session.access_token if self._session else None)
            raise

        session = Session(user_id=user.id, email=user.email, access_token=token)
        self._stored_token = token
        self._set(session)
        logger.info("Signed in as %s", user.email or user.id)
        return session

    async def sign_out(self) -> None:
        self._stored_token = None
        self._set(None)

    def resolve_route(self, path: str) -> str:
        if path == APP_PATH and self._session is None:
            return AUTH_PATH
        if path == LANDING_PATH and self._session is not None:
            return APP_PATH
        return path
