"""MindPad Client — toast notifications."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Toast:
    title: str
    description: Optional[str] = None
    variant: str = "default"  # "default" | "destructive"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class Notifier:
    """
    Collects toasts and forwards them to listeners (a UI, a test).

    `history` keeps every toast shown, oldest first.
    """

    def __init__(self):
        self.history: List[Toast] = []
        self._listeners: List[Callable[[Toast], None]] = []

    def listen(self, listener: Callable[[Toast], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def show(self, toast: Toast) -> Toast:
        self.history.append(toast)
        if toast.is_error:
            logger.warning("Toast: %s (%s)", toast.title, toast.description)
        else:
            logger.info("Toast: %s (%s)", toast.title, toast.description)
        for listener in list(self._listeners):
            listener(toast)
        return toast

    def success(self, title: str, description: Optional[str] = None) -> Toast:
        return self.show(Toast(title=title, description=description))

    def error(self, title: str, description: Optional[str] = None) -> Toast:
        return self.show(Toast(title=title, description=description, variant="destructive"))

    @property
    def last(self) -> Optional[Toast]:
        return self.history[-1] if self.history else None
