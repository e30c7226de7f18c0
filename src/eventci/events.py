# events.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .model import Event, Project


Handler = Callable[[Event, Optional[Project]], Any]


class EventRouter:
    """
    In-process handler registry.

    Handlers are called in registration order with (event, project).
    Exceptions raised by a handler are not caught here: the caller of
    fire() decides what a failed event means.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, kind: str, handler: Handler) -> Handler:
        self._handlers.setdefault(kind, []).append(handler)
        return handler

    def handlers(self, kind: str) -> List[Handler]:
        return list(self._handlers.get(kind, []))

    def fire(self, event: Event) -> int:
        """Deliver an event. Returns how many handlers ran."""
        handlers = self.handlers(event.kind)
        for handler in handlers:
            handler(event, event.project)
        return len(handlers)
