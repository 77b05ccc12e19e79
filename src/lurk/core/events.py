"""Thread-safe pub/sub bus used to notify the UI side of state changes."""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from lurk.logging import get_logger

EventHandler = Callable[[Any], None]

DOCUMENT_LOADED = "document.loaded"
PROGRESS_UPDATED = "progress.updated"
SETTINGS_UPDATED = "settings.updated"
SETTINGS_RESET = "settings.reset"
DEV_MODE_CHANGED = "settings.dev_mode_changed"


class EventBus:
    """Fan-out of state notifications to UI collaborators (tray, window)."""

    def __init__(self) -> None:
        self._subscribers: defaultdict[str, list[EventHandler]] = defaultdict(list)
        self._lock = threading.RLock()
        self.logger = get_logger("events")

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        with self._lock:
            if handler not in self._subscribers[topic]:
                self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._subscribers[topic]:
                self._subscribers[topic].remove(handler)

    def emit(self, topic: str, payload: Any = None) -> None:
        """Deliver ``payload`` on the caller's thread; a failing handler does not stop the rest."""
        with self._lock:
            handlers = list(self._subscribers.get(topic, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception as e:
                self.logger.opt(exception=e).error(f"Handler for {topic} failed: {e}")
