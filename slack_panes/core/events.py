"""Event names and the in-process signal bus shared by panes."""

from __future__ import annotations

import itertools
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from loguru import logger

EventHandler = Callable[..., None]

CHANNEL_SELECTED = "channel_selected"
THREAD_SELECTED = "thread_selected"
USER_UPDATED = "cache:user_updated"


@dataclass(frozen=True)
class EmittedEvent:
    """History record of one emit() call."""

    name: str
    args: tuple[Any, ...]
    timestamp: datetime


class EventBus:
    """Synchronous pub/sub; handlers run in subscription order."""

    def __init__(self, max_history: int = 100) -> None:
        self._handlers: dict[str, dict[int, EventHandler]] = defaultdict(dict)
        self._ids = itertools.count(1)
        self._history: deque[EmittedEvent] = deque(maxlen=max_history)

    def on(self, event_name: str, handler: EventHandler) -> int:
        sub_id = next(self._ids)
        self._handlers[event_name][sub_id] = handler
        return sub_id

    def off(self, event_name: str, sub_id: int) -> bool:
        handlers = self._handlers.get(event_name)
        if not handlers or sub_id not in handlers:
            return False
        del handlers[sub_id]
        return True

    def once(self, event_name: str, handler: EventHandler) -> int:
        """Subscribe *handler* for a single delivery."""
        sub_id = 0

        def _fire(*args: Any) -> None:
            self.off(event_name, sub_id)
            handler(*args)

        sub_id = self.on(event_name, _fire)
        return sub_id

    def emit(self, event_name: str, *args: Any) -> None:
        self._history.append(EmittedEvent(event_name, args, datetime.now()))
        # Snapshot so handlers may subscribe/unsubscribe while we iterate.
        for sub_id, handler in list(self._handlers.get(event_name, {}).items()):
            try:
                handler(*args)
            except Exception:
                logger.exception("Handler {} for event {!r} failed", sub_id, event_name)

    def clear(self, event_name: str | None = None) -> None:
        if event_name is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_name, None)

    def handler_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, {}))

    def history(self, limit: int | None = None) -> list[EmittedEvent]:
        records = list(self._history)
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return records
