"""Windowing collaborator interface and an in-memory implementation."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol

from loguru import logger

ActionHandler = Callable[[str, str], None]
InputCallback = Callable[["str | None"], None]

# Sent through the action handler when the host moves a pane's cursor.
CURSOR_MOVED = "cursor_moved"


class PaneHost(Protocol):
    """Scrollable line surfaces with key bindings and range highlights."""

    def create_pane(self, name: str, kind: str) -> str: ...

    def set_pane_content(self, handle: str, lines: list[str]) -> None: ...

    def set_pane_title(self, handle: str, title: str) -> None: ...

    def highlight_range(self, handle: str, start: int, end: int, style: str) -> None: ...

    def clear_highlights(self, handle: str) -> None: ...

    def bind_key(self, handle: str, key: str, action_id: str) -> None: ...

    def get_cursor_line(self, handle: str) -> int: ...

    def close_pane(self, handle: str) -> None: ...

    def set_action_handler(self, handler: ActionHandler) -> None: ...

    def request_input(self, prompt: str, callback: InputCallback) -> None: ...

    def notify(self, message: str, level: str) -> None: ...


@dataclass
class MemoryPane:
    name: str
    kind: str
    title: str = ""
    lines: list[str] = field(default_factory=list)
    highlights: list[tuple[int, int, str]] = field(default_factory=list)
    keys: dict[str, str] = field(default_factory=dict)
    cursor: int = 0

    def highlighted(self, style: str) -> list[int]:
        return sorted(
            line
            for start, end, hl_style in self.highlights
            if hl_style == style
            for line in range(start, end + 1)
        )


@dataclass
class PendingPrompt:
    prompt: str
    callback: InputCallback


class MemoryPaneHost:
    """Headless host: keeps pane contents in memory.

    Used by tests and by anything that drives the engine without a
    terminal. ``press`` simulates a key, ``answer_prompt`` completes the
    oldest pending input request.
    """

    def __init__(self) -> None:
        self.panes: dict[str, MemoryPane] = {}
        self.closed: list[str] = []
        self.prompts: list[PendingPrompt] = []
        self.notifications: list[tuple[str, str]] = []
        self._handler: ActionHandler | None = None
        self._ids = itertools.count(1)

    # PaneHost -----------------------------------------------------------

    def create_pane(self, name: str, kind: str) -> str:
        handle = f"{name}-{next(self._ids)}"
        self.panes[handle] = MemoryPane(name=name, kind=kind)
        return handle

    def set_pane_content(self, handle: str, lines: list[str]) -> None:
        pane = self.panes[handle]
        pane.lines = list(lines)
        pane.highlights.clear()
        pane.cursor = max(0, min(pane.cursor, len(pane.lines) - 1))

    def set_pane_title(self, handle: str, title: str) -> None:
        self.panes[handle].title = title

    def highlight_range(self, handle: str, start: int, end: int, style: str) -> None:
        self.panes[handle].highlights.append((start, end, style))

    def clear_highlights(self, handle: str) -> None:
        self.panes[handle].highlights.clear()

    def bind_key(self, handle: str, key: str, action_id: str) -> None:
        self.panes[handle].keys[key] = action_id

    def get_cursor_line(self, handle: str) -> int:
        return self.panes[handle].cursor

    def close_pane(self, handle: str) -> None:
        if self.panes.pop(handle, None) is not None:
            self.closed.append(handle)

    def set_action_handler(self, handler: ActionHandler) -> None:
        self._handler = handler

    def request_input(self, prompt: str, callback: InputCallback) -> None:
        self.prompts.append(PendingPrompt(prompt, callback))

    def notify(self, message: str, level: str) -> None:
        self.notifications.append((level, message))

    # Driving helpers ----------------------------------------------------

    def pane_named(self, name: str) -> MemoryPane | None:
        for pane in self.panes.values():
            if pane.name == name:
                return pane
        return None

    def handle_named(self, name: str) -> str | None:
        for handle, pane in self.panes.items():
            if pane.name == name:
                return handle
        return None

    def set_cursor(self, handle: str, line: int) -> None:
        self.panes[handle].cursor = line
        self._dispatch(handle, CURSOR_MOVED)

    def cursor_to(self, handle: str, text: str) -> int:
        """Move the cursor to the first line containing *text*."""
        for number, line in enumerate(self.panes[handle].lines):
            if text in line:
                self.set_cursor(handle, number)
                return number
        raise LookupError(f"{text!r} not found in pane {handle}")

    def press(self, handle: str, key: str) -> None:
        action = self.panes[handle].keys.get(key)
        if action is None:
            logger.debug("Unbound key {} in pane {}", key, handle)
            return
        self._dispatch(handle, action)

    def answer_prompt(self, text: str | None) -> None:
        pending = self.prompts.pop(0)
        pending.callback(text)

    def _dispatch(self, handle: str, action: str) -> None:
        if self._handler is not None:
            self._handler(handle, action)
