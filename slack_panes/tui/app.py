"""Textual host: each pane is an OptionList inside a titled column."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList, Static
from textual.widgets.option_list import Option

from slack_panes.net.gateway import Callback, Job, execute
from slack_panes.panes.host import CURSOR_MOVED, ActionHandler, InputCallback

if TYPE_CHECKING:
    from slack_panes.panes.session import UISession

HIGHLIGHT_STYLES = {
    "cursor": "on #153024",
    "current": "bold #ffd400",
}

PANE_ORDER = {"channels": 0, "messages": 1, "thread": 2}

NOTIFY_SEVERITY = {
    "debug": "information",
    "info": "information",
    "warning": "warning",
    "error": "error",
}


class PaneView(Vertical):
    """One pane surface. State is kept here and pushed to the OptionList."""

    def __init__(self, host: "TextualPaneHost", handle: str, name: str, kind: str) -> None:
        super().__init__(id=handle, classes=f"slack-pane {kind}-pane")
        self.host = host
        self.handle = handle
        self.pane_name = name
        self.kind = kind
        self.title_text = name.capitalize()
        self.lines: list[str] = []
        self.highlights: list[tuple[int, int, str]] = []
        self.keys: dict[str, str] = {}
        self.cursor = 0
        self._sync_pending = False

    def compose(self) -> ComposeResult:
        yield Label(self.title_text, classes="pane-title")
        yield OptionList()

    def on_mount(self) -> None:
        width = self.host.widths.get(self.kind)
        if width:
            self.styles.width = width
        self._sync()
        if self.kind == "thread":
            self.query_one(OptionList).focus()

    # State updates --------------------------------------------------------

    def set_lines(self, lines: list[str]) -> None:
        self.lines = list(lines)
        self.highlights.clear()
        self.cursor = max(0, min(self.cursor, len(self.lines) - 1))
        self._schedule_sync()

    def set_title(self, title: str) -> None:
        self.title_text = title
        if self.is_mounted:
            self.query_one(".pane-title", Label).update(title)

    def add_highlight(self, start: int, end: int, style: str) -> None:
        self.highlights.append((start, end, style))
        self._schedule_sync()

    def clear_highlights(self) -> None:
        self.highlights.clear()
        self._schedule_sync()

    def _schedule_sync(self) -> None:
        if not self.is_mounted or self._sync_pending:
            return
        self._sync_pending = True
        self.call_later(self._sync)

    def _styled(self, number: int, line: str) -> Text:
        text = Text(line)
        for start, end, style in self.highlights:
            if start <= number <= end:
                text.stylize(HIGHLIGHT_STYLES.get(style, style))
        return text

    def _sync(self) -> None:
        self._sync_pending = False
        options = self.query_one(OptionList)
        options.clear_options()
        options.add_options([Option(self._styled(n, line)) for n, line in enumerate(self.lines)])
        if self.lines:
            options.highlighted = self.cursor
        self.query_one(".pane-title", Label).update(self.title_text)

    # Input ----------------------------------------------------------------

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        if event.option_index == self.cursor:
            return
        self.cursor = event.option_index
        self.host.dispatch(self.handle, CURSOR_MOVED)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.cursor = event.option_index
        action = self.keys.get("enter")
        if action:
            self.host.dispatch(self.handle, action)

    def on_key(self, event: Key) -> None:
        if event.key == "enter":
            return
        action = self.keys.get(event.key)
        if action:
            event.stop()
            self.host.dispatch(self.handle, action)


class InputScreen(ModalScreen[Optional[str]]):
    """Single-line prompt; Escape cancels."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, prompt: str) -> None:
        super().__init__()
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        with Vertical(id="input-dialog"):
            yield Label(self.prompt)
            yield Input(id="input-value")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class TextualPaneHost:
    """PaneHost backed by widgets mounted in ``#pane-row``."""

    def __init__(self, app: "SlackPanesApp") -> None:
        self.app = app
        self.views: dict[str, PaneView] = {}
        self.widths: dict[str, int] = {}
        self._handler: ActionHandler | None = None
        self._counter = 0

    def create_pane(self, name: str, kind: str) -> str:
        self._counter += 1
        handle = f"pane-{kind}-{self._counter}"
        view = PaneView(self, handle, name, kind)
        row = self.app.query_one("#pane-row", Horizontal)
        later = [v for v in self.views.values() if PANE_ORDER.get(v.kind, 3) > PANE_ORDER.get(kind, 3)]
        self.views[handle] = view
        if later:
            row.mount(view, before=later[0])
        else:
            row.mount(view)
        return handle

    def set_pane_content(self, handle: str, lines: list[str]) -> None:
        self.views[handle].set_lines(lines)

    def set_pane_title(self, handle: str, title: str) -> None:
        self.views[handle].set_title(title)

    def highlight_range(self, handle: str, start: int, end: int, style: str) -> None:
        self.views[handle].add_highlight(start, end, style)

    def clear_highlights(self, handle: str) -> None:
        self.views[handle].clear_highlights()

    def bind_key(self, handle: str, key: str, action_id: str) -> None:
        self.views[handle].keys[key] = action_id

    def get_cursor_line(self, handle: str) -> int:
        return self.views[handle].cursor

    def close_pane(self, handle: str) -> None:
        view = self.views.pop(handle, None)
        if view is not None:
            view.remove()

    def set_action_handler(self, handler: ActionHandler) -> None:
        self._handler = handler

    def request_input(self, prompt: str, callback: InputCallback) -> None:
        self.app.push_screen(InputScreen(prompt), callback)

    def notify(self, message: str, level: str) -> None:
        self.app.notify(message, severity=NOTIFY_SEVERITY.get(level, "information"))

    def dispatch(self, handle: str, action_id: str) -> None:
        if self._handler is not None:
            self._handler(handle, action_id)

    def focus_pane(self, handle: str) -> None:
        view = self.views.get(handle)
        if view is not None and view.is_mounted:
            view.query_one(OptionList).focus()


class SlackPanesApp(App):
    CSS = """
    Screen {
        background: #050a08;
        color: #b7ffc8;
    }

    #pane-row {
        height: 1fr;
        layout: horizontal;
    }

    .slack-pane {
        width: 1fr;
        margin: 0 1;
        border: heavy #00ff66;
        background: #07160f;
    }

    .slack-pane:focus-within {
        border: heavy #ffd400;
    }

    .pane-title {
        height: 1;
        width: 100%;
        content-align: center middle;
        color: #ffd400;
        background: #153024;
        text-style: bold;
    }

    .slack-pane OptionList {
        height: 1fr;
        border: none;
        background: #07160f;
    }

    #input-dialog {
        width: 60;
        height: auto;
        border: heavy #ffd400;
        background: #07160f;
        padding: 1 2;
    }

    InputScreen {
        align: center middle;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: #18331f;
        color: #e2ff6d;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("tab", "focus_next_pane", "Next Pane"),
        Binding("shift+tab", "focus_prev_pane", "Prev Pane"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        session_factory: Any,
        *,
        channels_width: int = 30,
        thread_width: int = 50,
    ) -> None:
        """*session_factory* builds a UISession from ``(host, runner)``."""
        super().__init__()
        self.session_factory = session_factory
        self.host = TextualPaneHost(self)
        self.host.widths = {"channels": channels_width, "thread": thread_width}
        self.session: "UISession | None" = None

    def compose(self) -> ComposeResult:
        yield Horizontal(id="pane-row")
        yield Static("Tab cycle panes  Ctrl+Q quit", id="status-bar")

    def on_mount(self) -> None:
        self.session = self.session_factory(self.host, self.run_job)
        self.session.on_closed = self.exit
        self.session.start()
        self.call_after_refresh(self._focus_first)

    def on_unmount(self) -> None:
        if self.session is not None and not self.session.closed:
            self.session.close()

    def _focus_first(self) -> None:
        handles = self._handles()
        if handles:
            self.host.focus_pane(handles[0])

    # Network jobs -----------------------------------------------------------

    def run_job(self, job: Job, callback: Callback) -> None:
        """Run a blocking gateway job off the UI thread."""

        def _worker() -> None:
            success, payload = execute(job)
            try:
                self.call_from_thread(callback, success, payload)
            except RuntimeError as exc:
                logger.debug("Dropping result after shutdown: {}", exc)

        threading.Thread(target=_worker, daemon=True).start()

    # Focus ------------------------------------------------------------------

    def _handles(self) -> list[str]:
        views = sorted(self.host.views.values(), key=lambda v: PANE_ORDER.get(v.kind, 3))
        return [view.handle for view in views]

    def _focused_handle(self) -> str | None:
        node = self.focused
        while node is not None and not isinstance(node, PaneView):
            node = node.parent
        return node.handle if isinstance(node, PaneView) else None

    def _cycle(self, step: int) -> None:
        handles = self._handles()
        if not handles:
            return
        current = self._focused_handle()
        idx = handles.index(current) if current in handles else 0
        self.host.focus_pane(handles[(idx + step) % len(handles)])

    def action_focus_next_pane(self) -> None:
        self._cycle(1)

    def action_focus_prev_pane(self) -> None:
        self._cycle(-1)
