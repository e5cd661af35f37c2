"""Shared pane controller lifecycle: open, render, highlight, dispatch, close."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from loguru import logger

from slack_panes.core.cache import DomainCache
from slack_panes.core.errors import InvalidPaneState, Notifier, PaneError, report_error
from slack_panes.core.events import USER_UPDATED, EventBus
from slack_panes.core.models import User
from slack_panes.core.prefs_store import PrefsStore
from slack_panes.net.gateway import SlackGateway
from slack_panes.panes.host import CURSOR_MOVED, PaneHost
from slack_panes.render.names import NameLookup
from slack_panes.render.projector import DEFAULT_TIME_FORMAT, Entity, LineIndex, Projection
from slack_panes.resolution import UserResolver

CURSOR_STYLE = "cursor"
CURRENT_STYLE = "current"


class PaneState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    RENDERING = "rendering"
    IDLE = "idle"


@dataclass
class PaneContext:
    """Collaborators handed to every controller at construction."""

    cache: DomainCache
    bus: EventBus
    gateway: SlackGateway
    host: PaneHost
    resolver: UserResolver
    notify: Notifier
    keymaps: dict[str, dict[str, str]] = field(default_factory=dict)
    prefs_store: PrefsStore | None = None
    time_format: str = DEFAULT_TIME_FORMAT
    close_session: Callable[[], None] | None = None

    def report(self, error: PaneError) -> None:
        report_error(error, self.notify)

    def save_preferences(self) -> None:
        if self.prefs_store is None:
            return
        try:
            self.prefs_store.save(self.cache.preferences())
        except OSError as exc:
            logger.warning("Failed to save preferences: {}", exc)
            self.notify(f"Failed to save preferences: {exc}", "error")


class PaneController:
    """One pane's state machine.

    ``CLOSED -> OPEN -> RENDERING -> IDLE -> RENDERING ... -> CLOSED``.
    Closing is terminal; a closed controller rejects every call with
    :class:`InvalidPaneState`.
    """

    kind = "pane"

    def __init__(self, ctx: PaneContext, name: str | None = None) -> None:
        self.ctx = ctx
        self.name = name or self.kind
        self.state = PaneState.CLOSED
        self.handle: str | None = None
        self.index = LineIndex()
        self.referenced_users: frozenset[str] = frozenset()
        self._terminated = False
        self._dirty = False
        self._user_sub: int | None = None

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    @property
    def is_open(self) -> bool:
        return self.state is not PaneState.CLOSED

    def _require_open(self, what: str) -> None:
        if not self.is_open:
            raise InvalidPaneState(f"{what} on closed {self.name} pane")

    def open(self) -> None:
        if self._terminated:
            raise InvalidPaneState(f"{self.name} pane was closed")
        if self.is_open:
            return
        host = self.ctx.host
        self.handle = host.create_pane(self.name, self.kind)
        for key, action in self.ctx.keymaps.get(self.kind, {}).items():
            host.bind_key(self.handle, key, action)
        self.state = PaneState.OPEN
        self._user_sub = self.ctx.bus.on(USER_UPDATED, self._on_user_updated)
        logger.debug("Opened {} pane as {}", self.name, self.handle)
        self.render()
        self.on_open()

    def on_open(self) -> None:
        """Hook run once after the first render."""

    def close(self) -> None:
        if not self.is_open:
            return
        if self._user_sub is not None:
            self.ctx.bus.off(USER_UPDATED, self._user_sub)
            self._user_sub = None
        handle, self.handle = self.handle, None
        self.index = LineIndex()
        self.referenced_users = frozenset()
        self.state = PaneState.CLOSED
        self._terminated = True
        if handle is not None:
            self.ctx.host.close_pane(handle)
        logger.debug("Closed {} pane", self.name)
        self.on_close()

    def on_close(self) -> None:
        """Hook run after the surface is released."""

    # ------------------------------------------------------------------ #
    # Rendering                                                            #
    # ------------------------------------------------------------------ #

    def project(self, names: NameLookup) -> Projection:
        raise NotImplementedError

    def title(self) -> str:
        return self.name.capitalize()

    def render(self) -> None:
        """Rebuild content and index from the cache.

        A render requested while one is in progress is folded into a
        single follow-up pass.
        """
        self._require_open("render")
        if self.state is PaneState.RENDERING:
            self._dirty = True
            return
        self._dirty = True
        while self._dirty and self.is_open:
            self._dirty = False
            self.state = PaneState.RENDERING
            projection = self.project(NameLookup(self.ctx.cache))
            self.ctx.host.set_pane_content(self.handle, projection.lines)
            self.ctx.host.set_pane_title(self.handle, self.title())
            self.index = projection.index
            self.referenced_users = projection.referenced_users
            self.apply_highlight()
            logger.debug("Rendered {} pane: {} lines", self.name, len(projection.lines))
            if projection.missing_users:
                self.ctx.resolver.request(projection.missing_users)
        if self.is_open:
            self.state = PaneState.IDLE

    def apply_highlight(self) -> None:
        host = self.ctx.host
        host.clear_highlights(self.handle)
        entity = self.cursor_entity()
        if entity is not None:
            for start, end in self.index.ranges_of(entity):
                host.highlight_range(self.handle, start, end, CURSOR_STYLE)
        self.extra_highlights()

    def extra_highlights(self) -> None:
        """Hook for pane-specific highlight styles."""

    def _on_user_updated(self, user_id: str, user: User) -> None:
        if self.is_open and user_id in self.referenced_users:
            logger.debug("User {} arrived, re-rendering {} pane", user_id, self.name)
            self.render()

    # ------------------------------------------------------------------ #
    # Cursor and actions                                                   #
    # ------------------------------------------------------------------ #

    def cursor_line(self) -> int:
        self._require_open("cursor lookup")
        return self.ctx.host.get_cursor_line(self.handle)

    def cursor_entity(self) -> Entity | None:
        return self.index.entity_at(self.ctx.host.get_cursor_line(self.handle))

    def actions(self) -> dict[str, Callable[[], None]]:
        return {}

    def dispatch(self, action_id: str) -> None:
        self._require_open(action_id)
        if action_id == CURSOR_MOVED:
            self.apply_highlight()
            return
        action = self.actions().get(action_id)
        if action is None:
            logger.debug("No action {} on {} pane", action_id, self.name)
            return
        logger.debug("{} pane: {}", self.name, action_id)
        action()

    def prompt(self, text: str, on_answer: Callable[[str], None], *, allow_empty: bool = False) -> None:
        """Ask the host for a line of input; cancelled answers are dropped."""

        def _answered(value: str | None) -> None:
            if value is None or (not allow_empty and not value.strip()):
                return
            if not self.is_open:
                logger.debug("Discarding input for closed {} pane", self.name)
                return
            on_answer(value.strip())

        self.ctx.host.request_input(text, _answered)

    def close_session(self) -> None:
        """Tear down the whole session, or just this pane when standalone."""
        if self.ctx.close_session is not None:
            self.ctx.close_session()
        else:
            self.close()
