"""Thread pane: parent message plus replies for one thread."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from slack_panes.core.errors import as_failure
from slack_panes.core.models import Message, ThreadReplies
from slack_panes.panes.base import PaneContext, PaneController
from slack_panes.render.names import NameLookup
from slack_panes.render.projector import Projection, format_ts, project_thread


class ThreadPane(PaneController):
    """One opened thread. A new instance is created per opened thread."""

    kind = "thread"

    def __init__(self, ctx: PaneContext, channel_id: str, thread_ts: str) -> None:
        super().__init__(ctx, "thread")
        self.channel_id = channel_id
        self.thread_ts = thread_ts

    def title(self) -> str:
        return f"Thread: {format_ts(self.thread_ts, self.ctx.time_format)}"

    def parent(self) -> Message | None:
        current = self.ctx.cache.get_current_thread()
        if current is not None and current.ts == self.thread_ts and current.parent is not None:
            return current.parent
        for message in self.ctx.cache.get_messages(self.channel_id) or []:
            if message.ts == self.thread_ts:
                return message
        return None

    def project(self, names: NameLookup) -> Projection:
        replies = self.ctx.cache.get_thread_messages(self.thread_ts)
        return project_thread(self.thread_ts, self.parent(), replies, names, self.ctx.time_format)

    def on_open(self) -> None:
        self.refresh()

    def on_close(self) -> None:
        current = self.ctx.cache.get_current_thread()
        if current is not None and current.ts == self.thread_ts:
            self.ctx.cache.clear_current_thread()

    def actions(self) -> dict[str, Callable[[], None]]:
        return {
            "refresh": self.refresh,
            "reply": self.reply,
            "add_reaction": self.add_reaction,
            "close_thread": self.close,
        }

    # ------------------------------------------------------------------ #
    # Loading                                                              #
    # ------------------------------------------------------------------ #

    def refresh(self) -> None:
        self.ctx.resolver.forget_failures()
        self.ctx.gateway.fetch_thread_replies(self.channel_id, self.thread_ts, self._on_replies)

    def _on_replies(self, success: bool, payload: Any) -> None:
        if not self.is_open:
            logger.debug("Dropping replies for closed thread {}", self.thread_ts)
            return
        if not success:
            self.ctx.report(as_failure(payload, "load thread"))
            return
        thread: ThreadReplies = payload
        cache = self.ctx.cache
        cache.set_thread_messages(self.thread_ts, thread.replies)
        current = cache.get_current_thread()
        if thread.parent is not None and (current is None or current.ts == self.thread_ts):
            cache.set_current_thread(self.thread_ts, thread.parent)
        self.render()

    # ------------------------------------------------------------------ #
    # Actions                                                              #
    # ------------------------------------------------------------------ #

    def reply(self) -> None:
        self.prompt("Reply: ", self._post_reply)

    def _post_reply(self, text: str) -> None:
        def _done(success: bool, payload: Any) -> None:
            if not success:
                self.ctx.report(as_failure(payload, "send reply"))
                return
            if self.is_open:
                self.refresh()

        self.ctx.gateway.reply_to_thread(self.channel_id, self.thread_ts, text, _done)

    def add_reaction(self) -> None:
        entity = self.cursor_entity()
        if not isinstance(entity, Message):
            return
        self.prompt("Reaction emoji: ", lambda emoji: self._react(entity, emoji))

    def _react(self, message: Message, emoji: str) -> None:
        def _done(success: bool, payload: Any) -> None:
            if not success:
                self.ctx.report(as_failure(payload, "add reaction"))
                return
            if self.is_open:
                self.refresh()

        self.ctx.gateway.add_reaction(message.channel_id, message.ts, emoji, _done)
