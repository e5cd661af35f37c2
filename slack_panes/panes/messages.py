"""Message pane for the selected channel."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from slack_panes.core.errors import MissingContext, as_failure
from slack_panes.core.events import THREAD_SELECTED
from slack_panes.core.models import ChannelRef, Message
from slack_panes.panes.base import PaneController
from slack_panes.render.names import NameLookup
from slack_panes.render.projector import NO_CHANNEL_SELECTED, Projection, placeholder, project_messages


class MessagesPane(PaneController):
    kind = "messages"

    def title(self) -> str:
        current = self.ctx.cache.get_current_channel()
        return f"Messages: {current.name}" if current else "Messages"

    def project(self, names: NameLookup) -> Projection:
        current = self.ctx.cache.get_current_channel()
        if current is None:
            return placeholder(NO_CHANNEL_SELECTED)
        messages = self.ctx.cache.get_messages(current.id)
        return project_messages(messages, names, self.ctx.time_format)

    def actions(self) -> dict[str, Callable[[], None]]:
        return {
            "open_thread": self.open_thread,
            "refresh": self.refresh,
            "send_message": self.send_message,
            "add_reaction": self.add_reaction,
            "upload_file": self.upload_file,
            "close": self.close_session,
        }

    def _require_channel(self) -> ChannelRef:
        current = self.ctx.cache.get_current_channel()
        if current is None:
            raise MissingContext("No channel selected")
        return current

    def _message_at_cursor(self) -> Message | None:
        entity = self.cursor_entity()
        return entity if isinstance(entity, Message) else None

    # ------------------------------------------------------------------ #
    # Loading                                                              #
    # ------------------------------------------------------------------ #

    def load(self, channel_id: str) -> None:
        """Fetch history for *channel_id* and render if it is still current."""

        def _done(success: bool, payload: Any) -> None:
            if not self.is_open:
                logger.debug("Dropping messages for closed pane")
                return
            if not success:
                self.ctx.report(as_failure(payload, "load messages"))
                return
            self.ctx.cache.set_messages(channel_id, payload)
            current = self.ctx.cache.get_current_channel()
            if current is None or current.id != channel_id:
                logger.debug("Messages for {} arrived after channel change", channel_id)
                return
            self.render()

        self.ctx.gateway.fetch_messages(channel_id, _done)

    def refresh(self) -> None:
        channel_id = self._require_channel().id
        self.ctx.resolver.forget_failures()
        self.load(channel_id)

    # ------------------------------------------------------------------ #
    # Actions                                                              #
    # ------------------------------------------------------------------ #

    def open_thread(self) -> None:
        message = self._message_at_cursor()
        if message is None:
            return
        self.ctx.bus.emit(THREAD_SELECTED, message.channel_id, message.thread_ts or message.ts)

    def send_message(self) -> None:
        current = self._require_channel()
        self.prompt(f"Message #{current.name}: ", lambda text: self._post(current.id, text))

    def _post(self, channel_id: str, text: str) -> None:
        def _done(success: bool, payload: Any) -> None:
            if not success:
                self.ctx.report(as_failure(payload, "send message"))
                return
            self.load(channel_id)

        self.ctx.gateway.send_message(channel_id, text, _done)

    def add_reaction(self) -> None:
        self._require_channel()
        message = self._message_at_cursor()
        if message is None:
            return
        self.prompt("Reaction emoji: ", lambda emoji: self._react(message, emoji))

    def _react(self, message: Message, emoji: str) -> None:
        def _done(success: bool, payload: Any) -> None:
            if not success:
                self.ctx.report(as_failure(payload, "add reaction"))
                return
            self.load(message.channel_id)

        self.ctx.gateway.add_reaction(message.channel_id, message.ts, emoji, _done)

    def upload_file(self) -> None:
        current = self._require_channel()
        self.prompt(f"Upload file to #{current.name}: ", lambda path: self._upload(current.id, path))

    def _upload(self, channel_id: str, path: str) -> None:
        def _done(success: bool, payload: Any) -> None:
            if not success:
                self.ctx.report(as_failure(payload, "upload file"))
                return
            self.ctx.notify(f"Uploaded {payload}", "info")
            if self.is_open:
                self.load(channel_id)

        self.ctx.gateway.upload_file(channel_id, path.strip(), _done)
