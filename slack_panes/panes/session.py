"""Wire the three panes, the cache and the event bus into one UI session."""

from __future__ import annotations

from typing import Callable

from loguru import logger

from slack_panes.core.cache import DomainCache
from slack_panes.core.errors import Notifier, PaneError
from slack_panes.core.events import CHANNEL_SELECTED, THREAD_SELECTED, EventBus
from slack_panes.core.prefs_store import PrefsStore
from slack_panes.net.gateway import SlackGateway
from slack_panes.panes.base import PaneContext, PaneController
from slack_panes.panes.channels import ChannelListPane
from slack_panes.panes.host import PaneHost
from slack_panes.panes.keymaps import merge_keymaps
from slack_panes.panes.messages import MessagesPane
from slack_panes.panes.thread import ThreadPane
from slack_panes.render.projector import DEFAULT_TIME_FORMAT
from slack_panes.resolution import UserResolver


class UISession:
    """Owns one DomainCache and the controllers that render it.

    Cross-pane flow goes through the event bus: the channel list emits
    ``channel_selected``, the message pane emits ``thread_selected`` and
    the session reacts by loading and rendering the next pane.
    """

    def __init__(
        self,
        host: PaneHost,
        gateway: SlackGateway,
        *,
        bus: EventBus | None = None,
        prefs_store: PrefsStore | None = None,
        keymaps: dict[str, dict[str, str]] | None = None,
        time_format: str = DEFAULT_TIME_FORMAT,
        default_channel: str | None = None,
        auto_open_default_channel: bool = True,
        notify: Notifier | None = None,
    ) -> None:
        self.host = host
        self.bus = bus or EventBus()
        self.cache = DomainCache(self.bus)
        self.resolver = UserResolver(self.cache, gateway)
        self.ctx = PaneContext(
            cache=self.cache,
            bus=self.bus,
            gateway=gateway,
            host=host,
            resolver=self.resolver,
            notify=notify or host.notify,
            keymaps=merge_keymaps(keymaps),
            prefs_store=prefs_store,
            time_format=time_format,
            close_session=self.close,
        )
        self.default_channel = default_channel
        self.auto_open_default_channel = auto_open_default_channel
        self.on_closed: Callable[[], None] | None = None

        self.channels = ChannelListPane(self.ctx)
        self.messages = MessagesPane(self.ctx)
        self.thread: ThreadPane | None = None
        self._subscriptions: list[tuple[str, int]] = []
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        if self.ctx.prefs_store is not None:
            self.cache.load_preferences(self.ctx.prefs_store.load())
        self.host.set_action_handler(self.handle_action)
        self._subscriptions = [
            (CHANNEL_SELECTED, self.bus.on(CHANNEL_SELECTED, self._on_channel_selected)),
            (THREAD_SELECTED, self.bus.on(THREAD_SELECTED, self._on_thread_selected)),
        ]
        self.channels.on_channels_loaded = self._open_default_channel
        logger.info("Starting UI session")
        self.messages.open()
        self.channels.open()

    def close(self) -> None:
        """Close every pane, drop subscriptions and reset the cache."""
        if self._closed:
            return
        self._closed = True
        for pane in self.panes():
            pane.close()
        for event_name, sub_id in self._subscriptions:
            self.bus.off(event_name, sub_id)
        self._subscriptions.clear()
        self.resolver.reset()
        self.cache.reset()
        logger.info("UI session closed")
        if self.on_closed is not None:
            self.on_closed()

    @property
    def closed(self) -> bool:
        return self._closed

    def panes(self) -> list[PaneController]:
        panes: list[PaneController] = [self.channels, self.messages]
        if self.thread is not None:
            panes.append(self.thread)
        return panes

    def pane_for(self, handle: str) -> PaneController | None:
        for pane in self.panes():
            if pane.handle == handle:
                return pane
        return None

    # ------------------------------------------------------------------ #
    # Input                                                                #
    # ------------------------------------------------------------------ #

    def handle_action(self, handle: str, action_id: str) -> None:
        pane = self.pane_for(handle)
        if pane is None:
            logger.debug("Action {} for unknown pane {}", action_id, handle)
            return
        try:
            pane.dispatch(action_id)
        except PaneError as error:
            self.ctx.report(error)

    def select_channel(self, name_or_id: str) -> bool:
        """Select a channel by name or id, as if chosen in the list."""
        channel = self.cache.find_channel_by_name(name_or_id)
        if channel is None:
            return False
        self.bus.emit(CHANNEL_SELECTED, channel.id, channel.name or channel.id)
        return True

    # ------------------------------------------------------------------ #
    # Event handlers                                                       #
    # ------------------------------------------------------------------ #

    def _open_default_channel(self) -> None:
        if not self.auto_open_default_channel or not self.default_channel:
            return
        if self.cache.get_current_channel() is not None:
            return
        if not self.select_channel(self.default_channel):
            logger.warning("Default channel {} not found", self.default_channel)

    def _on_channel_selected(self, channel_id: str, channel_name: str | None = None) -> None:
        logger.info("Channel selected: {} ({})", channel_name, channel_id)
        self.cache.set_current_channel(channel_id, channel_name)
        if self.thread is not None and self.thread.channel_id != channel_id:
            self.thread.close()
            self.thread = None
        if self.channels.is_open:
            self.channels.render()
        if self.messages.is_open:
            self.messages.render()
            self.messages.load(channel_id)

    def _on_thread_selected(self, channel_id: str, thread_ts: str) -> None:
        logger.info("Thread selected: {} in {}", thread_ts, channel_id)
        if self.thread is not None:
            self.thread.close()
        parent = None
        for message in self.cache.get_messages(channel_id) or []:
            if message.ts == thread_ts:
                parent = message
                break
        self.cache.set_current_thread(thread_ts, parent)
        self.thread = ThreadPane(self.ctx, channel_id, thread_ts)
        self.thread.open()
