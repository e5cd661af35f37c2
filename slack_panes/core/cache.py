"""Session-scoped domain cache: channels, messages, users and view preferences."""

from __future__ import annotations

from dataclasses import dataclass, field

from slack_panes.core.events import USER_UPDATED, EventBus
from slack_panes.core.models import Channel, ChannelRef, Message, ThreadRef, User


@dataclass
class UIPreferences:
    """User-adjusted view state that survives data refreshes."""

    starred: set[str] = field(default_factory=set)
    sections: dict[str, str] = field(default_factory=dict)  # section id -> name
    channel_sections: dict[str, str] = field(default_factory=dict)  # channel id -> section id
    collapsed: dict[str, bool] = field(default_factory=dict)

    def copy(self) -> "UIPreferences":
        return UIPreferences(
            starred=set(self.starred),
            sections=dict(self.sections),
            channel_sections=dict(self.channel_sections),
            collapsed=dict(self.collapsed),
        )


class DomainCache:
    """Single owner of fetched data and preferences for one session.

    Setters never render. The only side effect is the
    ``cache:user_updated`` notification emitted by :meth:`set_user_cache`.
    """

    def __init__(self, bus: EventBus, preferences: UIPreferences | None = None) -> None:
        self._bus = bus
        self._prefs = preferences.copy() if preferences else UIPreferences()
        self._channels: list[Channel] | None = None
        self._messages: dict[str, list[Message]] = {}
        self._threads: dict[str, list[Message]] = {}
        self._users: dict[str, User] = {}
        self._current_channel: ChannelRef | None = None
        self._current_thread: ThreadRef | None = None

    # ------------------------------------------------------------------ #
    # Channels and messages                                                #
    # ------------------------------------------------------------------ #

    def channels_loaded(self) -> bool:
        return self._channels is not None

    def get_channels(self) -> list[Channel]:
        return list(self._channels or [])

    def set_channels(self, channels: list[Channel]) -> None:
        self._channels = list(channels)

    def get_channel(self, channel_id: str) -> Channel | None:
        for channel in self._channels or []:
            if channel.id == channel_id:
                return channel
        return None

    def find_channel_by_name(self, name: str) -> Channel | None:
        wanted = name.lstrip("#")
        for channel in self._channels or []:
            if channel.name == wanted or channel.id == wanted:
                return channel
        return None

    def get_messages(self, channel_id: str) -> list[Message] | None:
        """Cached messages, or None when the channel was never fetched."""
        messages = self._messages.get(channel_id)
        return list(messages) if messages is not None else None

    def set_messages(self, channel_id: str, messages: list[Message]) -> None:
        self._messages[channel_id] = list(messages)

    def get_thread_messages(self, thread_ts: str) -> list[Message] | None:
        replies = self._threads.get(thread_ts)
        return list(replies) if replies is not None else None

    def set_thread_messages(self, thread_ts: str, replies: list[Message]) -> None:
        self._threads[thread_ts] = list(replies)

    # ------------------------------------------------------------------ #
    # Users                                                                #
    # ------------------------------------------------------------------ #

    def get_user_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def set_user_cache(self, user_id: str, user: User) -> None:
        self._users[user_id] = user
        self._bus.emit(USER_UPDATED, user_id, user)

    # ------------------------------------------------------------------ #
    # Selection                                                            #
    # ------------------------------------------------------------------ #

    def get_current_channel(self) -> ChannelRef | None:
        return self._current_channel

    def set_current_channel(self, channel_id: str, name: str | None = None) -> None:
        self._current_channel = ChannelRef(id=channel_id, name=name or channel_id)

    def get_current_thread(self) -> ThreadRef | None:
        return self._current_thread

    def set_current_thread(self, ts: str, message: Message | None) -> None:
        self._current_thread = ThreadRef(ts=ts, parent=message)

    def clear_current_thread(self) -> None:
        self._current_thread = None

    # ------------------------------------------------------------------ #
    # Preferences                                                          #
    # ------------------------------------------------------------------ #

    def preferences(self) -> UIPreferences:
        return self._prefs.copy()

    def load_preferences(self, preferences: UIPreferences) -> None:
        self._prefs = preferences.copy()

    def is_starred(self, channel_id: str) -> bool:
        return channel_id in self._prefs.starred

    def set_starred(self, channel_id: str, starred: bool) -> None:
        if starred:
            self._prefs.starred.add(channel_id)
        else:
            self._prefs.starred.discard(channel_id)

    def custom_sections(self) -> dict[str, str]:
        return dict(self._prefs.sections)

    def add_custom_section(self, section_id: str, name: str) -> None:
        self._prefs.sections[section_id] = name

    def remove_custom_section(self, section_id: str) -> None:
        self._prefs.sections.pop(section_id, None)
        self._prefs.collapsed.pop(section_id, None)
        self._prefs.channel_sections = {
            cid: sid for cid, sid in self._prefs.channel_sections.items() if sid != section_id
        }

    def get_channel_section(self, channel_id: str) -> str | None:
        return self._prefs.channel_sections.get(channel_id)

    def set_channel_section(self, channel_id: str, section_id: str | None) -> None:
        if section_id is None:
            self._prefs.channel_sections.pop(channel_id, None)
        else:
            self._prefs.channel_sections[channel_id] = section_id

    def is_section_collapsed(self, section_id: str) -> bool:
        return self._prefs.collapsed.get(section_id, False)

    def set_section_collapsed(self, section_id: str, collapsed: bool) -> None:
        self._prefs.collapsed[section_id] = collapsed

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def reset(self) -> None:
        """Drop fetched data and selection; preferences are kept."""
        self._channels = None
        self._messages.clear()
        self._threads.clear()
        self._users.clear()
        self._current_channel = None
        self._current_thread = None
