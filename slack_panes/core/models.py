"""Domain records for channels, messages, threads and users."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any


class ChannelKind(str, Enum):
    """Conversation kinds shown in the channel list."""

    PUBLIC = "public"
    PRIVATE = "private"
    DIRECT = "direct"
    GROUP = "group"


def kind_from_api(payload: dict[str, Any]) -> ChannelKind:
    """Derive the channel kind from Slack conversation flags."""
    if payload.get("is_im"):
        return ChannelKind.DIRECT
    if payload.get("is_mpim"):
        return ChannelKind.GROUP
    if payload.get("is_private") or payload.get("is_group"):
        return ChannelKind.PRIVATE
    return ChannelKind.PUBLIC


def ts_sort_key(ts: str) -> Decimal:
    """Numeric sort key for a Slack timestamp string."""
    try:
        return Decimal(str(ts))
    except (InvalidOperation, ValueError):
        return Decimal(0)


@dataclass(frozen=True)
class Channel:
    """One conversation (public/private channel, DM or group DM)."""

    id: str
    name: str | None = None
    kind: ChannelKind = ChannelKind.PUBLIC
    is_member: bool = False
    user_id: str | None = None  # peer of a direct conversation

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Channel":
        return cls(
            id=str(payload.get("id", "")),
            name=payload.get("name") or None,
            kind=kind_from_api(payload),
            is_member=bool(payload.get("is_member", False)),
            user_id=payload.get("user") or None,
        )


@dataclass(frozen=True)
class Reaction:
    """Emoji reaction summary on a message."""

    name: str
    count: int = 0


@dataclass(frozen=True)
class Message:
    """A channel or thread message, identified by (channel_id, ts)."""

    channel_id: str
    ts: str
    user: str | None = None
    username: str | None = None
    text: str = ""
    blocks: tuple[dict[str, Any], ...] = field(default=(), compare=False)
    subtype: str | None = None
    reactions: tuple[Reaction, ...] = ()
    thread_ts: str | None = None
    reply_count: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.channel_id, self.ts)

    @property
    def sort_key(self) -> Decimal:
        return ts_sort_key(self.ts)

    @property
    def is_thread_root(self) -> bool:
        return bool(self.thread_ts) and self.reply_count > 0

    @classmethod
    def from_api(cls, payload: dict[str, Any], channel_id: str) -> "Message":
        reactions = tuple(
            Reaction(name=str(r.get("name", "")), count=int(r.get("count", 0) or 0))
            for r in payload.get("reactions") or []
            if isinstance(r, dict)
        )
        blocks = payload.get("blocks")
        return cls(
            channel_id=channel_id,
            ts=str(payload.get("ts", "")),
            user=payload.get("user") or None,
            username=payload.get("username") or None,
            text=payload.get("text") or "",
            blocks=tuple(blocks) if isinstance(blocks, list) else (),
            subtype=payload.get("subtype") or None,
            reactions=reactions,
            thread_ts=payload.get("thread_ts") or None,
            reply_count=int(payload.get("reply_count", 0) or 0),
        )


@dataclass(frozen=True)
class User:
    """Workspace member as returned by users.info."""

    id: str
    name: str = ""
    display_name: str = ""
    real_name: str = ""
    is_bot: bool = False

    @property
    def label(self) -> str:
        """Name shown in panes: display name, then real name, then id."""
        return self.display_name or self.real_name or self.id

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "User":
        profile = payload.get("profile") or {}
        return cls(
            id=str(payload.get("id", "")),
            name=payload.get("name") or "",
            display_name=profile.get("display_name") or "",
            real_name=profile.get("real_name") or payload.get("real_name") or "",
            is_bot=bool(payload.get("is_bot", False)),
        )


@dataclass(frozen=True)
class Workspace:
    """Identity reported by auth.test for the configured token."""

    team: str
    user: str
    team_id: str = ""
    user_id: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, payload: Any) -> "Workspace":
        return cls(
            team=str(payload.get("team") or ""),
            user=str(payload.get("user") or ""),
            team_id=str(payload.get("team_id") or ""),
            user_id=str(payload.get("user_id") or ""),
            url=str(payload.get("url") or ""),
        )


@dataclass(frozen=True)
class ChannelRef:
    """Currently selected channel."""

    id: str
    name: str


@dataclass(frozen=True)
class ThreadRef:
    """Currently selected thread; parent may be unknown until fetched."""

    ts: str
    parent: Message | None = None


@dataclass(frozen=True)
class ThreadReplies:
    """Payload of a thread fetch: the root message and its replies."""

    parent: Message | None
    replies: list[Message] = field(default_factory=list)
