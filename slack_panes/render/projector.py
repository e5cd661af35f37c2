"""Project classified entities into pane lines plus a line index.

Every projection is computed from scratch: the same inputs and the same
cached names always give the same lines, and the returned
:class:`LineIndex` is never patched afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from slack_panes.core.models import Channel, ChannelKind, Message
from slack_panes.render.classifier import Section, channel_label
from slack_panes.render.names import UNKNOWN_USER, NameLookup
from slack_panes.render.richtext import message_body, split_lines

Entity = Channel | Message

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

EXPANDED_GLYPH = "▼"
COLLAPSED_GLYPH = "▶"
KIND_GLYPHS = {
    ChannelKind.PUBLIC: "#",
    ChannelKind.PRIVATE: "🔒",
    ChannelKind.DIRECT: "@",
    ChannelKind.GROUP: "👥",
}

SUBTYPE_PREFIXES = {
    "channel_join": "[joined] ",
    "channel_leave": "[left] ",
    "channel_topic": "[topic] ",
    "channel_purpose": "[purpose] ",
    "channel_name": "[renamed] ",
}
PARENT_PREFIX = "[parent] "
EMPTY_BODY = "(no content)"

LOADING_CHANNELS = "Loading channels..."
NO_CHANNEL_SELECTED = "No channel selected"
LOADING_MESSAGES = "Loading messages..."
NO_MESSAGES = "No messages in this channel"
LOADING_THREAD = "Loading thread..."
NO_REPLIES = "No replies in this thread"
PARENT_UNAVAILABLE = "(original message unavailable)"


def identity_of(entity: Entity) -> tuple[str, ...]:
    if isinstance(entity, Channel):
        return ("channel", entity.id)
    return ("message", entity.channel_id, entity.ts)


@dataclass(frozen=True)
class SectionRef:
    id: str
    name: str


@dataclass
class LineIndex:
    """Line number -> entity, plus line number -> section header."""

    entities: list[Entity | None] = field(default_factory=list)
    sections: dict[int, SectionRef] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entities)

    def entity_at(self, line: int) -> Entity | None:
        if 0 <= line < len(self.entities):
            return self.entities[line]
        return None

    def section_at(self, line: int) -> SectionRef | None:
        return self.sections.get(line)

    def lines_of(self, entity: Entity) -> list[int]:
        wanted = identity_of(entity)
        return [
            line
            for line, other in enumerate(self.entities)
            if other is not None and identity_of(other) == wanted
        ]

    def ranges_of(self, entity: Entity) -> list[tuple[int, int]]:
        """Contiguous inclusive line ranges occupied by *entity*."""
        ranges: list[tuple[int, int]] = []
        for line in self.lines_of(entity):
            if ranges and ranges[-1][1] == line - 1:
                ranges[-1] = (ranges[-1][0], line)
            else:
                ranges.append((line, line))
        return ranges


@dataclass(frozen=True)
class Projection:
    lines: list[str]
    index: LineIndex
    referenced_users: frozenset[str] = frozenset()
    missing_users: frozenset[str] = frozenset()


class _Builder:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.index = LineIndex()

    def add(self, text: str, entity: Entity | None = None) -> None:
        self.lines.append(text)
        self.index.entities.append(entity)

    def add_header(self, text: str, section: SectionRef) -> None:
        self.index.sections[len(self.lines)] = section
        self.add(text)

    def build(self, names: NameLookup | None = None) -> Projection:
        if names is None:
            return Projection(self.lines, self.index)
        return Projection(
            self.lines,
            self.index,
            referenced_users=frozenset(names.referenced),
            missing_users=frozenset(names.missing),
        )


def placeholder(text: str) -> Projection:
    """Single informative line with no index entries."""
    builder = _Builder()
    builder.add(text)
    return builder.build()


def format_ts(ts: str, time_format: str = DEFAULT_TIME_FORMAT) -> str:
    try:
        return datetime.fromtimestamp(float(ts)).strftime(time_format)
    except (TypeError, ValueError, OverflowError, OSError):
        return "unknown time"


# ---------------------------------------------------------------------------
# Channel list
# ---------------------------------------------------------------------------

def project_channel_list(sections: list[Section], names: NameLookup) -> Projection:
    builder = _Builder()
    for section in sections:
        if not section.entities and not section.always_shown:
            continue
        glyph = COLLAPSED_GLYPH if section.collapsed else EXPANDED_GLYPH
        builder.add_header(f"{glyph} {section.name}", SectionRef(section.id, section.name))
        if section.collapsed:
            continue
        for channel in section.entities:
            label = channel_label(channel, names) or "unknown"
            builder.add(f"  {KIND_GLYPHS[channel.kind]} {label}", channel)
    return builder.build(names)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

def author_name(message: Message, names: NameLookup) -> str:
    if message.subtype == "bot_message":
        return message.username or "Bot"
    if message.user:
        return names.user_label_or(message.user, UNKNOWN_USER)
    if message.username:
        return message.username
    return "System"


def header_prefix(message: Message) -> str:
    if not message.subtype or message.subtype == "bot_message":
        return ""
    return SUBTYPE_PREFIXES.get(message.subtype, f"[{message.subtype}] ")


def reaction_summary(message: Message) -> str | None:
    if not message.reactions:
        return None
    parts = ", ".join(f":{r.name}: {r.count}" for r in message.reactions)
    return f"  Reactions: {parts}"


def thread_summary(message: Message) -> str | None:
    if not message.is_thread_root:
        return None
    noun = "reply" if message.reply_count == 1 else "replies"
    return f"  Thread: {message.reply_count} {noun}"


def _emit_message(
    builder: _Builder,
    message: Message,
    names: NameLookup,
    time_format: str,
    *,
    prefix: str = "",
    with_thread: bool = True,
) -> None:
    header = f"{prefix}{header_prefix(message)}{author_name(message, names)} ({format_ts(message.ts, time_format)})"
    builder.add(header, message)

    body = split_lines(message_body(message.text, message.blocks, names)) or [EMPTY_BODY]
    for line in body:
        builder.add(f"  {line}", message)

    reactions = reaction_summary(message)
    if reactions:
        builder.add(reactions, message)
    if with_thread:
        thread = thread_summary(message)
        if thread:
            builder.add(thread, message)
    builder.add("")


def sort_messages(messages: list[Message]) -> list[Message]:
    return sorted(messages, key=lambda m: m.sort_key)


def project_messages(
    messages: list[Message] | None,
    names: NameLookup,
    time_format: str = DEFAULT_TIME_FORMAT,
) -> Projection:
    if messages is None:
        return placeholder(LOADING_MESSAGES)
    if not messages:
        return placeholder(NO_MESSAGES)
    builder = _Builder()
    for message in sort_messages(messages):
        _emit_message(builder, message, names, time_format)
    return builder.build(names)


def project_thread(
    thread_ts: str,
    parent: Message | None,
    replies: list[Message] | None,
    names: NameLookup,
    time_format: str = DEFAULT_TIME_FORMAT,
) -> Projection:
    if replies is None:
        return placeholder(LOADING_THREAD)
    builder = _Builder()
    if parent is not None:
        _emit_message(builder, parent, names, time_format, prefix=PARENT_PREFIX, with_thread=False)
    else:
        builder.add(f"{PARENT_PREFIX}{PARENT_UNAVAILABLE} ({format_ts(thread_ts, time_format)})")
        builder.add("")

    # conversations.replies echoes the root; it is already shown as the parent.
    shown = [m for m in sort_messages(replies) if m.ts != thread_ts]
    if not shown:
        builder.add(NO_REPLIES)
    for message in shown:
        _emit_message(builder, message, names, time_format, with_thread=False)
    return builder.build(names)
