"""Partition channels into the sections of the channel list."""

from __future__ import annotations

from dataclasses import dataclass

from slack_panes.core.cache import UIPreferences
from slack_panes.core.models import Channel, ChannelKind
from slack_panes.render.names import UNKNOWN_USER, NameLookup

STARRED = "starred"
CHANNELS = "channels"
PRIVATE = "private"
DIRECT = "dm"
GROUP = "group"

SECTION_NAMES = {
    STARRED: "Starred",
    CHANNELS: "Channels",
    PRIVATE: "Private Channels",
    DIRECT: "Direct Messages",
    GROUP: "Group Messages",
}

KIND_SECTIONS = {
    ChannelKind.PUBLIC: CHANNELS,
    ChannelKind.PRIVATE: PRIVATE,
    ChannelKind.DIRECT: DIRECT,
    ChannelKind.GROUP: GROUP,
}

# Rendered even when nothing is classified into them.
ALWAYS_SHOWN = frozenset({STARRED, CHANNELS})


@dataclass(frozen=True)
class Section:
    """One collapsible group of the channel list."""

    id: str
    name: str
    collapsed: bool
    entities: tuple[Channel, ...]

    @property
    def always_shown(self) -> bool:
        return self.id in ALWAYS_SHOWN


def channel_label(channel: Channel, names: NameLookup) -> str | None:
    """Name used for display and sorting.

    Direct conversations are named after the peer user; until that user
    is cached the provisional ``unknown-user`` label is used.
    """
    if channel.kind is ChannelKind.DIRECT:
        if channel.user_id:
            return names.user_label_or(channel.user_id, UNKNOWN_USER)
        return channel.name or UNKNOWN_USER
    return channel.name


def section_for(channel: Channel, prefs: UIPreferences) -> str:
    """First match wins: starred, assigned custom section, kind default."""
    if channel.id in prefs.starred:
        return STARRED
    assigned = prefs.channel_sections.get(channel.id)
    if assigned is not None and assigned in prefs.sections:
        return assigned
    return KIND_SECTIONS[channel.kind]


def classify(channels: list[Channel], prefs: UIPreferences, names: NameLookup) -> list[Section]:
    """Return the fixed, ordered section list for *channels*."""
    buckets: dict[str, list[tuple[str, Channel]]] = {}
    for channel in channels:
        label = channel_label(channel, names) or ""
        buckets.setdefault(section_for(channel, prefs), []).append((label, channel))

    custom_ids = sorted(prefs.sections, key=lambda sid: (prefs.sections[sid], sid))
    order = [STARRED, *custom_ids, CHANNELS, PRIVATE, DIRECT, GROUP]

    sections: list[Section] = []
    for section_id in order:
        members = sorted(buckets.get(section_id, []), key=lambda item: (item[0], item[1].id))
        sections.append(
            Section(
                id=section_id,
                name=prefs.sections.get(section_id) or SECTION_NAMES.get(section_id, section_id),
                collapsed=prefs.collapsed.get(section_id, False),
                entities=tuple(channel for _, channel in members),
            )
        )
    return sections
