"""Channel list pane: sections, stars, custom groups and selection."""

from __future__ import annotations

import re
from typing import Any, Callable

from loguru import logger

from slack_panes.core.errors import as_failure
from slack_panes.core.events import CHANNEL_SELECTED
from slack_panes.core.models import Channel
from slack_panes.panes.base import CURRENT_STYLE, PaneContext, PaneController
from slack_panes.render.classifier import channel_label, classify
from slack_panes.render.names import NameLookup
from slack_panes.render.projector import (
    LOADING_CHANNELS,
    Projection,
    SectionRef,
    placeholder,
    project_channel_list,
)

CUSTOM_PREFIX = "custom:"


def section_slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "section"


class ChannelListPane(PaneController):
    kind = "channels"

    def __init__(self, ctx: PaneContext, name: str | None = None) -> None:
        super().__init__(ctx, name)
        self.on_channels_loaded: Callable[[], None] | None = None

    def title(self) -> str:
        return "Channels"

    def project(self, names: NameLookup) -> Projection:
        cache = self.ctx.cache
        if not cache.channels_loaded():
            return placeholder(LOADING_CHANNELS)
        sections = classify(cache.get_channels(), cache.preferences(), names)
        return project_channel_list(sections, names)

    def extra_highlights(self) -> None:
        current = self.ctx.cache.get_current_channel()
        channel = self.ctx.cache.get_channel(current.id) if current else None
        if channel is None:
            return
        for start, end in self.index.ranges_of(channel):
            self.ctx.host.highlight_range(self.handle, start, end, CURRENT_STYLE)

    def on_open(self) -> None:
        if not self.ctx.cache.channels_loaded():
            self.refresh()

    def actions(self) -> dict[str, Callable[[], None]]:
        return {
            "select": self.select,
            "refresh": self.refresh,
            "toggle_star": self.toggle_star,
            "toggle_section": self.toggle_section,
            "move_to_section": self.move_to_section,
            "close": self.close_session,
        }

    # ------------------------------------------------------------------ #
    # Cursor helpers                                                       #
    # ------------------------------------------------------------------ #

    def _channel_at_cursor(self) -> Channel | None:
        entity = self.cursor_entity()
        return entity if isinstance(entity, Channel) else None

    def _section_at_cursor(self) -> SectionRef | None:
        """Header under the cursor, else the header of the enclosing section."""
        line = self.cursor_line()
        for number in range(line, -1, -1):
            section = self.index.section_at(number)
            if section is not None:
                return section
        return None

    # ------------------------------------------------------------------ #
    # Actions                                                              #
    # ------------------------------------------------------------------ #

    def refresh(self) -> None:
        self.ctx.resolver.forget_failures()
        self.ctx.gateway.fetch_channels(self._on_channels)

    def _on_channels(self, success: bool, payload: Any) -> None:
        if not self.is_open:
            logger.debug("Dropping channel list for closed pane")
            return
        if not success:
            self.ctx.report(as_failure(payload, "load channels"))
            return
        first_load = not self.ctx.cache.channels_loaded()
        self.ctx.cache.set_channels(payload)
        logger.info("Loaded {} channels", len(payload))
        self.render()
        if first_load and self.on_channels_loaded is not None:
            self.on_channels_loaded()

    def select(self) -> None:
        section = self.index.section_at(self.cursor_line())
        if section is not None:
            self._toggle(section)
            return
        channel = self._channel_at_cursor()
        if channel is None:
            return
        label = channel_label(channel, NameLookup(self.ctx.cache)) or channel.id
        self.ctx.bus.emit(CHANNEL_SELECTED, channel.id, label)

    def toggle_section(self) -> None:
        section = self._section_at_cursor()
        if section is not None:
            self._toggle(section)

    def _toggle(self, section: SectionRef) -> None:
        cache = self.ctx.cache
        cache.set_section_collapsed(section.id, not cache.is_section_collapsed(section.id))
        self.ctx.save_preferences()
        self.render()

    def toggle_star(self) -> None:
        channel = self._channel_at_cursor()
        if channel is None:
            return
        cache = self.ctx.cache
        cache.set_starred(channel.id, not cache.is_starred(channel.id))
        self.ctx.save_preferences()
        self.render()

    def move_to_section(self) -> None:
        channel = self._channel_at_cursor()
        if channel is None:
            return
        self.prompt(
            "Move to section (empty to clear): ",
            lambda answer: self.assign_section(channel.id, answer),
            allow_empty=True,
        )

    def assign_section(self, channel_id: str, section_name: str) -> None:
        """Put *channel_id* in the custom section named *section_name*.

        An empty name unassigns it. Custom sections left without members
        are removed.
        """
        cache = self.ctx.cache
        section_name = section_name.strip()
        if not section_name:
            cache.set_channel_section(channel_id, None)
        else:
            cache.set_channel_section(channel_id, self._ensure_section(section_name))
        self._prune_sections()
        self.ctx.save_preferences()
        self.render()

    def _ensure_section(self, section_name: str) -> str:
        cache = self.ctx.cache
        sections = cache.custom_sections()
        for section_id, existing in sections.items():
            if existing == section_name:
                return section_id
        base = f"{CUSTOM_PREFIX}{section_slug(section_name)}"
        section_id, suffix = base, 2
        while section_id in sections:
            section_id = f"{base}-{suffix}"
            suffix += 1
        cache.add_custom_section(section_id, section_name)
        logger.info("Created section {} ({})", section_name, section_id)
        return section_id

    def _prune_sections(self) -> None:
        prefs = self.ctx.cache.preferences()
        used = set(prefs.channel_sections.values())
        for section_id in prefs.sections:
            if section_id not in used:
                self.ctx.cache.remove_custom_section(section_id)
