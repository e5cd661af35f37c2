"""Persistence helpers for starred channels, custom sections and collapsed state."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from slack_panes.core.cache import UIPreferences


def default_prefs_path() -> Path:
    """Return default path for persisted view preferences."""
    return Path.home() / ".slack-panes" / "prefs.json"


def _string_map(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items()}


def prefs_to_payload(prefs: UIPreferences) -> dict[str, Any]:
    return {
        "starred": {channel_id: True for channel_id in sorted(prefs.starred)},
        "sections": dict(sorted(prefs.sections.items())),
        "channel_sections": dict(sorted(prefs.channel_sections.items())),
        "collapsed": dict(sorted(prefs.collapsed.items())),
    }


def prefs_from_payload(payload: dict[str, Any]) -> UIPreferences:
    starred_raw = payload.get("starred")
    starred = {str(k) for k, v in starred_raw.items() if v} if isinstance(starred_raw, dict) else set()
    collapsed_raw = payload.get("collapsed")
    collapsed = (
        {str(k): bool(v) for k, v in collapsed_raw.items()} if isinstance(collapsed_raw, dict) else {}
    )
    return UIPreferences(
        starred=starred,
        sections=_string_map(payload.get("sections")),
        channel_sections=_string_map(payload.get("channel_sections")),
        collapsed=collapsed,
    )


class PrefsStore:
    """JSON file holding :class:`UIPreferences` between sessions."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_prefs_path()

    def load(self) -> UIPreferences:
        if not self.path.exists():
            return UIPreferences()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read preferences from {}: {}", self.path, exc)
            return UIPreferences()
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed preferences file {}", self.path)
            return UIPreferences()
        return prefs_from_payload(payload)

    def save(self, prefs: UIPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = prefs_to_payload(prefs)
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Saved preferences to {}", self.path)
