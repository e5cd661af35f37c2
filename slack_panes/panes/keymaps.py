"""Default key bindings per pane kind (key -> action id)."""

from __future__ import annotations

DEFAULT_KEYMAPS: dict[str, dict[str, str]] = {
    "channels": {
        "enter": "select",
        "r": "refresh",
        "q": "close",
        "s": "toggle_star",
        "c": "toggle_section",
        "g": "move_to_section",
    },
    "messages": {
        "enter": "open_thread",
        "r": "refresh",
        "m": "send_message",
        "a": "add_reaction",
        "u": "upload_file",
        "q": "close",
    },
    "thread": {
        "r": "refresh",
        "m": "reply",
        "a": "add_reaction",
        "q": "close_thread",
    },
}


def merge_keymaps(overrides: dict[str, dict[str, str]] | None) -> dict[str, dict[str, str]]:
    """Overlay user bindings on the defaults; an empty action id unbinds a key."""
    merged = {kind: dict(keys) for kind, keys in DEFAULT_KEYMAPS.items()}
    for kind, keys in (overrides or {}).items():
        target = merged.setdefault(kind, {})
        for key, action in keys.items():
            if action:
                target[key] = action
            else:
                target.pop(key, None)
    return merged
