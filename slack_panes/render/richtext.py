"""Flatten Slack rich-text blocks and mrkdwn markup into plain text."""

from __future__ import annotations

import html
import re
from typing import Any, Sequence

from slack_panes.render.names import NameLookup

USER_PLACEHOLDER = "@user"
GROUP_PLACEHOLDER = "@group"
CHANNEL_PLACEHOLDER = "#channel"

# Elements whose content forms its own line.
_LINE_ELEMENTS = frozenset({"rich_text_section", "rich_text_preformatted", "rich_text_quote"})

_MARKUP_RE = re.compile(r"<([^<>]+)>")


def mention_user(user_id: str, names: NameLookup) -> str:
    label = names.user_label_or(user_id, "")
    return f"@{label}" if label else USER_PLACEHOLDER


def mention_channel(channel_id: str, names: NameLookup, fallback: str = "") -> str:
    name = names.channel_name(channel_id) or fallback
    return f"#{name}" if name else CHANNEL_PLACEHOLDER


def _end_line(out: list[str]) -> None:
    if out and not out[-1].endswith("\n"):
        out.append("\n")


def _walk(element: Any, names: NameLookup, out: list[str]) -> None:
    if not isinstance(element, dict):
        return
    etype = element.get("type")
    if etype == "text":
        out.append(str(element.get("text", "")))
    elif etype == "user":
        out.append(mention_user(str(element.get("user_id", "")), names))
    elif etype == "usergroup":
        out.append(GROUP_PLACEHOLDER)
    elif etype == "channel":
        out.append(mention_channel(str(element.get("channel_id", "")), names))
    elif etype == "link":
        out.append(str(element.get("text") or element.get("url", "")))
    elif etype == "emoji":
        out.append(f":{element.get('name', '')}:")
    elif etype == "broadcast":
        out.append(f"@{element.get('range', 'here')}")
    elif etype == "date":
        out.append(str(element.get("fallback", "")))

    children = element.get("elements")
    if isinstance(children, list):
        for child in children:
            _walk(child, names, out)
    if etype in _LINE_ELEMENTS:
        _end_line(out)


def flatten_blocks(blocks: Sequence[dict[str, Any]], names: NameLookup) -> str:
    """Depth-first flattening of a message's ``blocks`` tree."""
    out: list[str] = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        text = block.get("text")
        if block.get("type") == "rich_text" and isinstance(block.get("elements"), list):
            for element in block["elements"]:
                _walk(element, names, out)
        elif isinstance(text, dict) and text.get("text"):
            out.append(str(text["text"]))
        elif isinstance(text, str):
            out.append(text)
        _end_line(out)
    return "".join(out)


def _replace_markup(match: re.Match[str], names: NameLookup) -> str:
    body = match.group(1)
    target, _, label = body.partition("|")
    if target.startswith("@"):
        return mention_user(target[1:], names)
    if target.startswith("#"):
        return mention_channel(target[1:], names, fallback=label)
    if target.startswith("!subteam^"):
        return label or GROUP_PLACEHOLDER
    if target.startswith("!"):
        return f"@{label or target[1:]}"
    return label or target


def render_markup(text: str, names: NameLookup) -> str:
    """Resolve ``<@U…>``, ``<#C…|name>``, ``<!here>`` and ``<url|label>`` tokens."""
    resolved = _MARKUP_RE.sub(lambda m: _replace_markup(m, names), text)
    return html.unescape(resolved)


def message_body(text: str, blocks: Sequence[dict[str, Any]], names: NameLookup) -> str:
    """Rich content wins over plain text when it yields anything."""
    if blocks:
        flattened = flatten_blocks(blocks, names)
        if flattened.strip():
            return flattened
    return render_markup(text, names)


def split_lines(text: str) -> list[str]:
    """Split on line breaks, dropping empty lines."""
    return [line for line in re.split(r"[\r\n]+", text) if line]
