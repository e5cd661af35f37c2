"""Classification and line projection of cached Slack data."""

from slack_panes.render.classifier import Section, classify
from slack_panes.render.names import NameLookup
from slack_panes.render.projector import (
    LineIndex,
    Projection,
    project_channel_list,
    project_messages,
    project_thread,
)

__all__ = [
    "LineIndex",
    "NameLookup",
    "Projection",
    "Section",
    "classify",
    "project_channel_list",
    "project_messages",
    "project_thread",
]
