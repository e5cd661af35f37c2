"""Domain state, events and errors shared by every pane."""

from slack_panes.core.cache import DomainCache, UIPreferences
from slack_panes.core.events import CHANNEL_SELECTED, THREAD_SELECTED, USER_UPDATED, EventBus

__all__ = [
    "CHANNEL_SELECTED",
    "THREAD_SELECTED",
    "USER_UPDATED",
    "DomainCache",
    "EventBus",
    "UIPreferences",
]
