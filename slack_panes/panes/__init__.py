"""Pane controllers and the windowing host they draw on."""

from slack_panes.panes.base import PaneContext, PaneController, PaneState
from slack_panes.panes.channels import ChannelListPane
from slack_panes.panes.host import MemoryPaneHost, PaneHost
from slack_panes.panes.messages import MessagesPane
from slack_panes.panes.session import UISession
from slack_panes.panes.thread import ThreadPane

__all__ = [
    "ChannelListPane",
    "MemoryPaneHost",
    "MessagesPane",
    "PaneContext",
    "PaneController",
    "PaneHost",
    "PaneState",
    "ThreadPane",
    "UISession",
]
