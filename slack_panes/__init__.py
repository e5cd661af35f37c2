"""slack-panes - multi-pane terminal client for Slack workspaces."""

__version__ = "0.1.0"
__logo__ = "#"
