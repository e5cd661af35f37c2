"""Network collaborator: Slack Web API access behind a callback interface."""

from slack_panes.net.gateway import Callback, SlackGateway, SlackWebGateway, inline_runner

__all__ = ["Callback", "SlackGateway", "SlackWebGateway", "inline_runner"]
