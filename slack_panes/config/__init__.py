"""Configuration module for slack-panes."""

from slack_panes.config.loader import get_config_path, load_config, save_config
from slack_panes.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
