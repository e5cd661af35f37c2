"""CLI module for slack-panes."""
