"""Entry point for `python -m slack_panes`."""

from slack_panes.cli.commands import app

if __name__ == "__main__":
    app()
