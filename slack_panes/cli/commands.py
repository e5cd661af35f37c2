"""CLI commands for slack-panes."""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.table import Table

from slack_panes import __logo__, __version__

app = typer.Typer(
    name="slack-panes",
    help=f"{__logo__} slack-panes - multi-pane terminal client for Slack",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} slack-panes v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """slack-panes entrypoint."""
    del version


@app.command()
def run(
    channel: str = typer.Option("", "--channel", "-c", help="Channel to open on startup."),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level."),
) -> None:
    """Start the three-pane terminal UI."""
    from slack_panes.config.loader import load_config, resolve_token
    from slack_panes.core.prefs_store import PrefsStore
    from slack_panes.logging_setup import configure_logging
    from slack_panes.net.gateway import SlackWebGateway
    from slack_panes.panes.session import UISession
    from slack_panes.tui.app import SlackPanesApp

    config = load_config()
    configure_logging("DEBUG" if debug else config.logging.level, config.log_path)

    token = resolve_token(config)
    if not token:
        console.print("[red]No Slack token configured.[/red] Run [cyan]slack-panes token[/cyan] first.")
        raise typer.Exit(1)

    default_channel = channel or config.slack.default_channel
    auto_open = bool(channel) or config.slack.auto_open_default_channel

    def session_factory(host, runner) -> UISession:
        gateway = SlackWebGateway(token, runner=runner, history_limit=config.slack.history_limit)
        return UISession(
            host,
            gateway,
            prefs_store=PrefsStore(config.prefs_path),
            keymaps=config.ui.keymaps,
            time_format=config.ui.timestamp_format,
            default_channel=default_channel,
            auto_open_default_channel=auto_open,
        )

    SlackPanesApp(
        session_factory,
        channels_width=config.ui.channels_width,
        thread_width=config.ui.thread_width,
    ).run()


@app.command()
def onboard(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config without prompt."),
    non_interactive: bool = typer.Option(
        False,
        "--non-interactive",
        help="Do not ask interactive questions during setup.",
    ),
) -> None:
    """Write a default config and optionally store a token."""
    from slack_panes.config.loader import get_config_path, save_config, save_token
    from slack_panes.config.schema import Config

    config_path = get_config_path()
    if config_path.exists():
        if not force and non_interactive:
            console.print(f"[yellow]Config already exists at {config_path} (skip).[/yellow]")
            raise typer.Exit()
        if not force:
            console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
            if not typer.confirm("Overwrite?"):
                raise typer.Exit()

    config = Config()
    if not non_interactive:
        config.slack.default_channel = typer.prompt(
            "Default channel", default=config.slack.default_channel
        ).strip().lstrip("#")
        token = typer.prompt("Slack token (leave empty to skip)", default="", show_default=False).strip()
        if token:
            save_token(token, config.token_path)
            console.print(f"[green]OK[/green] Stored token at {config.token_path}")

    save_config(config, config_path)
    config.data_path.mkdir(parents=True, exist_ok=True)
    console.print(f"[green]OK[/green] Created config at {config_path}")
    console.print("\nNext steps:")
    console.print("  1. Store a token: [cyan]slack-panes token[/cyan] (or set SLACK_TOKEN)")
    console.print("  2. Start the UI: [cyan]slack-panes run[/cyan]")


@app.command()
def token(
    value: str = typer.Argument("", help="Token to store; prompted when omitted."),
    clear: bool = typer.Option(False, "--clear", help="Delete the stored token."),
) -> None:
    """Store or clear the Slack API token."""
    from slack_panes.config.loader import delete_token, load_config, save_token

    config = load_config()
    if clear:
        if delete_token(config.token_path):
            console.print(f"[green]OK[/green] Removed {config.token_path}")
        else:
            console.print("[yellow]No stored token.[/yellow]")
        return

    secret = value.strip() or typer.prompt("Slack token", hide_input=True).strip()
    if not secret:
        console.print("[red]Empty token, nothing stored.[/red]")
        raise typer.Exit(1)
    save_token(secret, config.token_path)
    console.print(f"[green]OK[/green] Stored token at {config.token_path}")


@app.command()
def status(
    check: bool = typer.Option(False, "--check", help="Verify the token against Slack."),
) -> None:
    """Show config, token and preference status."""
    from slack_panes.config.loader import get_config_path, load_config, resolve_token
    from slack_panes.core.prefs_store import PrefsStore
    from slack_panes.net.gateway import SlackWebGateway

    config_path = get_config_path()
    config = load_config()
    prefs = PrefsStore(config.prefs_path).load()

    console.print(f"{__logo__} slack-panes Status\n")
    console.print(f"Config: {config_path} {'[green]OK[/green]' if config_path.exists() else '[red]missing[/red]'}")
    console.print(f"Token: {'[green]configured[/green]' if resolve_token(config) else '[red]not set[/red]'}")
    console.print(f"Default channel: #{config.slack.default_channel}")
    console.print(f"Preferences: {config.prefs_path}")
    console.print(
        f"  starred={len(prefs.starred)} sections={len(prefs.sections)} "
        f"assigned={len(prefs.channel_sections)} collapsed={sum(prefs.collapsed.values())}"
    )

    if not check:
        return
    token = resolve_token(config)
    if not token:
        console.print("Connection: [red]no token to check[/red]")
        raise typer.Exit(1)
    results: list[tuple[bool, object]] = []
    SlackWebGateway(token).test_connection(lambda success, payload: results.append((success, payload)))
    success, payload = results[0]
    if not success:
        console.print(f"Connection: [red]{payload}[/red]")
        raise typer.Exit(1)
    console.print(f"Connection: [green]OK[/green] {payload.user} @ {payload.team}")


@app.command()
def prefs(
    as_json: bool = typer.Option(False, "--json", help="Print the raw stored payload."),
) -> None:
    """Show persisted view preferences."""
    from slack_panes.config.loader import load_config
    from slack_panes.core.prefs_store import PrefsStore, prefs_to_payload

    config = load_config()
    stored = PrefsStore(config.prefs_path).load()
    if as_json:
        console.print_json(json.dumps(prefs_to_payload(stored)))
        return

    table = Table(title="Custom sections")
    table.add_column("Section")
    table.add_column("Channels")
    for section_id, name in sorted(stored.sections.items(), key=lambda item: (item[1], item[0])):
        members = sorted(cid for cid, sid in stored.channel_sections.items() if sid == section_id)
        table.add_row(name, ", ".join(members) or "-")
    console.print(f"Starred: {', '.join(sorted(stored.starred)) or '-'}")
    collapsed = sorted(sid for sid, flag in stored.collapsed.items() if flag)
    console.print(f"Collapsed: {', '.join(collapsed) or '-'}")
    console.print(table)


if __name__ == "__main__":
    app()
