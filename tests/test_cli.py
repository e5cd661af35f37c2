"""Tests for the typer CLI."""

import json

from slack_sdk.errors import SlackApiError
from typer.testing import CliRunner

from slack_panes import __version__
from slack_panes.cli.commands import app

runner = CliRunner()


def _isolate(monkeypatch, tmp_path):
    monkeypatch.setenv("SLACK_PANES_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("SLACK_PANES_STORAGE__DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("SLACK_TOKEN", raising=False)
    monkeypatch.delenv("SLACK_PANES_SLACK__TOKEN", raising=False)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_onboard_non_interactive_writes_config(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)

    result = runner.invoke(app, ["onboard", "--non-interactive"])

    assert result.exit_code == 0
    payload = json.loads((tmp_path / "config.json").read_text())
    assert payload["slack"]["default_channel"] == "general"


def test_token_store_and_clear(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)

    stored = runner.invoke(app, ["token", "xoxb-test"])
    assert stored.exit_code == 0
    assert (tmp_path / "data" / "token").read_text() == "xoxb-test"

    status = runner.invoke(app, ["status"])
    assert "configured" in status.stdout

    cleared = runner.invoke(app, ["token", "--clear"])
    assert cleared.exit_code == 0
    assert not (tmp_path / "data" / "token").exists()


def test_run_without_token_fails(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    assert "No Slack token" in result.stdout


def test_prefs_json(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)
    data = tmp_path / "data"
    data.mkdir()
    (data / "prefs.json").write_text(json.dumps({"starred": {"C1": True}}), encoding="utf-8")

    result = runner.invoke(app, ["prefs", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["starred"] == {"C1": True}


class _AuthClient:
    error = None

    def __init__(self, token=None):
        self.token = token

    def auth_test(self):
        if self.error is not None:
            raise self.error
        return {"ok": True, "team": "Acme", "user": "alice"}


def test_status_check_reports_workspace(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)
    monkeypatch.setenv("SLACK_TOKEN", "xoxb-env")
    monkeypatch.setattr("slack_panes.net.gateway.WebClient", _AuthClient)

    result = runner.invoke(app, ["status", "--check"])

    assert result.exit_code == 0
    assert "alice @ Acme" in result.stdout


def test_status_check_failure_exits_nonzero(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)
    monkeypatch.setenv("SLACK_TOKEN", "xoxb-env")
    monkeypatch.setattr(_AuthClient, "error", SlackApiError("failed", {"ok": False, "error": "invalid_auth"}))
    monkeypatch.setattr("slack_panes.net.gateway.WebClient", _AuthClient)

    result = runner.invoke(app, ["status", "--check"])

    assert result.exit_code == 1
    assert "invalid_auth" in result.stdout
