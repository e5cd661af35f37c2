"""Tests for config loading and token storage."""

import json
import os
import stat

from slack_panes.config.loader import (
    camel_to_snake,
    delete_token,
    load_config,
    load_token,
    resolve_token,
    save_config,
    save_token,
)
from slack_panes.config.schema import Config


def test_defaults(tmp_path):
    config = load_config(tmp_path / "missing.json")

    assert config.slack.default_channel == "general"
    assert config.ui.keymaps["channels"]["enter"] == "select"
    assert config.ui.timestamp_format == "%Y-%m-%d %H:%M:%S"


def test_camel_case_file_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "slack": {"defaultChannel": "dev", "historyLimit": 20},
                "ui": {"keymaps": {"channels": {"ctrl+s": "toggle_star"}}},
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.slack.default_channel == "dev"
    assert config.slack.history_limit == 20
    assert config.ui.keymaps == {"channels": {"ctrl+s": "toggle_star"}}


def test_invalid_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"slack": {"historyLimit": 0}}), encoding="utf-8")
    assert load_config(path).slack.history_limit == 100

    path.write_text("{broken", encoding="utf-8")
    assert load_config(path).slack.history_limit == 100


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SLACK_PANES_SLACK__DEFAULT_CHANNEL", "ops")
    assert load_config(tmp_path / "missing.json").slack.default_channel == "ops"


def test_environment_overrides_saved_file(monkeypatch, tmp_path):
    path = save_config(Config(), tmp_path / "config.json")
    monkeypatch.setenv("SLACK_PANES_SLACK__TOKEN", "xoxb-env")
    monkeypatch.setenv("SLACK_PANES_SLACK__DEFAULT_CHANNEL", "ops")

    config = load_config(path)

    assert config.slack.token == "xoxb-env"
    assert config.slack.default_channel == "ops"
    assert config.slack.history_limit == 100


def test_save_and_reload(tmp_path):
    path = tmp_path / "config.json"
    config = Config()
    config.slack.default_channel = "random"

    save_config(config, path)

    assert load_config(path).slack.default_channel == "random"


def test_camel_to_snake():
    assert camel_to_snake("autoOpenDefaultChannel") == "auto_open_default_channel"
    assert camel_to_snake("level") == "level"


class TestTokenStorage:
    def test_round_trip_with_owner_only_permissions(self, tmp_path):
        path = tmp_path / "data" / "token"

        save_token(" xoxb-123 \n", path)

        assert load_token(path) == "xoxb-123"
        if os.name == "posix":
            assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_delete(self, tmp_path):
        path = tmp_path / "token"
        save_token("xoxb-1", path)

        assert delete_token(path) is True
        assert delete_token(path) is False
        assert load_token(path) is None

    def test_resolution_order(self, monkeypatch, tmp_path):
        monkeypatch.delenv("SLACK_TOKEN", raising=False)
        monkeypatch.delenv("SLACK_PANES_SLACK__TOKEN", raising=False)
        config = Config()
        config.storage.data_dir = str(tmp_path)
        assert resolve_token(config) is None

        save_token("xoxb-file", config.token_path)
        assert resolve_token(config) == "xoxb-file"

        monkeypatch.setenv("SLACK_TOKEN", "xoxb-env")
        assert resolve_token(config) == "xoxb-env"

        config.slack.token = "xoxb-config"
        assert resolve_token(config) == "xoxb-config"
