"""Load and save the JSON config file, and keep the API token on disk."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from slack_panes.config.schema import Config

TOKEN_ENV = "SLACK_TOKEN"


def get_config_path() -> Path:
    """Return the config file path, honouring ``SLACK_PANES_CONFIG``."""
    override = os.environ.get("SLACK_PANES_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".slack-panes" / "config.json"


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def snake_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case.

    Keymap tables are left alone below the ``keymaps`` key since their
    keys are key names, not fields.
    """
    if isinstance(data, dict):
        converted: dict[str, Any] = {}
        for key, value in data.items():
            snake = camel_to_snake(str(key))
            converted[snake] = value if snake == "keymaps" else snake_keys(value)
        return converted
    if isinstance(data, list):
        return [snake_keys(item) for item in data]
    return data


def load_config(path: Path | None = None) -> Config:
    """Read the config file; environment variables override file values."""
    target = path or get_config_path()
    data: dict[str, Any] = {}
    if target.exists():
        try:
            raw = json.loads(target.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                data = snake_keys(raw)
            else:
                logger.warning("Ignoring non-object config in {}", target)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read config {}: {}", target, exc)

    try:
        config = Config(**data)
    except ValidationError as exc:
        logger.warning("Invalid config {}, using defaults: {}", target, exc)
        config = Config()
    return config


def save_config(config: Config, path: Path | None = None) -> Path:
    target = path or get_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json")
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug("Saved config to {}", target)
    return target


# ---------------------------------------------------------------------------
# Token storage
# ---------------------------------------------------------------------------

def save_token(token: str, path: Path) -> None:
    """Write *token* readable by the owner only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(token.strip())
    os.chmod(path, 0o600)


def load_token(path: Path) -> str | None:
    if not path.exists():
        return None
    try:
        token = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.warning("Failed to read token {}: {}", path, exc)
        return None
    return token or None


def delete_token(path: Path) -> bool:
    if not path.exists():
        return False
    path.unlink()
    return True


def resolve_token(config: Config) -> str | None:
    """Token lookup order: config/env setting, ``SLACK_TOKEN``, stored file."""
    return (
        config.slack.token.strip()
        or os.environ.get(TOKEN_ENV, "").strip()
        or load_token(config.token_path)
    )
