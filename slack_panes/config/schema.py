"""Configuration schema for slack-panes."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from slack_panes.panes.keymaps import DEFAULT_KEYMAPS
from slack_panes.render.projector import DEFAULT_TIME_FORMAT


class SlackConfig(BaseModel):
    """Workspace access."""

    token: str = ""
    default_channel: str = "general"
    auto_open_default_channel: bool = True
    history_limit: int = Field(default=100, ge=1, le=1000)


class UIConfig(BaseModel):
    """Pane layout and bindings."""

    timestamp_format: str = DEFAULT_TIME_FORMAT
    channels_width: int = 30
    thread_width: int = 50
    keymaps: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {kind: dict(keys) for kind, keys in DEFAULT_KEYMAPS.items()}
    )


class StorageConfig(BaseModel):
    """Where preferences and the stored token live."""

    data_dir: str = "~/.slack-panes"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: str = ""  # empty: slack-panes.log in the data dir


class Config(BaseSettings):
    """Root configuration for slack-panes."""

    slack: SlackConfig = Field(default_factory=SlackConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Environment variables outrank values read from the config file."""
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def data_path(self) -> Path:
        """Get expanded data directory."""
        return Path(self.storage.data_dir).expanduser()

    @property
    def prefs_path(self) -> Path:
        return self.data_path / "prefs.json"

    @property
    def token_path(self) -> Path:
        return self.data_path / "token"

    @property
    def log_path(self) -> Path:
        if self.logging.file:
            return Path(self.logging.file).expanduser()
        return self.data_path / "slack-panes.log"

    model_config = ConfigDict(
        env_prefix="SLACK_PANES_",
        env_nested_delimiter="__",
        extra="ignore",
    )
