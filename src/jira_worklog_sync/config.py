"""Configuration management for jira-worklog-sync."""

from enum import Enum
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError, model_validator

from jira_worklog_sync.errors import ConfigError
from jira_worklog_sync.sync.durations import DEFAULT_ROUND_TO
from jira_worklog_sync.utils.cache import DEFAULT_TTL
from jira_worklog_sync.utils.storage import StorageManager


class FlushTarget(str, Enum):
    """Which caches to drop before a run."""

    SERVICE = "service"
    JIRA = "jira"
    ALL = "all"
    NONE = "none"


class ClockifySettings(BaseModel):
    token: str
    workspace: str
    user_id: str | None = None


class TogglSettings(BaseModel):
    token: str
    workspace: int | str


class JiraSettings(BaseModel):
    token: str
    email: str
    endpoint: str
    project_key: str
    issue_type: str = "Client"


class AppConfig(BaseModel):
    """Contents of config.yaml."""

    service: Literal["clockify", "toggl"] = "clockify"
    timezone: str | None = None
    round_up: bool = True
    round_to: int = DEFAULT_ROUND_TO
    send_descriptions: bool = False
    flush: FlushTarget = FlushTarget.NONE
    cache_ttl: int = DEFAULT_TTL
    http_timeout: float = 30.0
    nicknames_file: str = "nicknames.yaml"
    clockify: ClockifySettings | None = None
    toggl: TogglSettings | None = None
    jira: JiraSettings

    @model_validator(mode="after")
    def _service_section_present(self) -> "AppConfig":
        if getattr(self, self.service) is None:
            raise ValueError(f"service is '{self.service}' but the '{self.service}' section is missing")
        if self.round_to <= 0:
            raise ValueError("round_to must be a positive number of seconds")
        return self


def flush_targets(
    configured: FlushTarget,
    flush_service: bool = False,
    flush_jira: bool = False,
    flush_all: bool = False,
) -> tuple[bool, bool]:
    """Combine the configured flush directive with command line flags.

    Returns:
        Whether to flush the time tracker caches and the Jira mapping cache.
    """
    service = flush_service or flush_all or configured in (FlushTarget.SERVICE, FlushTarget.ALL)
    jira = flush_jira or flush_all or configured in (FlushTarget.JIRA, FlushTarget.ALL)
    return service, jira


class Config:
    """Loads application configuration and the nickname overrides."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            config_dir: Directory holding config.yaml.

        Raises:
            ConfigError: If config.yaml is missing or invalid.
        """
        self.storage = StorageManager(config_dir)

        try:
            raw = self.storage.load_config()
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {self.storage.config_file}: {e}") from e

        if raw is None:
            raise ConfigError(f"Configuration file not found: {self.storage.config_file}")

        try:
            self.settings = AppConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.storage.config_file}:\n{e}") from e

    def get_nicknames(self) -> dict[str, str]:
        """Get manual client name to issue key overrides."""
        try:
            return self.storage.load_nicknames(self.settings.nicknames_file)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {self.settings.nicknames_file}: {e}") from e
