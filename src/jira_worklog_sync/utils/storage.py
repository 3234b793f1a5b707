"""File layout and persistence for jira-worklog-sync."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".jira-worklog-sync"


class StorageManager:
    """Manages the config, nickname, state and cache files."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize storage manager.

        Args:
            config_dir: Directory to store configuration. Defaults to ~/.jira-worklog-sync/
        """
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "config.yaml"
        self.state_file = self.config_dir / "data.json"
        self.cache_dir = self.config_dir / "cache"

    def load_config(self) -> dict[str, Any] | None:
        """Load application config.

        Returns:
            Config dictionary, or None if the config file does not exist.
        """
        if not self.config_file.exists():
            return None
        with open(self.config_file) as f:
            return yaml.safe_load(f) or {}

    def save_config(self, config: dict[str, Any]) -> None:
        """Save application config."""
        with open(self.config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    def load_nicknames(self, filename: str = "nicknames.yaml") -> dict[str, str]:
        """Load the manual client name to issue key overrides.

        The file holds a flat mapping; JSON documents are accepted as well
        since they parse as YAML.

        Args:
            filename: File name relative to the config directory, or an absolute path.

        Returns:
            Override mapping, empty if the file does not exist.
        """
        path = self.config_dir / filename
        if not path.exists():
            logger.debug(f"No nickname file at {path}")
            return {}

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring nickname file {path}: expected a mapping")
            return {}
        return {str(name): str(key) for name, key in data.items()}

    def load_state(self) -> dict[str, Any]:
        """Load synchronization state.

        Returns:
            State dictionary with the last logged timestamp, etc.
        """
        if self.state_file.exists():
            with open(self.state_file) as f:
                return json.load(f)
        return {}

    def save_state(self, state: dict[str, Any]) -> None:
        """Save synchronization state.

        Args:
            state: State dictionary to save.
        """
        with open(self.state_file, "w") as f:
            json.dump(state, f, indent=2)
