"""Pytest configuration and fixtures."""

import copy
import tempfile
from pathlib import Path
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest
import yaml

from jira_worklog_sync.models import Client, Project
from jira_worklog_sync.utils import CacheStore, CursorStore, StorageManager

SAMPLE_CONFIG = {
    "service": "clockify",
    "timezone": "Europe/Prague",
    "round_up": True,
    "clockify": {
        "token": "clockify_token",
        "workspace": "ws_123",
        "user_id": "user_123",
    },
    "jira": {
        "token": "jira_token",
        "email": "dev@example.com",
        "endpoint": "https://example.atlassian.net",
        "project_key": "PROJ",
    },
}


class FakeClock:
    """Settable epoch clock for cache tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def temp_config_dir() -> Path:
    """Create a temporary configuration directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_manager(temp_config_dir: Path) -> StorageManager:
    """Create a storage manager with temporary directory."""
    return StorageManager(temp_config_dir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_store(storage_manager: StorageManager, clock: FakeClock) -> CacheStore:
    """Create a cache store driven by a fake clock."""
    return CacheStore(storage_manager.cache_dir, clock=clock)


@pytest.fixture
def cursor_store(storage_manager: StorageManager) -> CursorStore:
    return CursorStore(storage_manager)


@pytest.fixture
def sample_config() -> dict:
    """A valid config dictionary that tests may modify."""
    return copy.deepcopy(SAMPLE_CONFIG)


@pytest.fixture
def config_file(temp_config_dir: Path, sample_config: dict) -> Path:
    """Write a valid config.yaml into the temporary directory."""
    path = temp_config_dir / "config.yaml"
    path.write_text(yaml.safe_dump(sample_config))
    return path


@pytest.fixture
def utc_tz() -> ZoneInfo:
    return ZoneInfo("UTC")


@pytest.fixture
def sample_projects() -> dict[str, Project]:
    """Projects indexed by ID, one without a client."""
    return {
        "p1": Project(id="p1", name="Website", client_id="c1"),
        "p2": Project(id="p2", name="Internal", client_id=None),
        "p3": Project(id="p3", name="Support", client_id="c2"),
    }


@pytest.fixture
def sample_clients() -> dict[str, Client]:
    return {
        "c1": Client(id="c1", name="Acme"),
        "c2": Client(id="c2", name="Globex"),
    }


@pytest.fixture
def mock_poster() -> MagicMock:
    """Create a worklog poster that accepts every worklog."""
    poster = MagicMock()
    poster.post_worklog.return_value = True
    return poster
