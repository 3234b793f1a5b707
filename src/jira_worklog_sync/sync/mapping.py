"""Client name to Jira issue key mapping."""

import logging
from typing import Protocol

from jira_worklog_sync.errors import FetchError
from jira_worklog_sync.utils.cache import DEFAULT_TTL, CacheStore

logger = logging.getLogger(__name__)

MAPPING_STORE = "mapping"


class ClientIssueSource(Protocol):
    """Anything that can list client issues, normally a JiraClient."""

    def client_issue_mapping(self, project_key: str, issue_type: str = "Client") -> dict[str, str]:
        ...


def normalize_client_name(name: str) -> str:
    """Normalize a client display name for lookups."""
    return name.strip().casefold()


def build_client_mapping(
    jira: ClientIssueSource,
    nicknames: dict[str, str],
    project_key: str,
    issue_type: str = "Client",
) -> dict[str, str]:
    """Build the mapping from Jira client issues and manual nicknames.

    Nicknames are applied last, so they win over issue summaries that
    normalize to the same name. A failed Jira query leaves only the nicknames.

    Args:
        jira: Source of client issues.
        nicknames: Manual overrides of client name (or issue key) to issue key.
        project_key: Jira project holding client issues.
        issue_type: Issue type of client issues.

    Returns:
        Normalized client name to issue key.
    """
    mapping: dict[str, str] = {}

    try:
        issues = jira.client_issue_mapping(project_key, issue_type)
    except FetchError as e:
        logger.warning(f"Could not load client issues from Jira, using nicknames only: {e}")
        issues = {}

    if not issues:
        logger.warning(f"No unresolved {issue_type} issues found in Jira project {project_key}")

    for summary, key in issues.items():
        mapping[normalize_client_name(summary)] = key

    for name, key in nicknames.items():
        mapping[normalize_client_name(name)] = key

    return mapping


class MappingResolver:
    """Resolves client display names to issue keys for one sync run."""

    def __init__(self, mapping: dict[str, str]) -> None:
        self._mapping = {normalize_client_name(name): key for name, key in mapping.items()}

    def resolve(self, client_name: str) -> str | None:
        """Get the issue key for a client.

        Args:
            client_name: Client display name.

        Returns:
            Issue key, or None if the client is not mapped.
        """
        return self._mapping.get(normalize_client_name(client_name))

    def items(self) -> list[tuple[str, str]]:
        """Get the mapping as (normalized name, issue key) pairs."""
        return list(self._mapping.items())

    def __len__(self) -> int:
        return len(self._mapping)


def load_client_mapping(
    cache: CacheStore,
    jira: ClientIssueSource,
    nicknames: dict[str, str],
    project_key: str,
    issue_type: str = "Client",
    refresh: bool = False,
    ttl_seconds: int = DEFAULT_TTL,
) -> MappingResolver:
    """Get the client mapping from cache, rebuilding it when needed.

    Args:
        cache: Cache store.
        jira: Source of client issues.
        nicknames: Manual overrides.
        project_key: Jira project holding client issues.
        issue_type: Issue type of client issues.
        refresh: Rebuild even if a cached mapping is available.
        ttl_seconds: Lifetime of the rebuilt mapping in the cache.

    Returns:
        Resolver over the mapping.
    """
    if not refresh:
        cached = cache.get(MAPPING_STORE)
        if isinstance(cached, dict):
            return MappingResolver(cached)

    logger.info("Refreshing Jira client mapping")
    mapping = build_client_mapping(jira, nicknames, project_key, issue_type)
    cache.set(MAPPING_STORE, mapping, ttl_seconds)
    return MappingResolver(mapping)
