"""TTL-based JSON cache for provider reference data and the client mapping."""

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60 * 60 * 12


class CacheStore:
    """Stores one JSON document per named store.

    Each document looks like ``{"expires": <epoch seconds>, "<store>": <payload>}``.
    """

    def __init__(self, cache_dir: Path, clock: Callable[[], float] = time.time) -> None:
        """Initialize cache store.

        Args:
            cache_dir: Directory holding the cache documents.
            clock: Returns the current epoch time in seconds.
        """
        self.cache_dir = cache_dir
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.clock = clock

    def path_for(self, store: str) -> Path:
        """Get the cache document path for a store."""
        return self.cache_dir / f"{store}.json"

    def get(self, store: str) -> Any | None:
        """Read a cached payload.

        Args:
            store: Store name.

        Returns:
            The payload, or None if missing, unreadable or expired.
        """
        path = self.path_for(store)
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Problem retrieving cached {store}: {e}")
            return None

        if not isinstance(data, dict) or store not in data:
            logger.warning(f"Problem retrieving cached {store}: unexpected document")
            return None

        try:
            expires = float(data["expires"])
        except (KeyError, TypeError, ValueError):
            return None

        if self.clock() > expires:
            logger.debug(f"Cached {store} expired")
            return None

        return data[store]

    def set(self, store: str, payload: Any, ttl_seconds: int = DEFAULT_TTL) -> None:
        """Write a payload, replacing any previous document.

        Args:
            store: Store name.
            payload: JSON-serializable data.
            ttl_seconds: Seconds until the document expires.
        """
        document = {
            "expires": int(self.clock()) + ttl_seconds,
            store: payload,
        }
        with open(self.path_for(store), "w") as f:
            json.dump(document, f)

    def expires_at(self, store: str) -> float | None:
        """Get the expiry timestamp of a store, ignoring whether it has passed."""
        path = self.path_for(store)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                return float(json.load(f)["expires"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError):
            return None

    def invalidate(self, store: str) -> None:
        """Delete the cache document for a store."""
        path = self.path_for(store)
        if path.exists():
            path.unlink()
            logger.info(f"Flushed cached {store}")
