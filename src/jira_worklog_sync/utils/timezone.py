"""Resolve the local timezone that provider query boundaries are expressed in."""

import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

FALLBACK_TIMEZONE = "America/New_York"
LOCALTIME_PATH = Path("/etc/localtime")
ZONEINFO_PREFIXES = (
    "/var/db/timezone/zoneinfo/",
    "/usr/share/zoneinfo/",
)


def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ZoneInfoNotFoundError(f"Unknown timezone {name!r}") from e


def system_timezone_name(localtime_path: Path = LOCALTIME_PATH) -> str | None:
    """Read the host timezone name from the localtime symlink.

    Args:
        localtime_path: Path of the localtime symlink.

    Returns:
        IANA timezone name, or None if it cannot be determined.
    """
    try:
        target = os.readlink(localtime_path)
    except OSError:
        return None

    for prefix in ZONEINFO_PREFIXES:
        if target.startswith(prefix):
            return target[len(prefix):]

    # Relative links such as ../usr/share/zoneinfo/Europe/Prague
    marker = "zoneinfo/"
    if marker in target:
        return target.split(marker, 1)[1]
    return None


def resolve_timezone(
    configured: str | None,
    localtime_path: Path = LOCALTIME_PATH,
) -> ZoneInfo:
    """Resolve the effective local timezone.

    Tries the configured timezone, then the host timezone, then falls back to
    America/New_York. Never raises.

    Args:
        configured: Timezone name from the config file.
        localtime_path: Path of the host localtime symlink.

    Returns:
        A usable timezone.
    """
    if configured:
        try:
            return _load_zone(configured)
        except ZoneInfoNotFoundError:
            pass
    logger.warning("Missing or invalid timezone set in config, trying system timezone")

    system_name = system_timezone_name(localtime_path)
    if system_name:
        try:
            return _load_zone(system_name)
        except ZoneInfoNotFoundError:
            pass
    logger.warning(f"Couldn't read the system timezone, falling back to {FALLBACK_TIMEZONE}")

    return ZoneInfo(FALLBACK_TIMEZONE)
