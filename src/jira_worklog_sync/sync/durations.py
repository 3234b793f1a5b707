"""Duration rounding and display helpers."""

DEFAULT_ROUND_TO = 15 * 60


def round_up(seconds: int, round_to: int = DEFAULT_ROUND_TO) -> int:
    """Round a positive duration up to the next multiple of ``round_to``.

    A duration that is already a multiple stays unchanged; zero stays zero.

    >>> round_up(1)
    900
    >>> round_up(901)
    1800
    """
    if seconds > 0:
        remainder = seconds % round_to
        if remainder:
            seconds = seconds - remainder + round_to
    return seconds


def format_duration(seconds: int) -> str:
    """Render seconds as a short human-readable duration, e.g. ``1h 30m``."""
    hours, rest = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs and not hours:
        parts.append(f"{secs}s")
    return " ".join(parts) or "0m"
