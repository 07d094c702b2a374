"""Timestamp formatting utilities."""

import time
from datetime import datetime, timezone


def now_iso() -> str:
    """
    Current UTC time as an ISO 8601 string with millisecond precision.

    Matches the layout stored in every entity record
    (e.g., "2025-11-13T18:45:40.572Z").
    """
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_millis() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def today_stamp() -> str:
    """Date stamp used in exported file names (e.g., "20251113")."""
    return datetime.now().strftime("%Y%m%d")


def session_stamp() -> str:
    """Local time stamp for per-session log directories (e.g., "20251113_184540")."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def parse_iso(iso_timestamp: str) -> datetime:
    """
    Parse a stored ISO 8601 timestamp, accepting the trailing "Z" form.

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp
    """
    if iso_timestamp.endswith("Z"):
        iso_timestamp = iso_timestamp[:-1] + "+00:00"
    return datetime.fromisoformat(iso_timestamp)


def format_timestamp(iso_timestamp: str, relative: bool = False) -> str:
    """
    Stored timestamp for display in script listings.

    Absolute form is "YYYY-MM-DD HH:MM:SS" in the stored zone; relative form is the
    compact age used by 'manage_backups.py list' ("2h ago"). Values that do
    not parse are returned unchanged.
    """
    try:
        dt = parse_iso(iso_timestamp)
    except (TypeError, ValueError, AttributeError):
        return iso_timestamp
    return _age(dt) if relative else dt.strftime("%Y-%m-%d %H:%M:%S")


_AGE_UNITS = ((86400, "d"), (3600, "h"), (60, "m"), (1, "s"))


def _age(dt: datetime) -> str:
    delta = (datetime.now(dt.tzinfo) - dt).total_seconds()
    suffix = "ago" if delta >= 0 else "from now"
    seconds = int(abs(delta))
    for size, unit in _AGE_UNITS:
        if seconds >= size or size == 1:
            return f"{seconds // size}{unit} {suffix}"
