"""
Storage event logging utilities for JOBFOLIO.

Appends one JSON object per line to the storage event log so backup and
restore activity can be audited after the fact, independent of the detailed
session logs written by jobfolio.utils.logger.

Usage:
    from jobfolio.utils.event_logging import log_storage_event

    log_storage_event(
        event_type="backup_created",
        source="backup",
        backup_id="backup-1731520000000-1a2b3c",
        is_auto_backup=False,
    )
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from jobfolio.utils.timestamp import now_iso

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


def _events_file() -> Path:
    # Resolved per call so tests and scripts can point it elsewhere at runtime
    return Path(os.getenv("STORAGE_EVENTS_FILE", str(LOGS_PATH / "storage_events.log")))


def log_storage_event(event_type: str, source: str, **extra_fields) -> None:
    """
    Log an event to the storage event log.

    Events are appended in JSON Lines format (one JSON object per line).

    Args:
        event_type: Type of event (e.g., "backup_created", "restore_completed")
        source: Event source (e.g., "backup", "restore", "cli")
        **extra_fields: Additional event-specific fields

    Example:
        log_storage_event(
            event_type="restore_completed",
            source="restore",
            backup_id="backup-1731520000000-1a2b3c",
            partition="en",
            failures=0,
        )
    """
    events_file = _events_file()
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_iso(),
        "event_type": event_type,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")


def get_recent_events(n: int = 10, event_type: Optional[str] = None) -> list[dict]:
    """
    Get the last n events from the storage event log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        event_type: Filter to only events of this type (optional)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = _events_file()
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
