"""
Shared utilities for JOBFOLIO.

Common functionality used across contexts:
- Content hashing
- Timestamps
- Logging setup and storage event log
"""

from jobfolio.utils.hashing import content_hash, object_digest
from jobfolio.utils.timestamp import now_iso, now_millis, today_stamp

__all__ = ["content_hash", "object_digest", "now_iso", "now_millis", "today_stamp"]
