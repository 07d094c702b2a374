"""
Content digests for identity and change detection.

Two flavors:
- content_hash(): SHA-256 of document text, stored on CV versions as the
  content identity used for deduplication
- object_digest(): digest of a JSON record serialized canonically (sorted keys,
  compact separators), so the same record hashes the same across runs

Neither is meant as an integrity or security guarantee.
"""

import hashlib
import json
from typing import Any, Iterable, List


def content_hash(content: str) -> str:
    """
    Hex SHA-256 digest of UTF-8 encoded document text.

    Args:
        content: Full document text

    Returns:
        64-character lowercase hex string

    Example:
        >>> content_hash("")
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def canonical_json(obj: Any) -> str:
    """Serialize obj with sorted keys and no insignificant whitespace."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def object_digest(obj: Any) -> str:
    """
    Stable digest of a JSON-compatible record.

    Key order inside the record does not affect the digest.
    """
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()[:16]


def digest_multiset(records: Iterable[Any]) -> List[str]:
    """
    Sorted list of per-record digests.

    Comparing two of these lists compares the collections independent of the
    order the records are stored in, while still counting duplicates.
    """
    return sorted(object_digest(record) for record in records)
