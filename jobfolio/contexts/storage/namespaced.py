"""
Partition-scoped access to the persisted key-value store.

Every entity collection lives under "<base key>-<partition>", where the
partition is one of PARTITIONS. Partitions share a schema but never share
keys, so switching partition is a key-prefix change and nothing more.

Older installs kept each collection under the bare base key. The first store
opened against such data moves it to the default ("zh") partition.
"""

from typing import Any, Iterable, Optional, Union

from jobfolio.contexts.storage.kv_store import KeyValueStore
from jobfolio.contexts.storage.logger import _log_debug, _log_error, log_migration

PARTITIONS = ("zh", "en")
DEFAULT_PARTITION = "zh"

# Base keys (section 6 layout); the backup list is global and never scoped
APPLICATIONS_KEY = "job-assistant-data"
CV_VERSIONS_KEY = "job-assistant-cv-versions"
SECTIONS_KEY = "job-assistant-resume-sections"
COMPOSITIONS_KEY = "job-assistant-cv-compositions"
BACKUPS_KEY = "job-assistant-backups"

COLLECTION_BASE_KEYS = (APPLICATIONS_KEY, CV_VERSIONS_KEY, SECTIONS_KEY, COMPOSITIONS_KEY)


def validate_partition(partition: str) -> str:
    """
    Return partition unchanged if it is a known partition.

    Raises:
        ValueError: If partition is not one of PARTITIONS
    """
    if partition not in PARTITIONS:
        raise ValueError(f"Unknown partition '{partition}'. Expected one of: {list(PARTITIONS)}")
    return partition


def scoped_key(base_key: str, partition: str) -> str:
    """Storage key of base_key inside partition (e.g., 'job-assistant-data-en')."""
    return f"{base_key}-{validate_partition(partition)}"


def partition_keys(partition: str) -> list[str]:
    """All collection keys that belong to one partition."""
    return [scoped_key(base_key, partition) for base_key in COLLECTION_BASE_KEYS]


def _has_legacy_content(value: Any) -> bool:
    """
    Decide whether an unscoped legacy value is worth migrating.

    Collections were stored as lists (migrate when non-empty); the application
    record was a dict holding an 'applications' list and a 'config' bag, and
    counts only when one of them holds something.
    """
    if isinstance(value, list):
        return len(value) > 0
    if isinstance(value, dict):
        return bool(value.get("applications")) or bool(value.get("config"))
    return bool(value)


class NamespacedStore:
    """
    Key-value adapter bound to one partition.

    Reads and writes raise whatever the underlying store raises; only the
    migration step swallows (and logs) failures.

    Args:
        kv: Underlying persisted store
        partition: Partition every scoped key resolves into
    """

    def __init__(self, kv: KeyValueStore, partition: str = DEFAULT_PARTITION):
        self.kv = kv
        self.partition = validate_partition(partition)

    def key(self, base_key: str) -> str:
        """Scoped storage key for base_key in this store's partition."""
        return scoped_key(base_key, self.partition)

    def get(self, base_key: str, default: Any = None) -> Any:
        """Value stored under base_key in this partition, or default."""
        key = self.key(base_key)
        return self.kv.get(key).get(key, default)

    def set(self, base_key: str, value: Any) -> None:
        """Replace the value stored under base_key in this partition."""
        self.kv.set({self.key(base_key): value})

    def remove(self, base_keys: Union[str, Iterable[str]]) -> None:
        """Remove one or more scoped keys from this partition."""
        if isinstance(base_keys, str):
            base_keys = [base_keys]
        self.kv.remove([self.key(base_key) for base_key in base_keys])

    def get_global(self, key: str, default: Any = None) -> Any:
        """Value stored under an unscoped key (shared by all partitions)."""
        return self.kv.get(key).get(key, default)

    def set_global(self, key: str, value: Any) -> None:
        """Write an unscoped key."""
        self.kv.set({key: value})

    def get_bytes_in_use(self, base_keys: Optional[Iterable[str]] = None) -> int:
        """
        Bytes used by the whole store, or by selected scoped keys of this partition.
        """
        if base_keys is None:
            return self.kv.get_bytes_in_use()
        return self.kv.get_bytes_in_use([self.key(base_key) for base_key in base_keys])

    def migrate_legacy_key(self, base_key: str) -> bool:
        """
        Move data from the unscoped base_key into the default partition.

        Runs on every store construction and no-ops once migrated: the legacy
        key is only copied when the default partition's key is still empty,
        and it is removed once the copy is written.

        Returns:
            True if data was migrated, False otherwise (including on failure)
        """
        target_key = scoped_key(base_key, DEFAULT_PARTITION)
        try:
            found = self.kv.get([base_key, target_key])
            legacy = found.get(base_key)
            if not _has_legacy_content(legacy):
                return False

            if _has_legacy_content(found.get(target_key)):
                _log_debug(f"Legacy key '{base_key}' present but '{target_key}' already populated")
                return False

            self.kv.set({target_key: legacy})
            self.kv.remove(base_key)

            item_count = len(legacy.get("applications", [])) if isinstance(legacy, dict) else len(legacy)
            log_migration(base_key, target_key, item_count)
            return True
        except Exception as e:
            _log_error(f"Failed to migrate legacy key '{base_key}': {e}")
            return False
