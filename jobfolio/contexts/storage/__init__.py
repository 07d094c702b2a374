"""
Storage Context

Responsibilities:
- Defines the persisted key-value store contract and its implementations
- Scopes every collection key by partition ("zh" / "en")
- Migrates data left under legacy unscoped keys into the default partition

Owns: Storage keys, byte accounting, storage exceptions
Never: Interprets entity records
"""

from jobfolio.contexts.storage.exceptions import (
    EntityNotFoundError,
    InvalidBackupFormatError,
    StorageQuotaExceededError,
)
from jobfolio.contexts.storage.kv_store import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from jobfolio.contexts.storage.namespaced import (
    DEFAULT_PARTITION,
    PARTITIONS,
    NamespacedStore,
    partition_keys,
    scoped_key,
    validate_partition,
)

__all__ = [
    # Exceptions
    "EntityNotFoundError",
    "InvalidBackupFormatError",
    "StorageQuotaExceededError",
    # Stores
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "NamespacedStore",
    # Partition helpers
    "PARTITIONS",
    "DEFAULT_PARTITION",
    "partition_keys",
    "scoped_key",
    "validate_partition",
]
