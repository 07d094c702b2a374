"""
Backup Context

Responsibilities:
- Snapshots every collection of both partitions into immutable backups
- Skips backups when nothing changed since the newest one
- Applies retention and size-based degradation to the global backup list
- Restores one partition from a backup, exports and imports backup files

Owns: job-assistant-backups, backup policy, backup file formats
Never: Mutates a stored backup
"""

from jobfolio.contexts.backup.backup_data_structure import (
    FORMAT_DUAL,
    FORMAT_IMPORTED_LEGACY,
    FORMAT_LEGACY,
    BackupData,
    BackupMetadata,
    PartitionSnapshot,
)
from jobfolio.contexts.backup.backup_engine import BackupEngine, StorageUsage
from jobfolio.contexts.backup.partition_stores import PartitionStores
from jobfolio.contexts.backup.policy import BackupPolicy, load_backup_policy
from jobfolio.contexts.backup.restore import (
    RestoreResult,
    export_backup_as_file,
    import_backup_from_file,
    normalize_import_payload,
    restore_to_partition,
)

__all__ = [
    # Data structures
    "BackupData",
    "BackupMetadata",
    "PartitionSnapshot",
    "FORMAT_LEGACY",
    "FORMAT_DUAL",
    "FORMAT_IMPORTED_LEGACY",
    # Engine
    "BackupEngine",
    "StorageUsage",
    "PartitionStores",
    "BackupPolicy",
    "load_backup_policy",
    # Restore / export / import
    "RestoreResult",
    "restore_to_partition",
    "export_backup_as_file",
    "import_backup_from_file",
    "normalize_import_payload",
]
