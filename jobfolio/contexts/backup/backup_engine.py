"""
Backup engine.

Snapshots all four collections of both partitions into one BackupData and
keeps the global backup list (newest first) under job-assistant-backups.

Retention is applied on every write:
1. The new backup is prepended and the list is cut to policy.max_backups
2. If the serialized list is larger than policy.size_threshold_bytes it is
   cut further to policy.degraded_max_backups
3. If the store still rejects the write for quota, the list is degraded
   (when that makes it shorter) and the write is retried once

Auto vs manual retention is not split here; prune_auto_backups() is the
caller-side helper for that policy.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from jobfolio.contexts.backup.backup_data_structure import (
    FORMAT_DUAL,
    BackupData,
    BackupMetadata,
    PartitionSnapshot,
    new_backup_id,
)
from jobfolio.contexts.backup.logger import (
    _log_debug,
    _log_error,
    _log_info,
    _log_success,
    _log_warning,
    log_backup_contents,
)
from jobfolio.contexts.backup.partition_stores import PartitionStores
from jobfolio.contexts.backup.policy import BackupPolicy, load_backup_policy
from jobfolio.contexts.storage.exceptions import StorageQuotaExceededError
from jobfolio.contexts.storage.kv_store import KeyValueStore
from jobfolio.contexts.storage.namespaced import BACKUPS_KEY, PARTITIONS, NamespacedStore
from jobfolio.utils.event_logging import log_storage_event
from jobfolio.utils.hashing import digest_multiset
from jobfolio.utils.timestamp import now_iso


@dataclass
class StorageUsage:
    """Bytes used by the whole store against the configured capacity."""

    used: int
    total: int

    @property
    def percentage(self) -> float:
        return round(100.0 * self.used / self.total, 1) if self.total else 0.0


def _comparable(name: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Templates are seed content and never count as a change
    if name == "sections":
        return [r for r in records if not r.get("isTemplate")]
    return records


def partition_changed(old: Optional[PartitionSnapshot], new: PartitionSnapshot) -> bool:
    """
    Compare two snapshots collection by collection.

    Counts are compared first, then the sorted per-record digests, so record
    order never matters but any field change does.
    """
    if old is None:
        return True

    old_collections = old.collections()
    for name, new_records in new.collections().items():
        old_records = _comparable(name, old_collections[name])
        new_records = _comparable(name, new_records)
        if len(old_records) != len(new_records):
            _log_debug(f"{name}: count {len(old_records)} -> {len(new_records)}")
            return True
        if digest_multiset(old_records) != digest_multiset(new_records):
            _log_debug(f"{name}: content changed")
            return True
    return False


def has_data_changed(latest: BackupData, snapshots: Dict[str, PartitionSnapshot]) -> bool:
    """True if any partition in snapshots differs from the latest backup."""
    if not latest.is_dual_partition:
        return True
    return any(partition_changed(latest.snapshot_for(p), snapshots[p]) for p in snapshots)


class BackupEngine:
    """
    Creates, lists and deletes backups of the whole dataset.

    Args:
        kv: Underlying persisted store
        policy: Retention limits (defaults to load_backup_policy())

    Example:
        engine = BackupEngine(kv)
        backup_id = engine.create_smart_backup("Before cleanup", is_auto_backup=False)
        if backup_id is None:
            print("Nothing changed since the last backup")
    """

    def __init__(self, kv: KeyValueStore, policy: Optional[BackupPolicy] = None):
        self.kv = kv
        self.store = NamespacedStore(kv)
        self.policy = policy or load_backup_policy()

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def snapshot_partition(self, partition: str) -> PartitionSnapshot:
        """
        Stored records of every collection in partition, copied as persisted.

        Records are not loaded into entities, so a record an entity class
        would reject still lands in the backup. Read failures propagate.
        """
        stores = PartitionStores.open(self.kv, partition)
        return PartitionSnapshot(
            applications=stores.applications.get_records(),
            cv_versions=stores.cv_versions.get_records(),
            sections=stores.sections.get_records(),
            compositions=stores.compositions.get_records(),
        )

    def snapshot_all(self) -> Dict[str, PartitionSnapshot]:
        return {partition: self.snapshot_partition(partition) for partition in PARTITIONS}

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_full_partition_backup(
        self, description: str = "Manual backup", is_auto_backup: bool = False
    ) -> str:
        """
        Back up both partitions unconditionally.

        Returns:
            Id of the new backup

        Raises:
            StorageQuotaExceededError: If the write fails even after degrading
        """
        return self._create_from_snapshots(self.snapshot_all(), description, is_auto_backup)

    def create_smart_backup(
        self,
        description: str = "Auto backup",
        is_auto_backup: bool = True,
        force: bool = False,
    ) -> Optional[str]:
        """
        Back up both partitions unless nothing changed since the newest backup.

        Args:
            description: Label stored in the backup metadata
            is_auto_backup: Whether the backup was triggered automatically
            force: Write even when nothing changed

        Returns:
            Id of the new backup, or None when the backup was skipped
        """
        snapshots = self.snapshot_all()
        backups = self.get_all_backups()

        if backups and not force and not has_data_changed(backups[0], snapshots):
            _log_info(f"No changes since {backups[0].id}, backup skipped")
            log_storage_event("backup_skipped", "backup", latest_backup_id=backups[0].id)
            return None

        return self._create_from_snapshots(snapshots, description, is_auto_backup)

    def _create_from_snapshots(
        self, snapshots: Dict[str, PartitionSnapshot], description: str, is_auto_backup: bool
    ) -> str:
        backup = BackupData(
            id=new_backup_id(),
            metadata=BackupMetadata(
                export_date=now_iso(),
                version=FORMAT_DUAL,
                description=description,
                is_auto_backup=is_auto_backup,
            ),
            partitions=snapshots,
        )
        return self.create_backup(backup)

    def create_backup(self, backup: BackupData) -> str:
        """
        Prepend an assembled backup to the list and persist it with retention applied.

        Returns:
            backup.id

        Raises:
            StorageQuotaExceededError: If the write fails even after degrading
        """
        try:
            backups = self._read_raw_backups()
            backups.insert(0, backup.to_dict())
            retained = self._persist(backups)
        except Exception as e:
            _log_error(f"Failed to create backup {backup.id}: {e}")
            raise

        log_backup_contents(backup.id, backup.counts())
        _log_success(f"Created backup {backup.id} ({retained} kept)")
        log_storage_event(
            "backup_created",
            "backup",
            backup_id=backup.id,
            description=backup.metadata.description,
            is_auto_backup=bool(backup.metadata.is_auto_backup),
            retained=retained,
        )
        return backup.id

    def _persist(self, backups: List[Dict[str, Any]]) -> int:
        """Apply retention, write the list and return how many backups were kept."""
        retained = backups[: self.policy.max_backups]

        size = len(json.dumps(retained, ensure_ascii=False).encode("utf-8"))
        if size > self.policy.size_threshold_bytes:
            _log_warning(
                f"Backup list is {size} bytes (threshold {self.policy.size_threshold_bytes}), "
                f"keeping newest {self.policy.degraded_max_backups}"
            )
            retained = retained[: self.policy.degraded_max_backups]

        try:
            self.store.set_global(BACKUPS_KEY, retained)
        except StorageQuotaExceededError as e:
            degraded = retained[: self.policy.degraded_max_backups]
            if len(degraded) == len(retained):
                raise
            _log_warning(f"{e}; retrying with newest {len(degraded)} backups")
            self.store.set_global(BACKUPS_KEY, degraded)
            retained = degraded

        return len(retained)

    # =========================================================================
    # LIST / GET / DELETE
    # =========================================================================

    def _read_raw_backups(self) -> List[Dict[str, Any]]:
        backups = self.store.get_global(BACKUPS_KEY, [])
        return backups if isinstance(backups, list) else []

    def get_all_backups(self) -> List[BackupData]:
        """All backups, newest first. Unreadable records are skipped ([] on read failure)."""
        try:
            raw = self._read_raw_backups()
        except Exception as e:
            _log_error(f"Failed to load backups: {e}")
            return []

        backups = []
        for record in raw:
            try:
                backups.append(BackupData.from_dict(record, source=BACKUPS_KEY))
            except ValueError as e:
                label = record.get("id") if isinstance(record, dict) else repr(record)
                _log_warning(f"Skipping unreadable backup {label}: {e}")
        return backups

    def get_backup(self, backup_id: str) -> Optional[BackupData]:
        """Backup with backup_id, or None if absent."""
        return next((b for b in self.get_all_backups() if b.id == backup_id), None)

    def delete_backup(self, backup_id: str) -> bool:
        """
        Remove a backup from the list.

        Returns:
            True if a backup was removed, False if backup_id was unknown
        """
        try:
            backups = self._read_raw_backups()
            remaining = [b for b in backups if not (isinstance(b, dict) and b.get("id") == backup_id)]
            if len(remaining) == len(backups):
                _log_debug(f"Delete of backup {backup_id}: nothing to remove")
                return False
            self.store.set_global(BACKUPS_KEY, remaining)
        except Exception as e:
            _log_error(f"Failed to delete backup {backup_id}: {e}")
            raise

        _log_info(f"Deleted backup {backup_id}")
        log_storage_event("backup_deleted", "backup", backup_id=backup_id)
        return True

    def prune_auto_backups(self, keep: Optional[int] = None) -> List[str]:
        """
        Delete automatic backups beyond the newest keep (manual backups are untouched).

        Args:
            keep: Auto-backups to keep (defaults to policy.auto_backup_keep)

        Returns:
            Ids of the deleted backups
        """
        keep = self.policy.auto_backup_keep if keep is None else keep
        auto = [b for b in self.get_all_backups() if b.metadata.is_auto_backup]

        deleted = []
        for backup in auto[keep:]:
            if self.delete_backup(backup.id):
                deleted.append(backup.id)

        if deleted:
            _log_info(f"Pruned {len(deleted)} auto backup(s), kept {min(keep, len(auto))}")
        return deleted

    # =========================================================================
    # USAGE
    # =========================================================================

    def get_storage_usage(self) -> StorageUsage:
        """Bytes used by the whole store (used is 0 on read failure)."""
        try:
            used = self.store.get_bytes_in_use()
        except Exception as e:
            _log_error(f"Failed to read storage usage: {e}")
            used = 0
        return StorageUsage(used=used, total=self.policy.storage_total_bytes)
