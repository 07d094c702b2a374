"""
Base class for entity collections persisted as one list per partition.

Every mutation reads the whole list, changes it in memory and writes the
whole list back. Two writers touching the same collection at once can lose
an update (last write wins); with one user on one device that is accepted.

Error policy:
- Reads (get_all, get_by_id) log failures and return an empty default;
  get_all skips single records that do not load
- Writes (save, delete, clear) log failures and re-raise
"""

from dataclasses import replace
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from jobfolio.contexts.storage.kv_store import KeyValueStore
from jobfolio.contexts.storage.logger import _log_debug, _log_error, _log_warning
from jobfolio.contexts.storage.namespaced import DEFAULT_PARTITION, NamespacedStore
from jobfolio.utils.timestamp import now_iso

T = TypeVar("T")


class CollectionStore(Generic[T]):
    """
    CRUD over one entity collection in one partition.

    Subclasses set base_key, record_cls and entity_type, and may override
    _stamp() to maintain timestamps.

    Args:
        kv: Underlying persisted store
        partition: Partition this store reads and writes
    """

    base_key: str = ""
    record_cls: Type[T] = None
    entity_type: str = "Entity"

    def __init__(self, kv: KeyValueStore, partition: str = DEFAULT_PARTITION):
        self.store = NamespacedStore(kv, partition)
        self.partition = self.store.partition
        self.store.migrate_legacy_key(self.base_key)

    @property
    def storage_key(self) -> str:
        return self.store.key(self.base_key)

    # =========================================================================
    # RAW RECORD ACCESS
    # =========================================================================

    def _read_records(self) -> List[Dict[str, Any]]:
        records = self.store.get(self.base_key, [])
        return records if isinstance(records, list) else []

    def _write_records(self, records: List[Dict[str, Any]]) -> None:
        self.store.set(self.base_key, records)

    def _stamp(self, entity: T, existing: Optional[Dict[str, Any]]) -> T:
        """Return the entity as it should be stored (existing is None on insert)."""
        return entity

    # =========================================================================
    # CRUD
    # =========================================================================

    def get_records(self) -> List[Dict[str, Any]]:
        """
        Stored records exactly as persisted, unknown keys included.

        Unlike get_all(), read failures propagate.
        """
        return [r for r in self._read_records() if isinstance(r, dict)]

    def get_all(self) -> List[T]:
        """
        All entities in this partition, in stored order.

        Records that do not load are logged and skipped; [] on read failure.
        """
        try:
            records = self.get_records()
        except Exception as e:
            _log_error(f"Failed to load {self.entity_type} records from '{self.storage_key}': {e}")
            return []

        entities = []
        for record in records:
            try:
                entities.append(self.record_cls.from_dict(record))
            except (TypeError, ValueError) as e:
                _log_warning(f"Skipping unreadable {self.entity_type} {record.get('id')}: {e}")
        return entities

    def get_by_id(self, entity_id: str) -> Optional[T]:
        """Entity with entity_id, or None if absent."""
        for entity in self.get_all():
            if entity.id == entity_id:
                return entity
        return None

    def save(self, entity: T) -> T:
        """
        Insert or fully replace an entity, keyed by id.

        Returns:
            The entity as stored (timestamps filled in)
        """
        try:
            records = self._read_records()
            index = next((i for i, r in enumerate(records) if r.get("id") == entity.id), None)
            existing = records[index] if index is not None else None

            stored = self._stamp(entity, existing)
            if index is not None:
                records[index] = stored.to_dict()
            else:
                records.append(stored.to_dict())

            self._write_records(records)
            _log_debug(
                f"{'Updated' if existing else 'Inserted'} {self.entity_type} {entity.id} "
                f"in '{self.storage_key}'"
            )
            return stored
        except Exception as e:
            _log_error(f"Failed to save {self.entity_type} {entity.id}: {e}")
            raise

    def delete(self, entity_id: str) -> None:
        """Remove the entity with entity_id; absent ids are ignored."""
        try:
            records = self._read_records()
            remaining = [r for r in records if r.get("id") != entity_id]
            self._write_records(remaining)
            if len(remaining) == len(records):
                _log_debug(f"Delete of {self.entity_type} {entity_id}: nothing to remove")
        except Exception as e:
            _log_error(f"Failed to delete {self.entity_type} {entity_id}: {e}")
            raise

    def clear(self) -> None:
        """Remove this partition's collection key entirely."""
        self.store.remove(self.base_key)

    def get_next_version_number(self) -> int:
        """1 for an empty collection, otherwise max(versionNumber) + 1."""
        numbers = [r.get("versionNumber") or 0 for r in self._read_records()]
        return max(numbers) + 1 if numbers else 1


class TimestampedCollectionStore(CollectionStore[T]):
    """
    Collection whose entities carry 'created' / 'updated' timestamps.

    Inserts keep a caller-supplied created time (restores rely on this) and
    fill in missing ones; updates always refresh 'updated'.
    """

    def _stamp(self, entity: T, existing: Optional[Dict[str, Any]]) -> T:
        now = now_iso()
        if existing is None:
            return replace(entity, created=entity.created or now, updated=entity.updated or now)
        return replace(entity, updated=now)
