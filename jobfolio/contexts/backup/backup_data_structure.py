"""
Backup record data structures.

A BackupData is a tagged variant keyed by metadata.version:

    "2.0" (any "2.x")  -> dual-partition: {"zh": {...}, "en": {...}}
    "1.0-legacy"       -> dual layout of an imported legacy file; only "zh" holds data
    "1.0"              -> legacy: one flat bag restored into "zh"

A backup imported from a per-partition export file also keeps
metadata.partition and holds data for that partition only.

Each bag holds raw entity records under "applications", "cvVersions",
"sections" and, since compositions were added, "compositions" (optional on
read). Records stay plain dicts; the stores parse them on restore.

Stored layout:
    {
        "id": "backup-1731520000000-1a2b3c",
        "metadata": {"exportDate": "...", "version": "2.0", "description": "...", "isAutoBackup": true},
        "zh": {"applications": [...], "cvVersions": [...], "sections": [...], "compositions": [...]},
        "en": {...}
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from jobfolio.contexts.storage.exceptions import InvalidBackupFormatError
from jobfolio.contexts.storage.namespaced import PARTITIONS
from jobfolio.utils.records import record_from_dict, record_to_dict
from jobfolio.utils.timestamp import now_millis

FORMAT_LEGACY = "1.0"
FORMAT_DUAL = "2.0"
FORMAT_IMPORTED_LEGACY = "1.0-legacy"

# Collections every bag must carry; compositions are optional
REQUIRED_COLLECTIONS = ("applications", "cvVersions", "sections")


def new_backup_id() -> str:
    """Backup id: creation time in ms plus a short random suffix."""
    return f"backup-{now_millis()}-{uuid4().hex[:6]}"


def is_dual_format_version(version: Optional[str]) -> bool:
    """True for format markers that denote a dual-partition payload."""
    return bool(version) and (version.startswith("2.") or version == FORMAT_IMPORTED_LEGACY)


def has_collections(data: Any) -> bool:
    """True if data is a bag holding a list for every required collection."""
    return isinstance(data, dict) and all(isinstance(data.get(name), list) for name in REQUIRED_COLLECTIONS)


@dataclass
class PartitionSnapshot:
    """Raw entity records of one partition."""

    applications: List[Dict[str, Any]] = field(default_factory=list)
    cv_versions: List[Dict[str, Any]] = field(default_factory=list, metadata={"key": "cvVersions"})
    sections: List[Dict[str, Any]] = field(default_factory=list)
    compositions: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "PartitionSnapshot":
        """
        Raises:
            InvalidBackupFormatError: If a required collection is missing or not a list
        """
        if not has_collections(data):
            raise InvalidBackupFormatError(
                f"Backup bag must contain list collections {list(REQUIRED_COLLECTIONS)}", source
            )
        compositions = data.get("compositions")
        if compositions is not None and not isinstance(compositions, list):
            raise InvalidBackupFormatError("Backup 'compositions' must be a list", source)
        return record_from_dict(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)

    def collections(self) -> Dict[str, List[Dict[str, Any]]]:
        """Records keyed by their stored collection name."""
        return {
            "applications": self.applications,
            "cvVersions": self.cv_versions,
            "sections": self.sections,
            "compositions": self.compositions,
        }

    def counts(self) -> Dict[str, int]:
        return {name: len(records) for name, records in self.collections().items()}

    @property
    def is_empty(self) -> bool:
        return not any(self.counts().values())


@dataclass
class BackupMetadata:
    """Descriptive header of a backup; version is the format discriminator."""

    export_date: str = field(default="", metadata={"key": "exportDate"})
    version: str = FORMAT_DUAL
    description: str = ""
    is_auto_backup: Optional[bool] = field(default=None, metadata={"key": "isAutoBackup"})
    note: Optional[str] = None
    # Set on per-partition export files and backups imported from them
    partition: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupMetadata":
        return record_from_dict(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)


@dataclass
class BackupData:
    """
    Immutable snapshot of the dataset.

    Exactly one of partitions (dual format) and legacy (flat format) is set.

    Attributes:
        id: Unique backup id
        metadata: Header with the format version
        partitions: {"zh": PartitionSnapshot, "en": PartitionSnapshot} for dual backups
        legacy: Single flat snapshot for legacy backups
    """

    id: str
    metadata: BackupMetadata
    partitions: Optional[Dict[str, PartitionSnapshot]] = None
    legacy: Optional[PartitionSnapshot] = None

    @property
    def is_dual_partition(self) -> bool:
        return self.partitions is not None

    @property
    def zh(self) -> Optional[PartitionSnapshot]:
        return self.partitions.get("zh") if self.partitions else None

    @property
    def en(self) -> Optional[PartitionSnapshot]:
        return self.partitions.get("en") if self.partitions else None

    def holds_partition(self, partition: str) -> bool:
        """
        Whether the backup carries real data for partition.

        Legacy backups, flat or imported as "1.0-legacy", only ever belonged
        to "zh". A per-partition export file holds only metadata.partition.
        """
        if not self.is_dual_partition or self.metadata.version == FORMAT_IMPORTED_LEGACY:
            return partition == "zh"
        if self.metadata.partition:
            return partition == self.metadata.partition
        return partition in self.partitions

    def snapshot_for(self, partition: str) -> Optional[PartitionSnapshot]:
        """Records a restore into partition would write, or None if the backup does not hold it."""
        if not self.holds_partition(partition):
            return None
        if self.is_dual_partition:
            return self.partitions.get(partition)
        return self.legacy

    def counts(self) -> Dict[str, Dict[str, int]]:
        """Collection sizes per partition ("legacy" for flat backups)."""
        if self.is_dual_partition:
            return {name: snapshot.counts() for name, snapshot in self.partitions.items()}
        return {"legacy": self.legacy.counts()}

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "metadata": self.metadata.to_dict()}
        if self.is_dual_partition:
            for name, snapshot in self.partitions.items():
                data[name] = snapshot.to_dict()
        else:
            data.update(self.legacy.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "BackupData":
        """
        Parse a stored backup record.

        metadata.version picks the variant. When the version is missing or
        does not match the payload, the layout is sniffed instead: "zh"/"en"
        bags mean dual, flat collections mean legacy.

        Raises:
            InvalidBackupFormatError: If data matches neither layout
        """
        if not isinstance(data, dict):
            raise InvalidBackupFormatError(f"Backup must be a JSON object, got {type(data).__name__}", source)

        raw_metadata = data.get("metadata")
        if isinstance(raw_metadata, dict):
            metadata = BackupMetadata.from_dict(raw_metadata)
        else:
            metadata = BackupMetadata(version="")
        backup_id = data.get("id") or new_backup_id()

        dual = all(has_collections(data.get(name)) for name in PARTITIONS)
        flat = has_collections(data)

        if is_dual_format_version(metadata.version) and dual:
            return cls._dual(backup_id, metadata, data, source)
        if metadata.version == FORMAT_LEGACY and flat:
            return cls(id=backup_id, metadata=metadata, legacy=PartitionSnapshot.from_dict(data, source))

        # Fallback for records whose version marker is missing or wrong
        if dual:
            return cls._dual(backup_id, metadata, data, source)
        if flat:
            return cls(id=backup_id, metadata=metadata, legacy=PartitionSnapshot.from_dict(data, source))

        raise InvalidBackupFormatError(
            "Backup matches neither the dual-partition layout (zh/en bags) nor the "
            "legacy layout (flat applications/cvVersions/sections)",
            source,
        )

    @classmethod
    def _dual(cls, backup_id, metadata, data, source) -> "BackupData":
        partitions = {name: PartitionSnapshot.from_dict(data[name], source) for name in PARTITIONS}
        return cls(id=backup_id, metadata=metadata, partitions=partitions)
