"""
Restore, export and import of backups.

Restore rewrites one partition from a backup: the partition's collection
keys are cleared, then every record is written back through the normal
per-entity save() path. Saves are independent; a failing record is logged
and collected in RestoreResult.failures while the rest keep going. Nothing
is rolled back.

Export writes portable JSON files (one per partition for dual backups).
Import accepts a dual-partition or a legacy payload and stores it as a new
backup; legacy payloads are wrapped as {"zh": payload, "en": empty} with
format marker "1.0-legacy".
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from jobfolio.contexts.backup.backup_data_structure import (
    FORMAT_DUAL,
    FORMAT_IMPORTED_LEGACY,
    BackupData,
    BackupMetadata,
    PartitionSnapshot,
    has_collections,
    is_dual_format_version,
    new_backup_id,
)
from jobfolio.contexts.backup.backup_engine import BackupEngine
from jobfolio.contexts.backup.logger import _log_error, _log_info, _log_success, log_restore_result
from jobfolio.contexts.backup.partition_stores import PartitionStores
from jobfolio.contexts.documents.document_data_structures import (
    CVComposition,
    CVVersion,
    ResumeSection,
)
from jobfolio.contexts.storage.exceptions import EntityNotFoundError, InvalidBackupFormatError
from jobfolio.contexts.storage.namespaced import PARTITIONS, validate_partition
from jobfolio.contexts.tracking.application_data_structure import JobApplication
from jobfolio.utils.event_logging import log_storage_event
from jobfolio.utils.timestamp import now_iso, today_stamp

load_dotenv()
JOBFOLIO_EXPORT_PATH = Path(os.getenv("JOBFOLIO_EXPORT_PATH", "outs/exports"))

RECORD_CLASSES = {
    "applications": JobApplication,
    "cvVersions": CVVersion,
    "sections": ResumeSection,
    "compositions": CVComposition,
}


@dataclass
class RestoreResult:
    """
    Outcome of restore_to_partition().

    Attributes:
        backup_id: Backup that was restored
        partition: Partition that was rewritten
        restored: Records written per collection
        failures: One message per record that could not be saved
        skipped: True when the backup had nothing for this partition
        message: Reason for a skip
    """

    backup_id: str
    partition: str
    restored: Dict[str, int] = field(default_factory=dict)
    failures: List[str] = field(default_factory=list)
    skipped: bool = False
    message: str = ""

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def total_restored(self) -> int:
        return sum(self.restored.values())


# =============================================================================
# RESTORE
# =============================================================================


def restore_to_partition(engine: BackupEngine, backup_id: str, target_partition: str) -> RestoreResult:
    """
    Replace a partition's collections with the contents of a backup.

    Dual backups restore the bag of target_partition. Legacy backups
    (including ones imported as "1.0-legacy") only belong to "zh", and a
    backup imported from a per-partition export only holds that partition.
    Restoring into a partition the backup does not hold changes nothing and
    returns a skipped result. The partition's persisted settings
    (application config) survive the restore.

    Args:
        engine: Backup engine of the store to restore into
        backup_id: Id of the backup to restore
        target_partition: "zh" or "en"

    Returns:
        RestoreResult with per-collection counts and collected failures

    Raises:
        EntityNotFoundError: If no backup has backup_id
        ValueError: If target_partition is unknown
    """
    validate_partition(target_partition)
    backup = engine.get_backup(backup_id)
    if backup is None:
        raise EntityNotFoundError("BackupData", backup_id)

    snapshot = backup.snapshot_for(target_partition)
    if snapshot is None:
        result = RestoreResult(
            backup_id=backup_id,
            partition=target_partition,
            skipped=True,
            message=f"backup holds no '{target_partition}' data",
        )
        log_restore_result(result)
        return result

    stores = PartitionStores.open(engine.kv, target_partition)
    config = stores.applications.get_config()

    engine.kv.remove(stores.storage_keys())
    _log_info(f"Cleared partition '{target_partition}' for restore of {backup_id}")

    if config:
        stores.applications.save_config(config)

    result = RestoreResult(backup_id=backup_id, partition=target_partition)
    records_by_collection = snapshot.collections()
    for name, store in stores.by_collection().items():
        record_cls = RECORD_CLASSES[name]
        result.restored[name] = 0
        for record in records_by_collection[name]:
            try:
                store.save(record_cls.from_dict(record))
                result.restored[name] += 1
            except Exception as e:
                record_id = record.get("id") if isinstance(record, dict) else None
                result.failures.append(f"{name} {record_id}: {e}")

    log_restore_result(result)
    log_storage_event(
        "restore_completed",
        "restore",
        backup_id=backup_id,
        partition=target_partition,
        restored=result.restored,
        failures=len(result.failures),
    )
    return result


# =============================================================================
# EXPORT
# =============================================================================


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def export_backup_as_file(
    engine: BackupEngine, backup_id: str, output_dir: Optional[Path] = None
) -> List[Path]:
    """
    Write a backup to portable JSON files.

    Dual backups produce one file per partition they hold,
    job-tracker-<YYYYMMDD>-<partition>-<backup id>.json, each a dual payload
    holding that partition's data and an empty bag for the other one.
    Legacy backups produce a single job-tracker-<YYYYMMDD>-<backup id>.json.

    Args:
        engine: Backup engine holding the backup
        backup_id: Id of the backup to export
        output_dir: Destination directory (defaults to JOBFOLIO_EXPORT_PATH env variable)

    Returns:
        Paths of the written files

    Raises:
        EntityNotFoundError: If no backup has backup_id
    """
    backup = engine.get_backup(backup_id)
    if backup is None:
        raise EntityNotFoundError("BackupData", backup_id)

    output_dir = Path(output_dir) if output_dir else JOBFOLIO_EXPORT_PATH
    date = today_stamp()

    if not backup.is_dual_partition:
        path = output_dir / f"job-tracker-{date}-{backup.id}.json"
        _write_json(path, backup.to_dict())
        _log_success(f"Exported legacy backup {backup.id} to {path}")
        return [path]

    paths = []
    for partition in (p for p in PARTITIONS if backup.holds_partition(p)):
        partitions = {p: PartitionSnapshot() for p in PARTITIONS}
        partitions[partition] = backup.partitions[partition]
        payload = BackupData(
            id=backup.id,
            metadata=replace(backup.metadata, partition=partition),
            partitions=partitions,
        )
        path = output_dir / f"job-tracker-{date}-{partition}-{backup.id}.json"
        _write_json(path, payload.to_dict())
        paths.append(path)

    _log_success(f"Exported backup {backup.id} to {len(paths)} file(s) in {output_dir}")
    return paths


# =============================================================================
# IMPORT
# =============================================================================


def normalize_import_payload(payload: Any, source: Optional[str] = None) -> BackupData:
    """
    Turn an imported payload into a new dual-partition backup record.

    Args:
        payload: Parsed JSON of an exported file
        source: File name used in error messages

    Returns:
        BackupData with a fresh id, ready for BackupEngine.create_backup()

    Raises:
        InvalidBackupFormatError: If payload matches neither layout
    """
    if not isinstance(payload, dict):
        raise InvalidBackupFormatError(
            f"Backup file must hold a JSON object, got {type(payload).__name__}", source
        )

    raw_metadata = payload.get("metadata") if isinstance(payload.get("metadata"), dict) else {}
    original = BackupMetadata.from_dict(raw_metadata)

    if all(has_collections(payload.get(p)) for p in PARTITIONS):
        partitions = {p: PartitionSnapshot.from_dict(payload[p], source) for p in PARTITIONS}
        version = original.version if is_dual_format_version(original.version) else FORMAT_DUAL
        partition = original.partition if original.partition in PARTITIONS else None
    elif has_collections(payload):
        partitions = {
            "zh": PartitionSnapshot.from_dict(payload, source),
            "en": PartitionSnapshot(),
        }
        version = FORMAT_IMPORTED_LEGACY
        partition = None
    else:
        raise InvalidBackupFormatError(
            "Expected zh/en bags or flat applications/cvVersions/sections collections", source
        )

    description = original.description or (source or "backup file")
    metadata = BackupMetadata(
        export_date=now_iso(),
        version=version,
        description=f"Imported: {description}",
        is_auto_backup=False,
        note=original.note,
        partition=partition,
    )
    return BackupData(id=new_backup_id(), metadata=metadata, partitions=partitions)


def import_backup_from_file(engine: BackupEngine, path: Union[str, Path]) -> BackupData:
    """
    Validate an exported file and store it as a new backup.

    The payload is fully validated before anything is written.

    Returns:
        The stored BackupData

    Raises:
        FileNotFoundError: If path does not exist
        InvalidBackupFormatError: If the file is not JSON or matches neither layout
    """
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _log_error(f"Import of {path.name} failed: not valid JSON")
        raise InvalidBackupFormatError(f"Not valid JSON: {e}", path.name) from e

    try:
        backup = normalize_import_payload(payload, source=path.name)
    except InvalidBackupFormatError as e:
        _log_error(f"Import of {path.name} failed: {e.message}")
        raise

    engine.create_backup(backup)
    _log_success(f"Imported {path.name} as {backup.id} (format {backup.metadata.version})")
    log_storage_event(
        "backup_imported",
        "import",
        backup_id=backup.id,
        file=path.name,
        version=backup.metadata.version,
    )
    return backup
