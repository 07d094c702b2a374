"""Unit tests for BackupEngine: snapshots, change detection and retention."""

from dataclasses import replace

import pytest

from jobfolio.contexts.backup import BackupEngine, BackupPolicy, PartitionStores
from jobfolio.contexts.documents import CVComposition, CVVersion, ResumeSection
from jobfolio.contexts.storage import MemoryKeyValueStore, StorageQuotaExceededError
from jobfolio.contexts.storage.namespaced import BACKUPS_KEY
from jobfolio.contexts.tracking import JobApplication
from jobfolio.utils.event_logging import get_recent_events


class QuotaLimitedStore(MemoryKeyValueStore):
    """Rejects backup lists longer than max_backups, as a full quota would."""

    def __init__(self, max_backups):
        super().__init__()
        self.max_backups = max_backups

    def set(self, items):
        backups = items.get(BACKUPS_KEY)
        if backups is not None and len(backups) > self.max_backups:
            raise StorageQuotaExceededError(10_000, 1_000)
        super().set(items)


@pytest.mark.unit
def test_full_backup_counts_each_partition(zh, engine):
    """Test 3 applications, 2 versions and 1 section in zh with an empty en."""
    for n in range(3):
        zh.applications.save(JobApplication.new(f"Engineer {n}", "Acme"))
    zh.cv_versions.create_version("v1")
    zh.cv_versions.create_version("v2")
    zh.sections.save(ResumeSection.new("skills", "Skills"))

    backup_id = engine.create_full_partition_backup("Manual", is_auto_backup=False)
    backup = engine.get_backup(backup_id)

    assert backup.metadata.version == "2.0"
    assert backup.metadata.is_auto_backup is False
    assert len(backup.zh.applications) == 3
    assert len(backup.zh.cv_versions) == 2
    assert len(backup.zh.sections) == 1
    assert backup.en.counts() == {"applications": 0, "cvVersions": 0, "sections": 0, "compositions": 0}


@pytest.mark.unit
def test_backups_are_listed_newest_first(engine):
    """Test prepend order of the backup list."""
    first = engine.create_full_partition_backup("first")
    second = engine.create_full_partition_backup("second")

    assert [b.id for b in engine.get_all_backups()] == [second, first]
    assert first != second


@pytest.mark.unit
def test_smart_backup_skips_unchanged_data(zh, engine, acme_application):
    """Test that a second smart backup with unchanged data is a no-op."""
    zh.applications.save(acme_application)

    first = engine.create_smart_backup("Auto")
    second = engine.create_smart_backup("Auto")

    assert first is not None
    assert second is None
    assert len(engine.get_all_backups()) == 1


@pytest.mark.unit
def test_smart_backup_on_empty_store_creates_first_backup(engine):
    """Test that with no previous backup something is always written."""
    assert engine.create_smart_backup() is not None
    assert engine.create_smart_backup() is None


@pytest.mark.unit
@pytest.mark.parametrize("partition", ["zh", "en"])
def test_smart_backup_detects_changes_in_either_partition(kv, engine, partition, acme_application):
    """Test change detection per partition."""
    engine.create_smart_backup()

    PartitionStores.open(kv, partition).applications.save(acme_application)

    assert engine.create_smart_backup() is not None
    assert len(engine.get_all_backups()) == 2


@pytest.mark.unit
def test_smart_backup_detects_field_edits(zh, engine):
    """Test that an edit with unchanged counts is still a change."""
    version = zh.cv_versions.save(CVVersion.new("text", 1))
    engine.create_smart_backup()

    zh.cv_versions.update_cv(version.id, {"note": "edited"})

    assert engine.create_smart_backup() is not None


@pytest.mark.unit
def test_template_changes_do_not_trigger_backups(zh, engine):
    """Test that seeding templates is not a meaningful change."""
    engine.create_smart_backup()

    zh.sections.initialize_default_templates()

    assert engine.create_smart_backup() is None


@pytest.mark.unit
def test_compositions_count_as_changes(zh, engine):
    """Test that compositions take part in change detection."""
    engine.create_smart_backup()
    zh.compositions.save(CVComposition.new("Backend", []))

    assert engine.create_smart_backup() is not None


@pytest.mark.unit
def test_forced_smart_backup_always_writes(engine):
    """Test force=True."""
    engine.create_smart_backup()
    assert engine.create_smart_backup(force=True) is not None


@pytest.mark.unit
def test_smart_backup_after_legacy_backup_writes(kv, engine):
    """Test that a legacy newest backup always counts as changed."""
    legacy = {"id": "old", "metadata": {"version": "1.0"}, "applications": [], "cvVersions": [], "sections": []}
    kv.set({BACKUPS_KEY: [legacy]})

    assert engine.create_smart_backup() is not None


@pytest.mark.unit
def test_retention_drops_oldest(kv):
    """Test the retention cap."""
    engine = BackupEngine(kv, BackupPolicy(max_backups=3, degraded_max_backups=2))
    ids = [engine.create_full_partition_backup(f"b{n}") for n in range(5)]

    assert [b.id for b in engine.get_all_backups()] == list(reversed(ids[-3:]))


@pytest.mark.unit
def test_size_threshold_degrades_retention(kv):
    """Test last-resort degradation when the list is too large."""
    engine = BackupEngine(kv, BackupPolicy(max_backups=5, size_threshold_bytes=1, degraded_max_backups=2))
    ids = [engine.create_full_partition_backup(f"b{n}") for n in range(4)]

    assert [b.id for b in engine.get_all_backups()] == [ids[3], ids[2]]


@pytest.mark.unit
def test_quota_failure_degrades_and_retries_once():
    """Test the degrade-and-retry path of a rejected write."""
    kv = QuotaLimitedStore(max_backups=2)
    engine = BackupEngine(kv, BackupPolicy(max_backups=5, degraded_max_backups=2))
    ids = [engine.create_full_partition_backup(f"b{n}") for n in range(3)]

    assert [b.id for b in engine.get_all_backups()] == [ids[2], ids[1]]


@pytest.mark.unit
def test_quota_failure_propagates_when_nothing_to_drop():
    """Test that the error surfaces if degrading cannot shrink the list."""
    kv = QuotaLimitedStore(max_backups=0)
    engine = BackupEngine(kv, BackupPolicy(max_backups=5, degraded_max_backups=2))

    with pytest.raises(StorageQuotaExceededError):
        engine.create_full_partition_backup("too big")

    assert engine.get_all_backups() == []


@pytest.mark.unit
def test_delete_and_get_backup(engine):
    """Test list-id operations."""
    keep = engine.create_full_partition_backup("keep")
    drop = engine.create_full_partition_backup("drop")

    assert engine.delete_backup(drop) is True
    assert engine.delete_backup(drop) is False
    assert engine.get_backup(drop) is None
    assert engine.get_backup(keep).metadata.description == "keep"


@pytest.mark.unit
def test_prune_auto_backups_leaves_manual_ones(engine):
    """Test the caller-side auto-backup policy helper."""
    manual = engine.create_full_partition_backup("manual", is_auto_backup=False)
    autos = [engine.create_full_partition_backup(f"auto {n}", is_auto_backup=True) for n in range(4)]

    deleted = engine.prune_auto_backups(keep=2)

    assert deleted == [autos[1], autos[0]]
    assert [b.id for b in engine.get_all_backups()] == [autos[3], autos[2], manual]


@pytest.mark.unit
def test_unreadable_backups_are_skipped(kv, engine):
    """Test the read policy for corrupt backup records."""
    good = engine.create_full_partition_backup("good")
    backups = kv.get(BACKUPS_KEY)[BACKUPS_KEY]
    kv.set({BACKUPS_KEY: backups + [{"id": "broken"}, "garbage"]})

    assert [b.id for b in engine.get_all_backups()] == [good]


@pytest.mark.unit
def test_backup_keeps_records_the_entity_classes_reject(kv, zh, engine):
    """Test that snapshots copy stored records as persisted, malformed ones included."""
    zh.applications.save(JobApplication.new("Backend Engineer", "Acme"))
    zh.applications.save(JobApplication.new("Data Engineer", "Globex"))
    container = kv.get("job-assistant-data-zh")["job-assistant-data-zh"]
    container["applications"].append({"id": "x", "title": "Old record without company", "source": "v0"})
    kv.set({"job-assistant-data-zh": container})

    backup = engine.get_backup(engine.create_full_partition_backup("with a stray record"))

    assert len(backup.zh.applications) == 3
    assert backup.zh.applications[-1] == {"id": "x", "title": "Old record without company", "source": "v0"}


@pytest.mark.unit
def test_backup_records_are_not_mutated_by_later_edits(zh, engine, acme_application):
    """Test that a stored backup is a snapshot, not a view."""
    app = zh.applications.save(acme_application)
    backup_id = engine.create_full_partition_backup("snapshot")

    zh.applications.save(replace(app, company="Globex"))

    assert engine.get_backup(backup_id).zh.applications[0]["company"] == "Acme"


@pytest.mark.unit
def test_storage_usage(kv, engine):
    """Test used/total reporting."""
    engine.create_full_partition_backup()

    usage = engine.get_storage_usage()

    assert usage.used == kv.get_bytes_in_use()
    assert usage.total == 5 * 1024 * 1024
    assert usage.used > 0
    assert usage.percentage < 1


@pytest.mark.unit
def test_backup_events_are_logged(engine):
    """Test storage event log entries for create, skip and delete."""
    backup_id = engine.create_smart_backup("first", is_auto_backup=True)
    engine.create_smart_backup()
    engine.delete_backup(backup_id)

    events = get_recent_events()

    assert [e["event_type"] for e in events] == ["backup_created", "backup_skipped", "backup_deleted"]
    assert events[0]["backup_id"] == backup_id
    assert events[0]["is_auto_backup"] is True
