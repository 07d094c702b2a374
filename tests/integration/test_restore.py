"""
Integration tests for restoring partitions from backups.

Restore is best-effort: every record is saved independently and failures are
collected in RestoreResult.failures instead of aborting the restore.
"""

import pytest

from jobfolio.contexts.backup import (
    BackupData,
    BackupMetadata,
    PartitionSnapshot,
    PartitionStores,
    restore_to_partition,
)
from jobfolio.contexts.documents import CVComposition, ResumeSection
from jobfolio.contexts.storage import EntityNotFoundError
from jobfolio.contexts.tracking import ApplicationLinker, JobApplication
from jobfolio.utils.event_logging import get_recent_events


def _ids(entities):
    return {e.id for e in entities}


@pytest.fixture
def populated(kv, zh, en):
    """Both partitions with data, a link, a composition and application config."""
    app = zh.applications.save(JobApplication.new("Backend Engineer", "Acme"))
    zh.applications.save(JobApplication.new("Data Engineer", "Globex"))
    version = zh.cv_versions.create_version("resume v1")
    ApplicationLinker(zh.applications, zh.cv_versions).link_resume(app.id, version.id)
    section = zh.sections.save(ResumeSection.new("skills", "Skills", latex_content="\\section{Skills}"))
    zh.sections.initialize_default_templates()
    zh.compositions.save(CVComposition.new("Backend", [section.id]))
    zh.applications.save_config({"apiKey": "zh-key"})

    en.applications.save(JobApplication.new("ML Engineer", "Initech"))
    return kv


@pytest.mark.integration
def test_restore_round_trip(populated, engine, zh):
    """Test that a restored partition matches the backup by id."""
    backup_id = engine.create_full_partition_backup("before changes")
    backup = engine.get_backup(backup_id)

    # Diverge from the backup in every collection
    first_app = zh.applications.get_all()[0]
    zh.applications.delete(first_app.id)
    zh.applications.save(JobApplication.new("Intruder", "Nope"))
    zh.cv_versions.create_version("resume v2")
    zh.compositions.clear()

    result = restore_to_partition(engine, backup_id, "zh")

    restored = PartitionStores.open(populated, "zh")
    assert result.success
    assert _ids(restored.applications.get_all()) == {r["id"] for r in backup.zh.applications}
    assert _ids(restored.cv_versions.get_all()) == {r["id"] for r in backup.zh.cv_versions}
    assert _ids(restored.sections.get_all()) == {r["id"] for r in backup.zh.sections}
    assert _ids(restored.compositions.get_all()) == {r["id"] for r in backup.zh.compositions}
    assert result.restored["applications"] == 2
    assert result.total_restored == sum(backup.zh.counts().values())


@pytest.mark.integration
def test_restore_keeps_links_versions_and_config(populated, engine, zh):
    """Test that restored records keep their fields and the partition keeps its settings."""
    app = next(a for a in zh.applications.get_all() if a.company == "Acme")
    version = zh.cv_versions.get_by_id(app.resume_version_id)
    backup_id = engine.create_full_partition_backup()

    result = restore_to_partition(engine, backup_id, "zh")

    assert result.success
    restored_version = zh.cv_versions.get_by_id(version.id)
    assert restored_version.version_number == 1
    assert restored_version.linked_applications == [app.id]
    assert restored_version.created == version.created
    assert zh.applications.get_by_id(app.id).resume_version_id == version.id
    assert zh.applications.get_config() == {"apiKey": "zh-key"}
    assert len(zh.sections.get_templates()) == 6


@pytest.mark.integration
def test_restore_into_one_partition_leaves_the_other_alone(populated, engine, zh, en):
    """Test partition isolation during restore."""
    backup_id = engine.create_full_partition_backup()
    en.applications.save(JobApplication.new("Extra", "Later"))
    zh_before = _ids(zh.applications.get_all())

    restore_to_partition(engine, backup_id, "en")

    assert [a.company for a in en.applications.get_all()] == ["Initech"]
    assert _ids(zh.applications.get_all()) == zh_before


@pytest.mark.integration
def test_restore_missing_backup_raises(engine):
    """Test NotFound for an unknown backup id."""
    with pytest.raises(EntityNotFoundError):
        restore_to_partition(engine, "backup-missing", "zh")


@pytest.mark.integration
def test_restore_rejects_unknown_partition(engine):
    """Test partition validation before anything is read."""
    backup_id = engine.create_full_partition_backup()
    with pytest.raises(ValueError):
        restore_to_partition(engine, backup_id, "fr")


def _store_legacy_backup(engine, applications):
    backup = BackupData(
        id="backup-legacy",
        metadata=BackupMetadata(export_date="2024-05-01T00:00:00.000Z", version="1.0", description="old"),
        legacy=PartitionSnapshot(applications=applications),
    )
    engine.create_backup(backup)
    return backup.id


@pytest.mark.integration
def test_legacy_backup_restores_into_zh_only(engine, zh, en):
    """Test legacy restore into zh and the no-op into en."""
    legacy_app = {"id": "legacy-1", "title": "Frontend Engineer", "company": "Hooli"}
    en_app = en.applications.save(JobApplication.new("ML Engineer", "Initech"))
    backup_id = _store_legacy_backup(engine, [legacy_app])

    skipped = restore_to_partition(engine, backup_id, "en")
    restored = restore_to_partition(engine, backup_id, "zh")

    assert skipped.skipped
    assert skipped.total_restored == 0
    assert _ids(en.applications.get_all()) == {en_app.id}
    assert not restored.skipped
    assert [a.company for a in zh.applications.get_all()] == ["Hooli"]


@pytest.mark.integration
def test_restore_is_best_effort(engine, zh):
    """Test that a broken record is reported while the rest is restored."""
    good = JobApplication.new("Backend Engineer", "Acme").to_dict()
    broken = {"id": "broken-app", "company": "No title"}
    backup = BackupData(
        id="backup-partial",
        metadata=BackupMetadata(version="2.0", description="partial"),
        partitions={"zh": PartitionSnapshot(applications=[broken, good]), "en": PartitionSnapshot()},
    )
    engine.create_backup(backup)

    result = restore_to_partition(engine, backup.id, "zh")

    assert not result.success
    assert len(result.failures) == 1
    assert "broken-app" in result.failures[0]
    assert result.restored["applications"] == 1
    assert _ids(zh.applications.get_all()) == {good["id"]}


@pytest.mark.integration
def test_restore_event_logged(engine):
    """Test the restore_completed storage event."""
    backup_id = engine.create_full_partition_backup()

    restore_to_partition(engine, backup_id, "en")

    event = get_recent_events(event_type="restore_completed")[-1]
    assert event["backup_id"] == backup_id
    assert event["partition"] == "en"
    assert event["failures"] == 0
