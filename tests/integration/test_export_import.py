"""Integration tests for exporting backups to files and importing them back."""

import json

import pytest

from jobfolio.contexts.backup import (
    BackupData,
    BackupMetadata,
    PartitionSnapshot,
    export_backup_as_file,
    import_backup_from_file,
    restore_to_partition,
)
from jobfolio.contexts.storage import EntityNotFoundError, InvalidBackupFormatError
from jobfolio.contexts.tracking import JobApplication
from jobfolio.utils.event_logging import get_recent_events
from jobfolio.utils.timestamp import today_stamp


def _write(path, payload):
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.mark.integration
def test_dual_backup_exports_one_file_per_partition(tmp_path, engine, zh, en):
    """Test per-partition export files and their contents."""
    zh.applications.save(JobApplication.new("后端工程师", "字节"))
    en.applications.save(JobApplication.new("ML Engineer", "Initech"))
    backup_id = engine.create_full_partition_backup("export me")

    paths = export_backup_as_file(engine, backup_id, tmp_path / "exports")

    assert [p.name for p in paths] == [
        f"job-tracker-{today_stamp()}-zh-{backup_id}.json",
        f"job-tracker-{today_stamp()}-en-{backup_id}.json",
    ]
    zh_payload = json.loads(paths[0].read_text(encoding="utf-8"))
    assert zh_payload["metadata"]["partition"] == "zh"
    assert zh_payload["metadata"]["version"] == "2.0"
    assert zh_payload["zh"]["applications"][0]["title"] == "后端工程师"
    assert zh_payload["en"] == {"applications": [], "cvVersions": [], "sections": [], "compositions": []}

    en_backup = BackupData.from_dict(json.loads(paths[1].read_text(encoding="utf-8")))
    assert [a["company"] for a in en_backup.en.applications] == ["Initech"]
    assert en_backup.zh.is_empty


@pytest.mark.integration
def test_legacy_backup_exports_single_file(tmp_path, engine):
    """Test that legacy backups stay one file."""
    engine.create_backup(
        BackupData(
            id="backup-legacy",
            metadata=BackupMetadata(version="1.0", description="old"),
            legacy=PartitionSnapshot(),
        )
    )

    paths = export_backup_as_file(engine, "backup-legacy", tmp_path)

    assert [p.name for p in paths] == [f"job-tracker-{today_stamp()}-backup-legacy.json"]
    assert "zh" not in json.loads(paths[0].read_text(encoding="utf-8"))


@pytest.mark.integration
def test_export_missing_backup_raises(tmp_path, engine):
    """Test NotFound on export."""
    with pytest.raises(EntityNotFoundError):
        export_backup_as_file(engine, "backup-missing", tmp_path)


@pytest.mark.integration
def test_import_legacy_file_wraps_into_zh(tmp_path, engine):
    """Test a legacy file with 2 applications becomes a '1.0-legacy' dual backup."""
    payload = {
        "metadata": {"exportDate": "2024-05-01T00:00:00.000Z", "version": "1.0", "description": "Phone export"},
        "applications": [
            {"id": "a1", "title": "Backend Engineer", "company": "Acme"},
            {"id": "a2", "title": "Data Engineer", "company": "Globex"},
        ],
        "cvVersions": [],
        "sections": [],
    }
    path = _write(tmp_path / "legacy.json", payload)

    backup = import_backup_from_file(engine, path)
    stored = engine.get_backup(backup.id)

    for record in (backup, stored):
        assert record.is_dual_partition
        assert len(record.zh.applications) == 2
        assert len(record.en.applications) == 0
        assert record.metadata.version == "1.0-legacy"
    assert stored.metadata.description == "Imported: Phone export"
    assert stored.metadata.is_auto_backup is False
    assert stored.metadata.export_date != "2024-05-01T00:00:00.000Z"


@pytest.mark.integration
def test_imported_legacy_backup_leaves_en_untouched(tmp_path, engine, en):
    """Test that restoring an imported legacy file into en skips instead of clearing en."""
    app = en.applications.save(JobApplication.new("ML Engineer", "Initech"))
    payload = {
        "metadata": {"version": "1.0"},
        "applications": [{"id": "a1", "title": "Backend Engineer", "company": "Acme"}],
        "cvVersions": [],
        "sections": [],
    }
    imported = import_backup_from_file(engine, _write(tmp_path / "legacy.json", payload))

    result = restore_to_partition(engine, imported.id, "en")

    assert result.skipped
    assert result.total_restored == 0
    assert [a.id for a in en.applications.get_all()] == [app.id]


@pytest.mark.integration
def test_partition_export_restores_only_its_partition(tmp_path, engine, zh, en):
    """Test that an imported zh export keeps its partition and skips en."""
    zh.applications.save(JobApplication.new("后端工程师", "字节"))
    en_app = en.applications.save(JobApplication.new("ML Engineer", "Initech"))
    backup_id = engine.create_full_partition_backup("source")
    zh_file = export_backup_as_file(engine, backup_id, tmp_path)[0]

    imported = import_backup_from_file(engine, zh_file)
    result = restore_to_partition(engine, imported.id, "en")

    assert engine.get_backup(imported.id).metadata.partition == "zh"
    assert result.skipped
    assert [a.id for a in en.applications.get_all()] == [en_app.id]
    assert [p.name for p in export_backup_as_file(engine, imported.id, tmp_path / "again")] == [
        f"job-tracker-{today_stamp()}-zh-{imported.id}.json"
    ]


@pytest.mark.integration
def test_exported_file_imports_and_restores(tmp_path, kv, engine, en):
    """Test export -> import -> restore of one partition."""
    app = en.applications.save(JobApplication.new("ML Engineer", "Initech"))
    backup_id = engine.create_full_partition_backup("source")
    en_file = export_backup_as_file(engine, backup_id, tmp_path)[1]
    en.applications.delete(app.id)

    imported = import_backup_from_file(engine, en_file)
    result = restore_to_partition(engine, imported.id, "en")

    assert imported.id != backup_id
    assert imported.metadata.version == "2.0"
    assert imported.metadata.description == "Imported: source"
    assert result.restored["applications"] == 1
    assert [a.id for a in en.applications.get_all()] == [app.id]
    assert get_recent_events(event_type="backup_imported")[-1]["backup_id"] == imported.id


@pytest.mark.integration
@pytest.mark.parametrize(
    "payload",
    [
        {"applications": [], "cvVersions": []},
        {"zh": {"applications": [], "cvVersions": [], "sections": []}},
        {"zh": {"applications": []}, "en": {"applications": [], "cvVersions": [], "sections": []}},
        ["not", "an", "object"],
    ],
)
def test_invalid_import_writes_nothing(tmp_path, kv, engine, payload):
    """Test that unrecognized files are rejected before any write."""
    path = _write(tmp_path / "bad.json", payload)
    before = kv.get()

    with pytest.raises(InvalidBackupFormatError) as exc_info:
        import_backup_from_file(engine, path)

    assert exc_info.value.source == "bad.json"
    assert kv.get() == before
    assert engine.get_all_backups() == []


@pytest.mark.integration
def test_import_rejects_non_json(tmp_path, engine):
    """Test that a file that is not JSON is an invalid backup."""
    path = tmp_path / "notes.json"
    path.write_text("this is not json", encoding="utf-8")

    with pytest.raises(InvalidBackupFormatError):
        import_backup_from_file(engine, path)
