"""Unit tests for backup record parsing."""

import pytest

from jobfolio.contexts.backup import BackupData, PartitionSnapshot
from jobfolio.contexts.storage import InvalidBackupFormatError

EMPTY_BAG = {"applications": [], "cvVersions": [], "sections": []}


def _bag(**collections):
    return {**EMPTY_BAG, **collections}


@pytest.mark.unit
def test_dual_backup_parses_by_version():
    """Test the current format keyed by metadata.version."""
    data = {
        "id": "backup-1",
        "metadata": {"exportDate": "2025-01-01T00:00:00.000Z", "version": "2.0", "description": "d"},
        "zh": _bag(applications=[{"id": "a1"}]),
        "en": _bag(),
    }

    backup = BackupData.from_dict(data)

    assert backup.is_dual_partition
    assert len(backup.zh.applications) == 1
    assert backup.en.compositions == []
    assert backup.to_dict()["zh"]["compositions"] == []


@pytest.mark.unit
def test_legacy_backup_parses_by_version():
    """Test the flat legacy format."""
    data = {"id": "backup-0", "metadata": {"version": "1.0"}, **_bag(cvVersions=[{"id": "v1"}])}

    backup = BackupData.from_dict(data)

    assert not backup.is_dual_partition
    assert backup.snapshot_for("zh").cv_versions == [{"id": "v1"}]
    assert backup.snapshot_for("en") is None
    assert backup.zh is None
    assert "zh" not in backup.to_dict()


@pytest.mark.unit
def test_shape_sniffing_when_version_is_missing_or_wrong():
    """Test the fallback path for unmarked or mismarked records."""
    unmarked_dual = {"id": "b", "zh": _bag(), "en": _bag()}
    mismarked_legacy = {"id": "c", "metadata": {"version": "2.0"}, **_bag()}

    assert BackupData.from_dict(unmarked_dual).is_dual_partition
    assert not BackupData.from_dict(mismarked_legacy).is_dual_partition


@pytest.mark.unit
def test_imported_legacy_marker_is_dual():
    """Test that '1.0-legacy' records are read as dual-partition."""
    data = {"id": "d", "metadata": {"version": "1.0-legacy"}, "zh": _bag(), "en": _bag()}

    assert BackupData.from_dict(data).is_dual_partition


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"metadata": {"version": "2.0"}},
        {"zh": _bag(), "en": {"applications": []}},
        {"applications": [], "cvVersions": "oops", "sections": []},
    ],
)
def test_unknown_layouts_rejected(payload):
    """Test InvalidFormat for payloads matching neither layout."""
    with pytest.raises(InvalidBackupFormatError):
        BackupData.from_dict(payload)


@pytest.mark.unit
def test_compositions_must_be_a_list_when_present():
    """Test validation of the optional compositions collection."""
    with pytest.raises(InvalidBackupFormatError):
        PartitionSnapshot.from_dict(_bag(compositions={"c1": {}}))


@pytest.mark.unit
def test_counts_per_partition():
    """Test collection size reporting."""
    backup = BackupData.from_dict(
        {"id": "e", "metadata": {"version": "2.0"}, "zh": _bag(sections=[{"id": "s"}]), "en": _bag()}
    )

    assert backup.counts()["zh"] == {"applications": 0, "cvVersions": 0, "sections": 1, "compositions": 0}
    assert PartitionSnapshot().is_empty


@pytest.mark.unit
@pytest.mark.parametrize(
    "metadata, held",
    [
        ({"version": "2.0"}, ["zh", "en"]),
        ({"version": "1.0-legacy"}, ["zh"]),
        ({"version": "2.0", "partition": "en"}, ["en"]),
        ({"version": "2.0", "partition": "zh"}, ["zh"]),
    ],
)
def test_held_partitions_follow_metadata(metadata, held):
    """Test which partitions a dual-layout backup actually carries."""
    backup = BackupData.from_dict({"id": "e", "metadata": metadata, "zh": _bag(), "en": _bag()})

    assert [p for p in ("zh", "en") if backup.holds_partition(p)] == held
    assert [p for p in ("zh", "en") if backup.snapshot_for(p) is not None] == held
