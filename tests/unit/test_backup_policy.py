"""Unit tests for loading the backup policy."""

import pytest

from jobfolio.contexts.backup import BackupPolicy, load_backup_policy
from jobfolio.contexts.backup.policy import DEFAULT_POLICY_PATH


@pytest.mark.unit
def test_bundled_policy_matches_defaults():
    """Test the shipped YAML against the built-in defaults."""
    policy = load_backup_policy(DEFAULT_POLICY_PATH)

    assert policy == BackupPolicy()
    assert policy.max_backups == 20
    assert policy.size_threshold_bytes == 4 * 1024 * 1024
    assert policy.degraded_max_backups == 8
    assert policy.auto_backup_keep == 15


@pytest.mark.unit
def test_partial_override_keeps_other_defaults(tmp_path):
    """Test that a config file only needs the keys it changes."""
    config = tmp_path / "policy.yaml"
    config.write_text("max_backups: 5\ndegraded_max_backups: 2\n", encoding="utf-8")

    policy = load_backup_policy(config)

    assert policy.max_backups == 5
    assert policy.degraded_max_backups == 2
    assert policy.auto_backup_keep == 15


@pytest.mark.unit
def test_unknown_key_rejected(tmp_path):
    """Test that typos in the policy file are errors."""
    config = tmp_path / "policy.yaml"
    config.write_text("max_backup: 5\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid backup policy"):
        load_backup_policy(config)


@pytest.mark.unit
def test_inconsistent_limits_rejected(tmp_path):
    """Test validation of the degraded cap."""
    config = tmp_path / "policy.yaml"
    config.write_text("max_backups: 3\ndegraded_max_backups: 8\n", encoding="utf-8")

    with pytest.raises(ValueError, match="cannot exceed"):
        load_backup_policy(config)


@pytest.mark.unit
def test_missing_policy_file(tmp_path):
    """Test error for a policy path that does not exist."""
    with pytest.raises(FileNotFoundError):
        load_backup_policy(tmp_path / "absent.yaml")
