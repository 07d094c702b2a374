"""
Backup policy configuration.

Limits are read from a YAML file with OmegaConf and merged over the
defaults of BackupPolicy, so a config file only needs the keys it changes.

Example:
    >>> policy = load_backup_policy()
    >>> policy.max_backups
    20
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

load_dotenv()
DEFAULT_POLICY_PATH = Path(__file__).resolve().parents[2] / "configs" / "backup_policy.yaml"
BACKUP_POLICY_PATH = Path(os.getenv("BACKUP_POLICY_PATH", str(DEFAULT_POLICY_PATH)))


@dataclass
class BackupPolicy:
    """Retention and size limits for the backup list."""

    max_backups: int = 20
    size_threshold_bytes: int = 4 * 1024 * 1024
    degraded_max_backups: int = 8
    auto_backup_keep: int = 15
    storage_total_bytes: int = 5 * 1024 * 1024

    def validate(self) -> "BackupPolicy":
        """
        Raises:
            ValueError: If a limit is not positive or the degraded cap exceeds the normal cap
        """
        for name in ("max_backups", "size_threshold_bytes", "degraded_max_backups", "storage_total_bytes"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Backup policy '{name}' must be positive, got {getattr(self, name)}")
        if self.auto_backup_keep < 0:
            raise ValueError(f"Backup policy 'auto_backup_keep' must be >= 0, got {self.auto_backup_keep}")
        if self.degraded_max_backups > self.max_backups:
            raise ValueError(
                f"degraded_max_backups ({self.degraded_max_backups}) cannot exceed "
                f"max_backups ({self.max_backups})"
            )
        return self


def load_backup_policy(config_path: Optional[Path] = None) -> BackupPolicy:
    """
    Load the backup policy from YAML.

    Args:
        config_path: Optional YAML file (defaults to BACKUP_POLICY_PATH env variable,
                     falling back to the bundled configs/backup_policy.yaml)

    Returns:
        Validated BackupPolicy

    Raises:
        FileNotFoundError: If config_path does not exist
        ValueError: If the file has unknown keys, wrong types or invalid limits
    """
    if config_path is None:
        config_path = BACKUP_POLICY_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Backup policy not found: {config_path}")

    try:
        merged = OmegaConf.merge(OmegaConf.structured(BackupPolicy), OmegaConf.load(config_path))
        policy = OmegaConf.to_object(merged)
    except OmegaConfBaseException as e:
        raise ValueError(f"Invalid backup policy in {config_path}: {e}") from e

    return policy.validate()
