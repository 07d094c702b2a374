"""
Backup context logger.

Provides logging interface for the backup context with automatic [backup] prefix.
All backup modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from jobfolio.contexts.backup.policy import BACKUP_POLICY_PATH
from jobfolio.utils.logger import setup_logger

CONTEXT_PREFIX = "[backup]"


def _log_info(message: str) -> None:
    """Log info message with [backup] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [backup] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [backup] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [backup] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [backup] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level backup-specific logging helpers


def log_backup_contents(backup_id: str, counts: dict) -> None:
    """
    Log per-partition collection sizes of a backup.

    Args:
        backup_id: Backup identifier
        counts: {partition: {collection: count}}
    """
    summary = ", ".join(
        f"{partition.upper()}({', '.join(f'{n} {name}' for name, n in collections.items())})"
        for partition, collections in counts.items()
    )
    _log_info(f"Backup {backup_id}: {summary}")


def log_restore_result(result) -> None:
    """
    Log the outcome of a restore.

    Args:
        result: RestoreResult from restore_to_partition()
    """
    if result.skipped:
        _log_info(f"Restore of {result.backup_id} into '{result.partition}' skipped: {result.message}")
        return

    restored = ", ".join(f"{n} {name}" for name, n in result.restored.items())
    if result.success:
        _log_success(f"Restored {result.backup_id} into '{result.partition}': {restored}")
    else:
        _log_warning(
            f"Restored {result.backup_id} into '{result.partition}' with "
            f"{len(result.failures)} failure(s): {restored}"
        )
        for failure in result.failures:
            _log_error(f"  {failure}")


def setup_backup_logger(store_path: Path, log_dir: Optional[Path] = None) -> Path:
    """
    Start a backup session log with the store and policy locations in its header.

    Args:
        store_path: JSON store the session works on
        log_dir: Optional session directory (defaults to LOGS_PATH/backup_<stamp>)

    Returns:
        Path to the log file
    """
    return setup_logger(
        context_name="backup",
        log_dir=log_dir,
        extra_provenance={"Store": store_path, "Backup policy": BACKUP_POLICY_PATH},
    )
