"""
Storage context logger.

Provides logging interface for the storage context with automatic [storage] prefix.
All storage modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[storage]"


def _log_info(message: str) -> None:
    """Log info message with [storage] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [storage] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [storage] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [storage] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [storage] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_migration(base_key: str, target_key: str, item_count: int) -> None:
    """Log a completed legacy-key migration."""
    _log_info(f"Migrating legacy data from '{base_key}' to '{target_key}' ({item_count} item(s))")
    _log_success(f"Migration of '{base_key}' completed")
