"""
Tracking context logger.

Provides logging interface for the tracking context with automatic [track] prefix.
All tracking modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[track]"


def _log_info(message: str) -> None:
    """Log info message with [track] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [track] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [track] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [track] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_link_change(
    application_id: str, field_name: str, old_version_id: str, new_version_id: str
) -> None:
    """Log an application's document link moving from one version to another."""
    _log_info(
        f"Application {application_id}: {field_name} {old_version_id or '-'} -> {new_version_id or '-'}"
    )
