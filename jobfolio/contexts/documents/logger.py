"""
Documents context logger.

Provides logging interface for the documents context with automatic [docs] prefix.
All documents modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[docs]"


def _log_info(message: str) -> None:
    """Log info message with [docs] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [docs] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [docs] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [docs] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [docs] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
