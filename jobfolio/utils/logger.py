"""
Session logging for JOBFOLIO scripts.

Each script run that asks for a log gets its own directory under LOGS_PATH
(e.g., outs/logs/backup_20251114_123456/backup.log) holding every DEBUG
message, while the console shows INFO and above on stderr so command output
on stdout (LaTeX, listings) stays clean.

Context-specific wrappers live in contexts/{context}/logger.py.
"""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

import jobfolio
from jobfolio.utils.timestamp import session_stamp

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def session_log_dir(context_name: str) -> Path:
    """Fresh per-run directory, e.g. LOGS_PATH/backup_20251114_123456."""
    return LOGS_PATH / f"{context_name}_{session_stamp()}"


def setup_logger(
    context_name: str,
    log_dir: Optional[Path] = None,
    extra_provenance: Optional[dict] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Route loguru output to a session log file and the console.

    Replaces any sinks configured earlier in the process.

    Args:
        context_name: Context identifier, used for the file name (e.g., "backup")
        log_dir: Session directory (defaults to session_log_dir(context_name))
        extra_provenance: Additional key-value pairs for the provenance header
        console_level: Lowest level shown on the console

    Returns:
        Path to the log file

    Example:
        log_file = setup_logger("backup", extra_provenance={"Store": "data/jobfolio_store.json"})
    """
    log_dir = log_dir or session_log_dir(context_name)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def log_provenance(extra_context: Optional[dict] = None) -> None:
    """
    Write a header describing how this run was started.

    Args:
        extra_context: Additional key-value pairs to log (e.g., store path, partition)
    """
    lines = {
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "Python": sys.version.split()[0],
        "jobfolio": jobfolio.__version__,
        **(extra_context or {}),
    }

    logger.debug("-" * 80)
    for key, value in lines.items():
        logger.debug(f"{key}: {value}")
    logger.debug("-" * 80)
