"""
loguru configuration for TapBoard hosts and scripts.

The library itself only calls ``logger``; sinks are the host's choice. Scripts
call ``setup_logger`` once to get a console sink and a rotating session log.
"""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(
    log_dir: Optional[str] = "logs",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "14 days",
) -> List[int]:
    """
    Replace loguru's default sink with TapBoard's console and file sinks.

    Args:
        log_dir: Directory for the session log; None logs to the console only
        log_level: Minimum level for both sinks
        log_file: File name inside ``log_dir``; defaults to one file per day
        rotation: When to start a new log file
        retention: How long rotated files are kept

    Returns:
        Handler ids of the added sinks, for ``logger.remove``

    Raises:
        ValueError: If log_level is not a loguru level name
    """
    level = log_level.upper()
    if level not in LEVELS:
        raise ValueError(f"Invalid log level: {log_level}. Must be one of {LEVELS}")

    logger.remove()
    handlers = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)]

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        handlers.append(logger.add(
            log_path / (log_file or "tapboard_{time:YYYY-MM-DD}.log"),
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
        ))

    logger.info(f"Logging at {level} to {log_dir or 'console only'}")
    return handlers
