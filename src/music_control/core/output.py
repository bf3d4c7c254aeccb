"""
Logging setup using Loguru.

The server logs to a rotating file and, unless disabled, to stderr.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def get_log_path(config: LoggingConfig) -> Path:
    """Resolve the log file location, defaulting to the data directory."""
    if config.log_file:
        return Path(config.log_file).expanduser()
    return get_data_dir() / "music-control.log"


def setup_loguru(config: LoggingConfig, log_file: Optional[Path] = None) -> None:
    """
    Configure loguru sinks for the server process.

    Args:
        config: Logging section of the loaded configuration
        log_file: Explicit log file path (overrides config)
    """
    # Remove default handler
    logger.remove()

    path = log_file or get_log_path(config)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        path,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=config.level,
        format=LOG_FORMAT,
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if config.console_output:
        logger.add(sys.stderr, level=config.level, format=LOG_FORMAT)

    logger.info(f"Loguru initialized: {path} (level={config.level})")
