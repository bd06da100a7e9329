"""
Logging for the SoakMap pipeline.

Every line carries the pipeline command that produced it (ingest, dedupe,
validate, ...), so a shared log file from scheduled runs can be read back
per command. Sink settings come from PipelineSettings (LOG_LEVEL, LOG_FILE,
LOG_ROTATION, LOG_RETENTION).
"""

import os
import sys
from pathlib import Path

from loguru import logger

from soakmap.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[command]}</magenta> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[command]} | {name}:{function}:{line} - {message}"

# Lines logged outside a command (imports, library use)
logger.configure(extra={"command": "pipeline"})


def setup_logging(level: str | None = None, log_file: Path | None = None) -> None:
    """
    Configure the console sink and, when a log file is set, a rotating file sink.

    Args:
        level: Log level (default LOG_LEVEL)
        log_file: Log file path (default LOG_FILE)
    """
    pipeline = settings.pipeline
    level = level or pipeline.log_level
    log_file = log_file or pipeline.log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            rotation=pipeline.log_rotation,
            retention=pipeline.log_retention,
            compression="gz",
        )

    logger.debug(f"Logging configured: level={level}, file={log_file or '-'}")


def set_command(command: str) -> None:
    """Tag subsequent log lines with the running pipeline command."""
    logger.configure(extra={"command": command})


if os.environ.get("DISABLE_LOGGING") != "1":
    setup_logging()
