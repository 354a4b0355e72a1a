"""
loguru setup for daybook.

The library itself only calls ``logger``; sinks are configured once by the
application (the CLI does it in ``open_journal``).
"""

import os
import sys

from loguru import logger

CONSOLE_FORMAT = "<level>{level: <8}</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "5 MB",
    retention: str = "14 days",
) -> None:
    """
    Replace all loguru sinks with stderr plus an optional rotating file.

    Args:
        level: Minimum level name, case-insensitive.
        log_file: File to append to. Its directory is created if needed.
        rotation: When to start a new file.
        retention: How long rotated files are kept.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        logger.add(log_file, level=level, format=FILE_FORMAT, rotation=rotation, retention=retention)


def setup_logging_from_config(config) -> None:  # type: ignore[no-untyped-def]
    """Apply the ``logging`` section of a Config.

    A relative ``logging.file`` is placed under ``paths.log_dir``.
    """
    settings = config.validated()
    log_file = settings.logging.file or None
    if log_file and not os.path.isabs(os.path.expanduser(log_file)) and settings.paths.log_dir:
        log_file = os.path.join(settings.paths.log_dir, log_file)
    setup_logging(level=settings.logging.level, log_file=os.path.expanduser(log_file) if log_file else None)
