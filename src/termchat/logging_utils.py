"""Runtime logging helpers."""

import sys
from pathlib import Path

from loguru import logger

_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
_STDERR_FORMAT = "<level>{level:<7}</level> | {message}"

_CONFIGURED: tuple[str, str | None] | None = None


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure process-level logging once.

    The TUI owns the terminal, so it logs to a file; one-shot CLI
    commands log to stderr.
    """
    global _CONFIGURED
    key = (level.upper(), str(log_file) if log_file else None)
    if key == _CONFIGURED:
        return

    logger.remove()
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=key[0],
            format=_FILE_FORMAT,
            rotation="5 MB",
            retention=3,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=key[0],
            format=_STDERR_FORMAT,
            backtrace=False,
            diagnose=False,
        )
    _CONFIGURED = key
