"""Logging helpers for run-notebook.

Every module asks for its logger through get_logger(__name__); the entry
point calls setup_logging() when it is invoked.
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "RUN_NOTEBOOK_LOG_LEVEL"

_NOISY_LOGGERS = ("boto3", "botocore", "urllib3")


def get_logger(name: str) -> logging.Logger:
    """Return the logger for the given module name."""
    return logging.getLogger(name)


def _level_from_env() -> int:
    """Return the log level named by RUN_NOTEBOOK_LOG_LEVEL (INFO if unset or unknown)."""
    raw = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(raw) if raw else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    level: int | None = None,
    format_string: str | None = None,
    force: bool = False,
) -> None:
    """
    Configure the root logger.

    Handlers the host process already installed on the root logger (such as
    the Lambda runtime's) are kept unless force is set; only the level is
    applied to them.

    Args:
        level: Logging level. Defaults to RUN_NOTEBOOK_LOG_LEVEL or INFO.
        format_string: Custom format string (default: timestamp + level + logger + message).
        force: Replace existing root handlers.
    """
    if level is None:
        level = _level_from_env()
    if format_string is None:
        format_string = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    root = logging.getLogger()
    if root.handlers and not force:
        root.setLevel(level)
    else:
        logging.basicConfig(
            level=level,
            format=format_string,
            datefmt="%Y-%m-%d %H:%M:%S",
            stream=sys.stdout,
            force=force,
        )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
