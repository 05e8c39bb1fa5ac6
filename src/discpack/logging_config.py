"""Logging setup for the discpack command line."""

from __future__ import annotations

import logging
import os
import re
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%m/%d/%Y %H:%M:%S"
LEVEL_ENV_VAR = "DISCPACK_LOG_LEVEL"
ROOT_LOGGER = "discpack"


class PasswordFilter(logging.Filter):
    """Mask archive passwords (``-p<secret>`` switches) in log records."""

    PATTERN = re.compile(r"(?<!\S)(-p)(\S+)")

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.PATTERN.sub(r"\1***", record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask(v) for k, v in record.args.items()}
            else:
                record.args = tuple(self._mask(a) for a in record.args)
        return True

    def _mask(self, value: object) -> object:
        if isinstance(value, str):
            return self.PATTERN.sub(r"\1***", value)
        if isinstance(value, (list, tuple)):
            return type(value)(self._mask(v) for v in value)
        return value


def resolve_level(level: str | None) -> int:
    """Turn a level name (or the environment default) into a logging level."""
    name = (level or os.getenv(LEVEL_ENV_VAR, "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(level: str | None = None, *, log_file: Path | None = None) -> logging.Logger:
    """Configure the ``discpack`` logger.

    Logs go to stderr and, when `log_file` is given, are appended to that
    file as well. Calling this again replaces previously installed handlers.

    Parameters
    ----------
    level
        Level name (DEBUG, INFO, ...). Defaults to ``$DISCPACK_LOG_LEVEL`` or INFO.
    log_file
        Optional file to append log records to.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    resolved = resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolved)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(resolved)
        handler.setFormatter(formatter)
        handler.addFilter(PasswordFilter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def set_level(level: str) -> None:
    """Change the level of the ``discpack`` logger and its handlers."""
    resolved = resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolved)
    for handler in logger.handlers:
        handler.setLevel(resolved)
