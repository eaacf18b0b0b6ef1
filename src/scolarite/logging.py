"""Logging for scolarite components.

Every component logs under the ``scolarite`` logger hierarchy
(``scolarite.services.enrollments``, ``scolarite.api.app``, ...). One call to
``setup_logging`` routes the whole hierarchy to a size-rotated file and,
optionally, to stderr. Passwords, password hashes and bearer tokens are
masked by the formatter before anything reaches a handler.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "scolarite"
LOG_DIR_ENV = "SCOLARITE_LOG_DIR"
LOG_LEVEL_ENV = "SCOLARITE_LOG_LEVEL"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "scolarite.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SENSITIVE_PATTERNS = [
    # Werkzeug hashes: "<method>:<params>$<salt>$<hex digest>"
    (re.compile(r"(?:pbkdf2|scrypt):[\w:]+\$[\w./]+\$[0-9a-f]+"), "[PASSWORD_HASH]"),
    (re.compile(r"(password\w*[\"']?\s*[=:]\s*[\"']?)[^\s,\"'}&]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[a-zA-Z0-9._-]+"), "token=[REDACTED]"),
]


def sanitize_for_log(text: str) -> str:
    """Mask passwords, password hashes and tokens in a piece of text."""
    for pattern, replacement in _SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SanitizingFormatter(logging.Formatter):
    """Formatter that runs every formatted line through ``sanitize_for_log``."""

    def format(self, record: logging.LogRecord) -> str:
        return sanitize_for_log(super().format(record))


def _level_from(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Route the ``scolarite`` logger hierarchy to a rotating file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_dir: Where the log file lives. Falls back to $SCOLARITE_LOG_DIR,
            then to ./logs. Created if missing.
        log_file: File name inside log_dir.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files kept next to the live one.
        level: Level name. Falls back to $SCOLARITE_LOG_LEVEL, then INFO.
        console: Also write to stderr.

    Returns:
        The ``scolarite`` logger.
    """
    directory = Path(log_dir or os.environ.get(LOG_DIR_ENV, DEFAULT_LOG_DIR))
    directory.mkdir(parents=True, exist_ok=True)
    level_name = (level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    log_level = _level_from(level_name)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(log_level)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    formatter = SanitizingFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    log_path = directory / log_file
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.info("Logging to %s at %s", log_path, level_name)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for a component, placed under the ``scolarite`` hierarchy.

    ``get_logger("enrollments")`` and ``get_logger("scolarite.enrollments")``
    return the same logger.
    """
    if not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
