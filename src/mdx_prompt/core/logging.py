"""JSON-lines logging for mdx-prompt runs.

Each run logs to a rotating file, one JSON object per line. ``--verbose``
mirrors records to stderr in a short human-readable form.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
    "default_log_dir",
]

_MAX_BYTES = 1024 * 1024
_BACKUP_COUNT = 3

# Fragment context the converter and executor attach through ``extra``.
_PROMOTED_FIELDS = ("category", "fragment", "mode")

_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
}


class JsonLogFormatter(logging.Formatter):
    """Render a record as one JSON object.

    ``category``, ``fragment`` and ``mode`` are lifted to the top level so a
    fragment's records can be filtered directly; any other ``extra`` values
    are nested under ``"extra"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES
        }
        for key in _PROMOTED_FIELDS:
            if key in extra:
                payload[key] = extra.pop(key)
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False, default=_jsonable)


class _RunFileHandler(RotatingFileHandler):
    """File handler installed by :func:`configure_logger`."""


class _ConsoleHandler(logging.StreamHandler):
    """stderr handler installed for ``--verbose`` runs."""


def default_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "mdx-prompt-logs"


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Return the logger ``name`` writing JSON lines under ``log_dir``.

    Calling again with the same file keeps the existing handler, so the CLI
    can run many times in one process. An unwritable ``log_dir`` falls back
    to :func:`default_log_dir`. The returned path is the file in use.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"
    handler = _file_handler(logger, log_dir / log_name)
    handler.setLevel(logging.DEBUG if verbose else _level(level))

    consoles = [h for h in logger.handlers if isinstance(h, _ConsoleHandler)]
    if verbose and not consoles:
        console = _ConsoleHandler(sys.stderr)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(console)
    elif not verbose:
        for console in consoles:
            logger.removeHandler(console)
            console.close()

    return logger, Path(handler.baseFilename)


def _file_handler(logger: logging.Logger, path: Path) -> _RunFileHandler:
    target = os.path.abspath(path)
    for existing in list(logger.handlers):
        if not isinstance(existing, _RunFileHandler):
            continue
        if existing.baseFilename == target:
            return existing
        logger.removeHandler(existing)
        existing.close()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = _open(path)
    except PermissionError:
        fallback = default_log_dir() / path.name
        fallback.parent.mkdir(parents=True, exist_ok=True)
        handler = _open(fallback)
    handler.setFormatter(JsonLogFormatter())
    logger.addHandler(handler)
    return handler


def _open(path: Path) -> _RunFileHandler:
    return _RunFileHandler(
        path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )


def _level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def _jsonable(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return repr(value)
