"""Logging setup for md-to-pdf runs.

Library modules only call ``logging.getLogger(__name__)``. The CLI calls
:func:`configure_logger` once per run to attach handlers to the
``md_to_pdf`` logger:

- a rotating file of JSON lines under ``log_dir`` (only when one is given);
- a plain stderr handler when ``verbose`` is set.

Handlers are tagged, so calling :func:`configure_logger` again reconfigures
them instead of stacking duplicates.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from contextlib import suppress
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Mapping, Optional

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_HANDLER_TAG = "_md_to_pdf_handler"
_FILE = "file"
_CONSOLE = "console"

# Attributes of a bare LogRecord; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


class JsonLogFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Optional[Path] = None,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    filename: Optional[str] = None,
) -> tuple[logging.Logger, Optional[Path]]:
    """Attach md-to-pdf handlers to the logger ``name``.

    Returns the logger and the path of the JSON log file, or ``None`` when
    no ``log_dir`` was given. ``verbose`` lowers the file threshold to
    ``DEBUG`` and echoes records to stderr. An unwritable ``log_dir`` falls
    back to a directory under the system temp dir.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    threshold = logging.DEBUG if verbose else _parse_level(level)

    log_path: Optional[Path] = None
    if log_dir is not None:
        log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"
        handler = _attach_file_handler(
            logger,
            Path(log_dir),
            log_name,
            max_bytes=max_bytes,
            backup_count=backup_count,
        )
        handler.setLevel(threshold)
        log_path = Path(handler.baseFilename)

    _set_console_handler(logger, enabled=verbose)
    return logger, log_path


def _parse_level(level: str) -> int:
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _tagged_handler(
    logger: logging.Logger, kind: str
) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if getattr(handler, _HANDLER_TAG, None) == kind:
            return handler
    return None


def _attach_file_handler(
    logger: logging.Logger,
    log_dir: Path,
    filename: str,
    *,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    path = _writable_log_file(log_dir, filename)

    existing = _tagged_handler(logger, _FILE)
    if existing is not None:
        if Path(existing.baseFilename) == path.absolute():  # type: ignore[attr-defined]
            return existing  # type: ignore[return-value]
        logger.removeHandler(existing)
        existing.close()

    try:
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        path = _writable_log_file(_fallback_log_dir(), filename)
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _HANDLER_TAG, _FILE)
    logger.addHandler(handler)
    return handler


def _writable_log_file(log_dir: Path, filename: str) -> Path:
    for directory in (log_dir, _fallback_log_dir()):
        path = directory / filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except PermissionError:
            continue
        with suppress(PermissionError):
            path.chmod(0o600)
        return path
    raise PermissionError(
        f"Cannot create log file '{filename}' in {log_dir} or the temp dir."
    )


def _set_console_handler(logger: logging.Logger, *, enabled: bool) -> None:
    handler = _tagged_handler(logger, _CONSOLE)
    if enabled and handler is None:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s")
        )
        setattr(handler, _HANDLER_TAG, _CONSOLE)
        logger.addHandler(handler)
    elif not enabled and handler is not None:
        logger.removeHandler(handler)
        handler.close()


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "md-to-pdf-logs"
