# region_driver/utils/logger.py
from __future__ import annotations

"""Logging
----------
Everything logs under the "region_driver" logger. Importing the package only
adds a NullHandler there; the host's logging setup is left alone. The CLI
calls configure_logging() to get Rich console output and, optionally, a JSON
lines file.
"""

import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.highlighter import NullHighlighter
from rich.logging import RichHandler

from region_driver.utils.config import LogLevel, Settings, get_settings


__all__ = [
    "LOGGER_NAME",
    "configure_logging",
    "reset_logging",
    "get_logger",
    "bind",
    "unbind",
    "log_with_context",
]

LOGGER_NAME = "region_driver"

_package_logger = logging.getLogger(LOGGER_NAME)
_package_logger.addHandler(logging.NullHandler())

# handlers added by configure_logging(), so a second call replaces them
_installed: List[logging.Handler] = []

# run-wide fields such as url=...; task-local, so concurrent runs don't mix
_bound: ContextVar[Dict[str, Any]] = ContextVar("region_driver_log_context", default={})


class ContextAdapter(logging.LoggerAdapter):
    """Attaches bound context plus the adapter's own fields as `record.context`."""

    def process(self, msg, kwargs):
        context = dict(_bound.get())
        context.update(self.extra or {})
        kwargs.setdefault("extra", {})["context"] = context
        return msg, kwargs


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per record; context fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = dict(getattr(record, "context", None) or {})
        payload.update(
            time=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _to_level(level: LogLevel | str | int) -> int:
    if isinstance(level, int):
        return level
    name = level.value if isinstance(level, LogLevel) else level
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(settings: Optional[Settings] = None, level: LogLevel | str | int | None = None) -> None:
    """
    Send region_driver logs to a Rich console handler on stderr and, with
    LOG_TO_FILE, to a rotating JSON lines file. Root logging is not touched;
    records stop at the region_driver logger while this is active.
    """
    s = settings or get_settings()
    reset_logging()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,  # region names and selectors contain brackets
        highlighter=None if s.COLORIZED_OUTPUT else NullHighlighter(),
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    _installed.append(console_handler)

    if s.LOG_TO_FILE:
        s.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            s.LOG_FILE, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8", delay=True
        )
        file_handler.setFormatter(JsonLinesFormatter())
        _installed.append(file_handler)

    for h in _installed:
        _package_logger.addHandler(h)
    _package_logger.setLevel(_to_level(level if level is not None else s.LOG_LEVEL))
    _package_logger.propagate = False


def reset_logging() -> None:
    """Undo configure_logging(): drop its handlers and hand records back to the host."""
    while _installed:
        h = _installed.pop()
        _package_logger.removeHandler(h)
        h.close()
    _package_logger.setLevel(logging.NOTSET)
    _package_logger.propagate = True


def get_logger(name: Optional[str] = None) -> ContextAdapter:
    """Logger for `name` (normally a module's __name__ inside region_driver)."""
    return ContextAdapter(logging.getLogger(name or LOGGER_NAME), {})


def bind(**fields: Any) -> None:
    """Add fields (e.g. url="http://localhost:8080/home") to every following record."""
    _bound.set({**_bound.get(), **fields})


def unbind(*keys: str) -> None:
    _bound.set({k: v for k, v in _bound.get().items() if k not in keys})


def log_with_context(logger: logging.LoggerAdapter, **fields: Any) -> ContextAdapter:
    """
    Adapter over the same logger with extra fields for one section, e.g.
    log_with_context(log, region="home.menu").debug("waiting").
    """
    merged = dict(logger.extra or {})
    merged.update(fields)
    return ContextAdapter(logger.logger, merged)
