"""
Structured logging for argmap.

Every record can carry the diagram session it belongs to and the detail
level being worked on. Both are promoted to first-class output fields; any
other keyword passed to a ``StructuredLogger`` call becomes an extra field.

Usage:
    from argmap.logging_config import LogContext, configure_logging, get_logger

    configure_logging(level="INFO", json_output=True)

    logger = get_logger(__name__)
    with LogContext(session_id="s-42", detail_level=2):
        logger.info("Diagram cached", nodes=11)

Text output:
    2026-10-18 09:30:00 [INFO] [controller] [s-42 L2] Diagram cached nodes=11
"""

import asyncio
import json
import logging
import logging.handlers
import os
import sys
import threading
import time
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional

_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

# Context keys rendered as dedicated output fields instead of key=value pairs
SESSION_FIELD = "session_id"
LEVEL_FIELD = "detail_level"

# Chatty third-party loggers held at WARNING unless argmap runs at DEBUG
QUIET_LOGGERS = ("aiohttp", "asyncio")

DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 5


@dataclass
class LogRecord:
    """One formatted log line, before rendering to JSON or text."""

    timestamp: str
    level: str
    logger: str
    message: str
    session_id: Optional[str] = None
    detail_level: Optional[int] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Dict[str, Any]] = None

    @property
    def scope(self) -> str:
        """``"<session> L<level>"``, omitting whichever part is unset."""
        parts = []
        if self.session_id:
            parts.append(self.session_id)
        if self.detail_level is not None:
            parts.append(f"L{self.detail_level}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "ts": self.timestamp,
            "level": self.level,
            "logger": self.logger,
            "msg": self.message,
        }
        if self.session_id:
            result[SESSION_FIELD] = self.session_id
        if self.detail_level is not None:
            result[LEVEL_FIELD] = self.detail_level
        result.update(self.fields)
        if self.exception:
            result["exception"] = self.exception
        return result

    def to_text(self) -> str:
        parts = [self.timestamp, f"[{self.level}]", f"[{self.logger}]"]
        if self.scope:
            parts.append(f"[{self.scope}]")
        parts.append(self.message)
        if self.fields:
            parts.append(" ".join(f"{k}={v}" for k, v in self.fields.items()))
        text = " ".join(parts)
        if self.exception:
            text += f"\n{self.exception['traceback']}"
        return text


class _StructuredFormatter(logging.Formatter):
    """Merges log context with per-call fields; explicit fields win."""

    def _timestamp(self) -> str:
        raise NotImplementedError

    def _logger_name(self, record: logging.LogRecord) -> str:
        return record.name

    def build(self, record: logging.LogRecord) -> LogRecord:
        fields = {**get_context(), **getattr(record, "structured_fields", {})}
        session_id = fields.pop(SESSION_FIELD, None) or getattr(record, SESSION_FIELD, None)
        log_record = LogRecord(
            timestamp=self._timestamp(),
            level=record.levelname,
            logger=self._logger_name(record),
            message=record.getMessage(),
            session_id=session_id,
            detail_level=fields.pop(LEVEL_FIELD, None),
            fields=fields,
        )
        if record.exc_info:
            exc_type, exc_value = record.exc_info[0], record.exc_info[1]
            log_record.exception = {
                "type": exc_type.__name__ if exc_type else "Unknown",
                "message": str(exc_value) if exc_value else "",
                "traceback": self.formatException(record.exc_info),
            }
        return log_record


class JSONFormatter(_StructuredFormatter):
    """One JSON object per line, for log shippers."""

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self.build(record).to_dict(), default=str)


class TextFormatter(_StructuredFormatter):
    """Human-readable lines with the short logger name."""

    def _timestamp(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def _logger_name(self, record: logging.LogRecord) -> str:
        return record.name.rsplit(".", 1)[-1]

    def format(self, record: logging.LogRecord) -> str:
        return self.build(record).to_text()


class StructuredLogger:
    """
    Logger wrapper whose keyword arguments become structured fields.

    The log level and message are positional-only, so any field name
    (``level``, ``message``) is free for callers to use.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self.name = name

    def _log(self, log_level: int, message: str, /, exc_info: bool = False, **fields: Any) -> None:
        if not self._logger.isEnabledFor(log_level):
            return
        self._logger.log(
            log_level, message, exc_info=exc_info, extra={"structured_fields": fields}
        )

    def debug(self, message: str, /, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, /, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, /, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, /, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)

    def exception(self, message: str, /, **fields: Any) -> None:
        """Log at ERROR with the active exception attached."""
        self._log(logging.ERROR, message, exc_info=True, **fields)

    def isEnabledFor(self, log_level: int) -> bool:
        return self._logger.isEnabledFor(log_level)


class LogContext:
    """
    Scope log fields to a block.

    The fields live in a ContextVar, so concurrent asyncio tasks serving
    different sessions never see each other's ``session_id``.
    """

    def __init__(self, **fields: Any):
        self._fields = {k: v for k, v in fields.items() if v is not None}
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set({**_log_context.get(), **self._fields})
        return self

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _log_context.reset(self._token)


def get_context() -> Dict[str, Any]:
    return _log_context.get()


def clear_context() -> None:
    _log_context.set({})


_loggers: Dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger by name (thread-safe)."""
    with _loggers_lock:
        if name not in _loggers:
            _loggers[name] = StructuredLogger(name)
        return _loggers[name]


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    return int(value) if value.isdigit() else default


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: str | None = None,
) -> None:
    """
    Install argmap's handlers on the root logger.

    Called once by the CLI. Unset arguments fall back to ``ARGMAP_LOG_LEVEL``,
    ``ARGMAP_LOG_FORMAT`` ("json" or "text") and ``ARGMAP_LOG_FILE``; file
    output rotates per ``ARGMAP_LOG_MAX_BYTES`` / ``ARGMAP_LOG_BACKUP_COUNT``.
    """
    level_name = (level or os.environ.get("ARGMAP_LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if json_output is None:
        json_output = os.environ.get("ARGMAP_LOG_FORMAT", "text").lower() == "json"
    file_path = log_file or os.environ.get("ARGMAP_LOG_FILE", "")

    formatter = JSONFormatter() if json_output else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_path:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                file_path,
                maxBytes=_env_int("ARGMAP_LOG_MAX_BYTES", DEFAULT_LOG_MAX_BYTES),
                backupCount=_env_int("ARGMAP_LOG_BACKUP_COUNT", DEFAULT_LOG_BACKUP_COUNT),
            )
        )

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root.addHandler(handler)

    logging.getLogger("argmap").setLevel(log_level)
    quiet_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def log_function(
    level: str = "DEBUG",
    log_args: bool = False,
    log_result: bool = False,
    log_duration: bool = True,
):
    """
    Log completion (or failure) and duration of a plain or coroutine function.

    Exceptions are logged and re-raised unchanged.

    Args:
        level: Level of the completion record; failures always log at ERROR.
        log_args: Include the positional count and keyword names.
        log_result: Include the result type.
        log_duration: Include the duration in milliseconds.
    """
    log_level = getattr(logging, level.upper(), logging.DEBUG)

    def decorator(func: Callable) -> Callable:
        logger = get_logger(func.__module__)

        def _start_fields(args: tuple, kwargs: dict) -> Dict[str, Any]:
            fields: Dict[str, Any] = {"function": func.__name__}
            if log_args:
                fields["args_count"] = len(args)
                fields["kwargs_keys"] = list(kwargs)
            return fields

        def _finish(fields: Dict[str, Any], start: float, result: Any) -> None:
            if log_duration:
                fields["duration_ms"] = round((time.monotonic() - start) * 1000, 3)
            if log_result and result is not None:
                fields["result_type"] = type(result).__name__
            logger._log(log_level, f"Function completed: {func.__name__}", **fields)

        def _fail(fields: Dict[str, Any], start: float, error: Exception) -> None:
            fields["duration_ms"] = round((time.monotonic() - start) * 1000, 3)
            fields["error"] = str(error)
            logger.error(f"Function failed: {func.__name__}", exc_info=True, **fields)

        @wraps(func)
        def wrapper(*args, **kwargs):
            fields = _start_fields(args, kwargs)
            start = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _fail(fields, start, e)
                raise
            _finish(fields, start, result)
            return result

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            fields = _start_fields(args, kwargs)
            start = time.monotonic()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _fail(fields, start, e)
                raise
            _finish(fields, start, result)
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return wrapper

    return decorator


__all__ = [
    "LogRecord",
    "JSONFormatter",
    "TextFormatter",
    "StructuredLogger",
    "LogContext",
    "get_context",
    "clear_context",
    "get_logger",
    "configure_logging",
    "log_function",
]
