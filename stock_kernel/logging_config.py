"""
Structured logging for the stock kernel.

Every logger lives under the ``stock_kernel`` namespace.  Records carry an
event name as the message plus structured ``extra`` fields, and pick up the
fields bound in ``LogContext`` (the breakdown or purchase being edited, the
actor, a correlation id).

Two output formats:

- ``json``    one JSON object per line (default; what tests parse)
- ``console`` ``<ts> [LEVEL] logger: event key=value ...`` for terminals
"""

__all__ = [
    "LOG_FORMATS",
    "ConsoleFormatter",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Mapping
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

LOG_FORMATS = ("json", "console")

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("stock_log_context", default=_EMPTY)


class LogContext:
    """
    Context-local fields merged into every record.

    Values are stored as strings; ``None`` never overwrites a bound value.
    """

    FIELD_NAMES = ("correlation_id", "session_id", "actor_id", "document_id")

    @classmethod
    def _merged(cls, fields: dict[str, Any]) -> Mapping[str, str]:
        unknown = set(fields) - set(cls.FIELD_NAMES)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = dict(_context.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        session_id: str | None = None,
        actor_id: str | None = None,
        document_id: str | None = None,
    ) -> None:
        _context.set(cls._merged({
            "correlation_id": correlation_id,
            "session_id": session_id,
            "actor_id": actor_id,
            "document_id": document_id,
        }))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    def bind(cls, **fields: Any) -> "_BoundContext":
        """Bind fields for the duration of a ``with`` block, then restore."""
        return _BoundContext(cls._merged(fields))


class _BoundContext:

    def __init__(self, fields: Mapping[str, str]):
        self._fields = fields
        self._token: Token | None = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(self._fields)
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _plain(value: Any) -> Any:
    """Reduce a log value to something JSON can carry."""
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields, then extras; envelope keys are never overwritten."""
    fields: dict[str, Any] = dict(LogContext.get_all())
    for key, val in vars(record).items():
        if key not in _STDLIB_KEYS and key not in fields:
            fields[key] = _plain(val)
    return fields


def _exception_fields(record: logging.LogRecord) -> dict[str, Any]:
    if not record.exc_info or record.exc_info[1] is None:
        return {}
    exc = record.exc_info[1]
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # StockKernelError subclasses keep their inputs as public attributes
    for key, val in vars(exc).items():
        if not key.startswith("_") and key not in ("args", "code"):
            fields[f"exc_{key}"] = _plain(val)
    return fields


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=UTC).isoformat()


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, val in _record_fields(record).items():
            payload.setdefault(key, val)
        payload.update(_exception_fields(record))
        if record.exc_info and record.exc_info[1] is not None:
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """``<ts> [LEVEL] logger: event key=value ...`` with the traceback below."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        fields.update(_exception_fields(record))
        pairs = " ".join(f"{k}={v}" for k, v in fields.items())
        line = f"{_timestamp(record)} [{record.levelname}] {record.name}: {record.getMessage()}"
        if pairs:
            line = f"{line} {pairs}"
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": StructuredFormatter,
    "console": ConsoleFormatter,
}


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "stock_kernel"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Logger named ``stock_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
    fmt: str = "json",
) -> None:
    """
    Attach one handler to the ``stock_kernel`` logger (idempotent).

    ``level`` may be a number or a level name such as ``"DEBUG"``.  A
    caller-supplied ``handler`` keeps its own formatter when it has one.

    Raises:
        ValueError: for an unknown ``fmt`` or level name.
    """
    global _configured
    if fmt not in _FORMATTERS:
        raise ValueError(f"Log format must be one of {LOG_FORMATS}, got {fmt!r}")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    if handler is None or handler.formatter is None:
        h.setFormatter(_FORMATTERS[fmt]())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
