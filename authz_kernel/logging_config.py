"""
Structured JSON logging for authorization decisions.

Every record under the ``authz`` logger namespace is written as one JSON
object per line.  Records are enriched with the request fields bound in
``LogContext`` (which organization, which user, which action), so a denial
logged deep inside the policy engine can be joined to the request that
caused it without threading ids through every call.

Kernel exceptions contribute their ``code`` and their structured fields
(``exc_action``, ``exc_policy_id`` ...) to the record.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Iterator

# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "organization_id",
    "user_id",
    "action",
    "trace_id",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"authz_log_{name}", default=None) for name in CONTEXT_FIELDS
}


class LogContext:
    """Request-scoped log fields, isolated per thread and per asyncio task."""

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        organization_id: str | None = None,
        user_id: str | None = None,
        action: str | None = None,
        trace_id: str | None = None,
    ) -> None:
        """Set fields for the rest of the current context. None leaves a field as is."""
        values = {
            "correlation_id": correlation_id,
            "organization_id": organization_id,
            "user_id": user_id,
            "action": action,
            "trace_id": trace_id,
        }
        for name, value in values.items():
            if value is not None:
                _context_vars[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        fields: dict[str, str] = {}
        for name, var in _context_vars.items():
            value = var.get()
            if value is not None:
                fields[name] = value
        return fields

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[type["LogContext"]]:
        """
        Bind fields for the duration of a ``with`` block.

        Previous values are restored on exit, including "unset".  Names that
        are not context fields are ignored; values are stringified.
        """
        tokens: list[tuple[ContextVar[str | None], Token]] = []
        for name, value in fields.items():
            var = _context_vars.get(name)
            if var is not None and value is not None:
                tokens.append((var, var.set(str(value))))
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else on a record came in via extra=.
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Encode the value types that show up in authorization log payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return sorted(str(item) for item in obj)
        return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name not in ("args", "code"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, bound context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

LOGGER_NAMESPACE = "authz"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """``get_logger("services.audit")`` returns the ``authz.services.audit`` logger."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``authz`` logger.

    Only the first call has any effect.  The namespace stops propagating to
    the root logger so host applications do not print each record twice.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    namespace.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    namespace.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. Test suites only."""
    global _configured
    with _lock:
        _configured = False
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
    namespace.propagate = True
