"""Structured logging with correlation ids bound per request and per turn."""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
conversation_id_var: ContextVar[str | None] = ContextVar("conversation_id", default=None)
turn_id_var: ContextVar[str | None] = ContextVar("turn_id", default=None)

# (json key, short text label, variable)
_CONTEXT_VARS: tuple[tuple[str, str, ContextVar[str | None]], ...] = (
    ("request_id", "req", request_id_var),
    ("conversation_id", "conv", conversation_id_var),
    ("turn_id", "turn", turn_id_var),
)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

_NOISY_LOGGERS = ("asyncio", "uvicorn.access", "httpx", "httpcore")


def set_request_context(
    request_id: str | None = None,
    conversation_id: str | None = None,
    turn_id: str | None = None,
) -> None:
    """Bind correlation ids; ``None`` leaves the current value alone."""
    for var, value in (
        (request_id_var, request_id),
        (conversation_id_var, conversation_id),
        (turn_id_var, turn_id),
    ):
        if value is not None:
            var.set(value)


def clear_request_context() -> None:
    for _, _, var in _CONTEXT_VARS:
        var.set(None)


def context_ids() -> dict[str, str]:
    """Currently bound correlation ids, keyed by their JSON field name."""
    return {key: value for key, _, var in _CONTEXT_VARS if (value := var.get())}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: level, logger, message, ids, extras."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            **context_ids(),
        }
        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)
        log_data.update(_extra_fields(record))

        return json.dumps(
            {k: v for k, v in log_data.items() if v is not None},
            default=str,
        )


class TextFormatter(logging.Formatter):
    """``ts | LEVEL | logger [req=..., turn=...] | message`` for local runs."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        labels = [
            f"{label}={value[:8]}"
            for _, label, var in _CONTEXT_VARS
            if (value := var.get())
        ]
        context = f" [{', '.join(labels)}]" if labels else ""

        line = f"{timestamp} | {record.levelname:8} | {record.name}{context} | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class NamespaceFilter(logging.Filter):
    """Pass INFO and above; pass DEBUG only for the listed top-level namespaces."""

    def __init__(self, debug_namespaces: list[str]):
        super().__init__()
        self.debug_namespaces = set(debug_namespaces)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.INFO:
            return True
        return record.name.split(".")[0] in self.debug_namespaces


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges bound fields into each call's ``extra``."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    debug_namespaces: list[str] | None = None,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_type: Output format ('json' or 'text')
        debug_namespaces: Namespaces allowed to emit DEBUG records
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if format_type == "json" else TextFormatter())
    if debug_namespaces:
        handler.addFilter(NamespaceFilter(debug_namespaces))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug_namespaces else getattr(logging, level.upper()))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Logger for ``name`` whose records always carry ``extra``."""
    return ContextLogger(logging.getLogger(name), extra)
