"""
Logging for the keyv store.

Log calls take keyword fields (``logger.info("Set key", key="john")``).
Fields set with log_context() (the active backend and table) are merged
into every record made inside the block. Console output goes through
rich; an optional log file receives one JSON object per line.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, MutableMapping

import orjson
from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "keyv"

_fields_var: ContextVar[dict[str, Any]] = ContextVar("keyv_log_fields", default={})


def current_fields() -> dict[str, Any]:
    """Fields bound by the enclosing log_context() blocks."""
    return dict(_fields_var.get())


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind fields to every record logged inside the block. None values are ignored."""
    bound = {**_fields_var.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _fields_var.set(bound)
    try:
        yield
    finally:
        _fields_var.reset(token)


class StoreLogger(logging.LoggerAdapter):
    """Adapter turning keyword arguments into a ``fields`` record attribute."""

    _PASSTHROUGH = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        fields = current_fields()
        for name in [k for k in kwargs if k not in self._PASSTHROUGH]:
            fields[name] = kwargs.pop(name)
        kwargs["extra"] = {**kwargs.get("extra", {}), "fields": fields}
        return msg, kwargs


class JSONLinesFormatter(logging.Formatter):
    """One JSON object per record, fields flattened next to the message."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **getattr(record, "fields", {}),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str).decode("utf-8")


class FieldsFormatter(logging.Formatter):
    """Console format: the message followed by ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        fields = getattr(record, "fields", {})
        if fields:
            message += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return message


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    console_output: bool = True,
) -> None:
    """Configure the ``keyv`` logger.

    Args:
        log_level: Level for the console handler and the logger itself.
        log_file: JSON lines file receiving every record, if given.
        console_output: Whether to log to stderr through rich.
    """
    level = getattr(logging, log_level.upper())
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG if log_file else level)
    root.propagate = False

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONLinesFormatter())
        root.addHandler(file_handler)

    if console_output:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        console_handler.setLevel(level)
        console_handler.setFormatter(FieldsFormatter())
        root.addHandler(console_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())


def get_logger(name: str) -> StoreLogger:
    """Get a logger under the ``keyv`` namespace."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return StoreLogger(logging.getLogger(name), {})
