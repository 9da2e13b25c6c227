"""
Logging configuration for the relay.

Console lines are human-readable and tagged with the connection being
handled. Errors can additionally be written as JSON lines to
LOG_FILE_PATH. The connection tag comes from a context variable, so it
follows each WebSocket task without being passed around.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

from game_relay.settings import app_settings

log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

# Longest message kept in the structured output
MAX_LOG_MESSAGE_LENGTH = 10_000

DATE_FMT = "%Y-%m-%d %H:%M:%S"

# LogRecord attributes that are not user supplied `extra` fields
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "client_tag"}


def set_log_context(**kwargs: Any) -> None:
    """
    Add fields to the log context of the current task.

    Each WebSocket connection is served by its own task, so fields set while
    handling one connection never show up in another connection's lines.

    Example:
        >>> set_log_context(client_id="0b6f1c52-...")
        >>> logger.info("Frame received")  # tagged [0b6f1c52]
    """
    log_context.set({**log_context.get(), **kwargs})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    log_context.set({})


def get_client_id() -> str:
    """Short form of the current connection identifier, or empty string."""
    return str(get_log_context().get("client_id", ""))[:8]


class StructuredJSONFormatter(logging.Formatter):
    """
    Formats records as one JSON object per line.

    The object holds the record basics, the current log context, any
    `extra` fields passed to the logging call and the formatted traceback.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage()[:MAX_LOG_MESSAGE_LENGTH],
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
            **get_log_context(),
        }

        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter tagging every line with the current connection.

    INFO lines stay short; every other level also shows where the line was
    logged from.
    """

    SHORT_FMT = "%(asctime)s - [%(client_tag)s] %(levelname)s: %(message)s"
    LONG_FMT = (
        "%(asctime)s - [%(client_tag)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._short = logging.Formatter(self.SHORT_FMT, datefmt=DATE_FMT)
        self._long = logging.Formatter(self.LONG_FMT, datefmt=DATE_FMT)

    def format(self, record: logging.LogRecord) -> str:
        record.client_tag = get_client_id() or "-"

        if record.levelno == logging.INFO:
            return self._short.format(record)
        return self._long.format(record)


def _error_file_handler(path: str) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    handler = logging.FileHandler(path)
    handler.setLevel(logging.ERROR)
    handler.setFormatter(StructuredJSONFormatter())
    return handler


def setup_logging() -> logging.Logger:
    """
    Configure the "game_relay" logger.

    Output goes to stdout at LOG_LEVEL and, when LOG_FILE_PATH is set,
    errors are also appended to that file as JSON. Calling it again
    replaces the handlers instead of adding duplicates.

    Returns:
        The configured logger.
    """
    relay_logger = logging.getLogger("game_relay")
    relay_logger.setLevel(getattr(logging, app_settings.LOG_LEVEL.upper()))
    relay_logger.propagate = False
    relay_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(HumanReadableFormatter())
    relay_logger.addHandler(console_handler)

    if app_settings.LOG_FILE_PATH:
        try:
            relay_logger.addHandler(
                _error_file_handler(app_settings.LOG_FILE_PATH)
            )
        except OSError as e:
            relay_logger.warning(f"Could not create file handler: {e}")

    # Keep test output clean
    if os.path.basename(sys.argv[0]) in ("pytest", "py.test"):
        logging.disable(logging.ERROR)

    return relay_logger


logger = setup_logging()
