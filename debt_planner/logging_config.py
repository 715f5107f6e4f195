"""Logging configuration for the debt planner.

Library modules only obtain loggers through :func:`get_logger`; handlers are
attached by the command-line interface and the web app via
:func:`setup_logging`.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Optional

ROOT_LOGGER_NAME = "debt_planner"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    # Standard LogRecord attributes that should not be treated as extra fields
    _STANDARD_ATTRS = {
        "name", "msg", "args", "created", "filename", "funcName", "levelname",
        "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
        "processName", "relativeCreated", "thread", "threadName", "exc_info",
        "exc_text", "stack_info", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        # Fields passed via logger.info(..., extra={...})
        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "WARNING",
    *,
    json_output: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach a single console handler to the ``debt_planner`` logger.

    Args:
        level: Name of the minimum level to emit (``"DEBUG"``, ``"INFO"``...)
        json_output: Emit one JSON object per line instead of plain text
        stream: Destination stream, ``sys.stderr`` when omitted

    Returns:
        The configured package logger
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream)
    handler.setLevel(numeric_level)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(handler)
    root_logger.debug("Logging initialized", extra={"level": level.upper(), "json": json_output})
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package logger (``debt_planner.<name>``)."""
    if name.startswith(f"{ROOT_LOGGER_NAME}.") or name == ROOT_LOGGER_NAME:
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
