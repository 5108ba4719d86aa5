"""Process-level diagnostics logging for chainsaw-runner.

The audit trail of a run goes through :mod:`chainsaw_runner.logging`; this
module only configures the stdlib loggers used for client retries, cleanup
failures and other diagnostics.
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Optional

_RESERVED = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging in CI."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Fields passed through extra=
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                log_entry[key] = value

        return json.dumps(log_entry, separators=(",", ":"), default=str)


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    stream=None,
) -> None:
    """
    Setup diagnostics logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to
            CHAINSAW_LOG_LEVEL or WARNING.
        json_format: Use JSON lines; defaults to CHAINSAW_LOG_JSON=1.
        stream: Output stream, stderr by default.
    """
    if level is None:
        level = os.getenv("CHAINSAW_LOG_LEVEL", "WARNING")
    level = level.upper()

    if json_format is None:
        json_format = os.getenv("CHAINSAW_LOG_JSON", "0") == "1"

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("chainsaw_runner")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level, logging.WARNING))
    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get logger for specific module."""
    if not name.startswith("chainsaw_runner."):
        name = f"chainsaw_runner.{name}"
    return logging.getLogger(name)
