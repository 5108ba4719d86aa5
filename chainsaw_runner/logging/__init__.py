"""Logging module - scoped audit trail of a run."""

from .logger import (
    Logger,
    Sink,
    describe_resource,
    from_context,
    into_context,
    log,
    new_logger,
)
from .sections import (
    BOLD_FG,
    BOLD_GREEN,
    BOLD_RED,
    BOLD_YELLOW,
    Operation,
    Section,
    Status,
    err_section,
    section,
)

__all__ = [
    "Logger",
    "Sink",
    "describe_resource",
    "from_context",
    "into_context",
    "log",
    "new_logger",
    "BOLD_FG",
    "BOLD_GREEN",
    "BOLD_RED",
    "BOLD_YELLOW",
    "Operation",
    "Section",
    "Status",
    "err_section",
    "section",
]
