"""Operations, statuses, colors and multi-line sections of the audit log."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operation(str, Enum):
    """What the logged line is about."""
    INTERNAL = "INTERNAL"
    APPLY = "APPLY"
    ASSERT = "ASSERT"
    CATCH = "CATCH"
    CLEANUP = "CLEANUP"
    COMMAND = "CMD"
    CREATE = "CREATE"
    DELETE = "DELETE"
    ERROR = "ERROR"
    GET = "GET"
    PATCH = "PATCH"
    SCRIPT = "SCRIPT"
    SLEEP = "SLEEP"
    UPDATE = "UPDATE"
    WAIT = "WAIT"


class Status(str, Enum):
    """Outcome of the logged operation."""
    BEGIN = "BEGIN"
    END = "END"
    OK = "OK"
    DONE = "DONE"
    WARN = "WARN"
    ERROR = "ERROR"
    RUN = "RUN"
    LOG = "LOG"


# click.style keyword sets
BOLD_RED: dict[str, Any] = {"fg": "red", "bold": True}
BOLD_GREEN: dict[str, Any] = {"fg": "green", "bold": True}
BOLD_YELLOW: dict[str, Any] = {"fg": "yellow", "bold": True}
BOLD_FG: dict[str, Any] = {"bold": True}


@dataclass(frozen=True)
class Section:
    """A named block of lines rendered below the log line header."""
    name: str
    lines: tuple[str, ...] = ()

    def __str__(self) -> str:
        return "\n".join((f"=== {self.name}",) + self.lines)


def section(name: str, *lines: str) -> Section:
    return Section(name=name, lines=tuple(lines))


def err_section(err: BaseException) -> Section:
    """Render an exception as an ``=== ERROR`` section."""
    text = str(err) or type(err).__name__
    return Section(name="ERROR", lines=tuple(text.splitlines()))
