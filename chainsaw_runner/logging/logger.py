"""Scoped audit logger.

A :class:`Logger` carries the identity of the test and step it reports for,
and optionally the resource being operated on. It is a frozen value:
:meth:`Logger.with_resource` returns a new logger, so one base logger can be
shared across scenario runs and specialised per resource without cross-talk.

Example:
    base = new_logger(click.echo, RealClock(), "my-test", "step-1")
    base.with_resource(pod).log(Operation.CREATE, Status.OK)
    # | 10:02:03 | my-test | step-1 | v1/Pod @ default/web | CREATE | OK |
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Optional

import click

from ..clock import Clock
from ..client.resource import ResourceLike
from ..log_config import get_logger
from .sections import Operation, Section, Status

Sink = Callable[[str], None]

logger = get_logger("logging")


@dataclass(frozen=True)
class Logger:
    """Immutable logger bound to a test, a step and maybe a resource."""
    sink: Sink
    clock: Clock
    test: str
    step: str
    resource: Optional[ResourceLike] = None
    color: bool = True

    def with_resource(self, resource: Optional[ResourceLike]) -> "Logger":
        """Return a copy targeting ``resource``; None yields no resource."""
        return dataclasses.replace(self, resource=resource)

    def log(
        self,
        operation: Operation,
        status: Status,
        *args: Any,
        color: Optional[dict[str, Any]] = None,
    ) -> None:
        """Write one line to the sink. Never raises."""
        try:
            self.sink(self.format(operation, status, *args, color=color))
        except Exception:
            logger.exception(f"Failed to write log line for test {self.test}")

    def format(
        self,
        operation: Operation,
        status: Status,
        *args: Any,
        color: Optional[dict[str, Any]] = None,
    ) -> str:
        fields = [
            self.clock.now().strftime("%H:%M:%S"),
            self.test,
            self.step,
        ]
        if self.resource is not None:
            fields.append(describe_resource(self.resource))
        fields.append(f"{_value(operation):<8}")
        status_text = f"{_value(status):<5}"
        if color and self.color:
            status_text = click.style(status_text, **color)
        fields.append(status_text)

        inline = [str(arg) for arg in args if not isinstance(arg, Section)]
        sections = [str(arg) for arg in args if isinstance(arg, Section)]
        line = "| " + " | ".join(fields) + " |"
        if inline:
            line += " " + " ".join(inline)
        if sections:
            line += "\n" + "\n".join(sections)
        return line


def describe_resource(resource: ResourceLike) -> str:
    """``group/version/kind @ namespace/name`` of a resource."""
    name = resource.get_name()
    namespace = resource.get_namespace()
    key = f"{namespace}/{name}" if namespace else name
    return f"{resource.group_version_kind()} @ {key}"


def _value(item: Any) -> str:
    return item.value if hasattr(item, "value") else str(item)


def new_logger(
    sink: Sink,
    clock: Clock,
    test: str,
    step: str,
    color: bool = True,
) -> Logger:
    return Logger(sink=sink, clock=clock, test=test, step=step, color=color)


def into_context(tc, log: Logger):
    """Return a copy of the test context carrying ``log``."""
    return tc.with_logger(log)


def from_context(tc) -> Optional[Logger]:
    return getattr(tc, "logger", None)


def log(
    tc,
    operation: Operation,
    status: Status,
    *args: Any,
    color: Optional[dict[str, Any]] = None,
) -> None:
    """Log through the logger carried by ``tc``, if any."""
    current = from_context(tc)
    if current is not None:
        current.log(operation, status, *args, color=color)
