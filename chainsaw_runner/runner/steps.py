"""Default execution of step operations.

Handles the resource lifecycle operations a runner needs on its own:
``apply``, ``create``, ``delete`` and ``sleep``. Everything else (asserts,
errors, scripts, ...) belongs to a dedicated engine plugged in through
:class:`StepExecutor` subclasses; the default logs and skips them.
"""

from pathlib import Path
from typing import Any, Optional

import yaml

from ..client.resource import Resource
from ..config import parse_duration
from ..discovery.model import Step
from ..engine.cleaner import Cleaner
from ..engine.context import TestContext
from ..engine.namespacer import Namespacer
from ..errors import (
    AlreadyExistsError,
    CancellationError,
    ChainsawError,
    DiscoveryError,
    NotFoundError,
)
from ..logging import BOLD_GREEN, BOLD_YELLOW, Operation, Status, from_context

RESOURCE_OPERATIONS = {"apply": Operation.APPLY, "create": Operation.CREATE}


class StepExecutor:
    """Runs the operations of a step against the cluster client."""

    def execute(
        self,
        tc: TestContext,
        step: Step,
        base_path: str,
        namespacer: Optional[Namespacer],
        cleaner: Optional[Cleaner],
    ) -> None:
        """Run the step's ``try`` operations, then its ``cleanup`` ones.

        Raises:
            ChainsawError: On the first failing operation.
        """
        try:
            for operation in step.operations:
                self.execute_operation(tc, operation, base_path, namespacer, cleaner)
        finally:
            for operation in step.cleanup:
                self.execute_operation(tc, operation, base_path, namespacer, None)

    def execute_operation(
        self,
        tc: TestContext,
        operation: dict[str, Any],
        base_path: str,
        namespacer: Optional[Namespacer],
        cleaner: Optional[Cleaner],
    ) -> None:
        tc.cancel.raise_if_cancelled()
        if "sleep" in operation:
            self.sleep(tc, operation["sleep"])
        elif "delete" in operation:
            for obj in self.load_resources(tc, operation["delete"], base_path, namespacer):
                self.delete(tc, obj)
        else:
            for key, op in RESOURCE_OPERATIONS.items():
                if key in operation:
                    for obj in self.load_resources(tc, operation[key], base_path, namespacer):
                        self.create(tc, obj, op, cleaner)
                    return
            self.unsupported(tc, operation)

    def load_resources(
        self,
        tc: TestContext,
        spec: Any,
        base_path: str,
        namespacer: Optional[Namespacer],
    ) -> list[Resource]:
        """Resources named by an operation: inline ``resource``/``ref`` or a ``file``."""
        if not isinstance(spec, dict):
            raise DiscoveryError(f"operation must be a mapping, got {type(spec).__name__}")
        if "resource" in spec or "ref" in spec:
            documents = [spec.get("resource") or spec.get("ref")]
        elif "file" in spec:
            path = Path(base_path) / spec["file"]
            try:
                with open(path, "r", encoding="utf-8") as f:
                    documents = [doc for doc in yaml.safe_load_all(f) if doc is not None]
            except (OSError, yaml.YAMLError) as e:
                raise DiscoveryError(f"failed to load {path}: {e}") from e
        else:
            raise DiscoveryError("operation needs one of 'resource', 'ref' or 'file'")

        resources = []
        for document in documents:
            obj = Resource(tc.compilers.evaluate_template(document, tc.bindings))
            if namespacer is not None:
                namespacer.apply(obj)
            resources.append(obj)
        return resources

    def create(
        self,
        tc: TestContext,
        obj: Resource,
        operation: Operation,
        cleaner: Optional[Cleaner],
    ) -> None:
        log = self._logger(tc, obj)
        cancel = tc.cancel.with_timeout(tc.timeouts.apply)
        try:
            tc.client.create(obj, cancel=cancel)
        except AlreadyExistsError:
            if operation is not Operation.APPLY:
                raise
            if log is not None:
                log.log(operation, Status.OK, "unchanged", color=BOLD_GREEN)
            return
        if log is not None:
            log.log(operation, Status.OK, color=BOLD_GREEN)
        if cleaner is not None:
            client = tc.client
            cleaner.add(obj, lambda o, c: client.delete(o, cancel=c))

    def delete(self, tc: TestContext, obj: Resource) -> None:
        log = self._logger(tc, obj)
        cancel = tc.cancel.with_timeout(tc.timeouts.delete)
        try:
            tc.client.delete(obj, cancel=cancel)
        except NotFoundError:
            pass
        if log is not None:
            log.log(Operation.DELETE, Status.OK, color=BOLD_GREEN)

    def sleep(self, tc: TestContext, spec: Any) -> None:
        duration = parse_duration(spec.get("duration", 0) if isinstance(spec, dict) else spec)
        log = from_context(tc)
        if log is not None:
            log.log(Operation.SLEEP, Status.RUN, f"{duration}s")
        if tc.cancel.wait(duration):
            raise CancellationError(tc.cancel.reason)
        if log is not None:
            log.log(Operation.SLEEP, Status.DONE)

    def unsupported(self, tc: TestContext, operation: dict[str, Any]) -> None:
        log = from_context(tc)
        if log is not None:
            kinds = ", ".join(sorted(operation))
            log.log(Operation.INTERNAL, Status.WARN, f"no engine for operation: {kinds}", color=BOLD_YELLOW)

    @staticmethod
    def _logger(tc: TestContext, obj: Resource):
        if tc.client is None:
            raise ChainsawError("no cluster client configured")
        log = from_context(tc)
        return log.with_resource(obj) if log is not None else None
