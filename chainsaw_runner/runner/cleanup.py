"""Cleaner registration on an execution unit."""

from typing import Optional

from ..driver import Scheduler
from ..engine.cleaner import Cleaner
from ..engine.context import TestContext
from ..logging import BOLD_FG, BOLD_RED, Operation, Status, err_section, log
from .failer import Failer


def setup_cleanup(tc: TestContext, t: Scheduler, failer: Failer) -> Optional[Cleaner]:
    """Create a cleaner that runs when ``t`` finishes.

    Returns None when deletions are disabled for the run.
    """
    if tc.skip_delete:
        return None
    cleaner = Cleaner(timeout=tc.timeouts.cleanup)

    def run_cleanup() -> None:
        if cleaner.empty:
            return
        log(tc, Operation.CLEANUP, Status.BEGIN, color=BOLD_FG)
        try:
            for err in cleaner.run(tc):
                log(tc, Operation.CLEANUP, Status.ERROR, err_section(err), color=BOLD_RED)
                failer.fail(t)
        finally:
            log(tc, Operation.CLEANUP, Status.END, color=BOLD_FG)

    t.cleanup(run_cleanup)
    return cleaner
