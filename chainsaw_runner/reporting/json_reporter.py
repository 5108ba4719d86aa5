"""JSON report generator for test runs.

Generates structured JSON reports from the execution tree and counters.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..driver import T
from ..engine.context import Summary


class JsonReporter:
    """Generates JSON reports from run results."""

    def generate(
        self,
        root: T,
        summary: Summary,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report.

        Args:
            root: Finished root unit of the run.
            summary: Pass/fail/skip counters of the run.
            error: Overall error message if the run could not complete.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        counts = summary.to_dict()
        failed = root.failed or counts["failed"] > 0 or error is not None

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "name": root.name,
            "status": "failed" if failed else "passed",
            "summary": {
                "total": counts["passed"] + counts["failed"] + counts["skipped"],
                "passed": counts["passed"],
                "failed": counts["failed"],
                "skipped": counts["skipped"],
                "duration_ms": int(root.duration * 1000),
            },
            "tests": [
                {
                    "name": unit.name,
                    "status": _status(unit),
                    "duration_ms": int(unit.duration * 1000),
                    "skip_reason": unit.skip_reason or None,
                    "messages": list(unit.messages),
                }
                for unit in root.walk()
                if unit is not root
            ],
            "error": error,
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate the CLI JSON envelope.

        {
            "success": bool,
            "command": "test",
            "data": { ... },
            "message": str
        }
        """
        summary = report["summary"]
        passed = report["status"] == "passed"

        data: dict[str, Any] = {
            "total_tests": summary["total"],
            "passed": summary["passed"],
            "failed": summary["failed"],
            "skipped": summary["skipped"],
            "duration_ms": summary["duration_ms"],
        }

        if report_path:
            data["report_path"] = report_path

        if not passed and report.get("error"):
            message = f"Run failed: {report['error']}"
        elif not passed:
            message = f"{summary['failed']} of {summary['total']} tests failed"
        else:
            message = "All tests passed"

        return {
            "success": passed,
            "command": "test",
            "data": data,
            "message": message,
        }


def _status(unit: T) -> str:
    if unit.skipped:
        return "skip"
    return "fail" if unit.failed else "pass"
