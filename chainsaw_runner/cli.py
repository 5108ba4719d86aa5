"""CLI entry point for chainsaw-runner.

Usage:
    chainsaw-runner test [PATHS]... [options]
    chainsaw-runner validate [PATHS]...
"""

import json
import sys
import time
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .cancel import CancelToken
from .client.http_client import HttpClient
from .config import load_configuration
from .discovery import discover_tests
from .errors import ChainsawError
from .log_config import setup_logging
from .reporting import JsonReporter
from .runner import Failer, Runner, new_context


@click.group()
@click.version_option(__version__, prog_name="chainsaw-runner")
def main():
    """Run declarative tests against a cluster resource API."""


@main.command("test")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Configuration file.")
@click.option("--namespace", default=None, help="Shared namespace for all tests.")
@click.option("--server", default=None, help="API server URL (or set CHAINSAW_SERVER).")
@click.option("--token", default=None, help="Bearer token (or set CHAINSAW_TOKEN).")
@click.option("--insecure", is_flag=True, help="Skip TLS verification.")
@click.option("--full-name", is_flag=True, default=None, help="Name tests after their path.")
@click.option("--parallel", type=click.IntRange(min=1), default=None, help="Maximum parallel tests.")
@click.option("--fail-fast", is_flag=True, default=None, help="Stop at the first failure.")
@click.option("--skip-delete", is_flag=True, default=None, help="Keep created resources.")
@click.option("--report-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory for the JSON report.")
@click.option("--no-color", is_flag=True, help="Plain audit log.")
@click.option("--log-level", default=None, help="Diagnostics log level.")
def test_command(
    paths: tuple[Path, ...],
    config_path: Optional[Path],
    namespace: Optional[str],
    server: Optional[str],
    token: Optional[str],
    insecure: bool,
    full_name: Optional[bool],
    parallel: Optional[int],
    fail_fast: Optional[bool],
    skip_delete: Optional[bool],
    report_dir: Optional[Path],
    no_color: bool,
    log_level: Optional[str],
):
    """Discover tests below PATHS (default: .) and run them."""
    setup_logging(level=log_level)
    start_time = time.time()

    try:
        config = load_configuration(config_path)
    except ChainsawError as e:
        output_error(f"Invalid configuration: {e}")
        sys.exit(1)

    if namespace is not None:
        config.namespace.name = namespace
    if server:
        config.cluster.server = server
    if token:
        config.cluster.token = token
    if insecure:
        config.cluster.verify = False
    if full_name is not None:
        config.full_name = full_name
    if parallel is not None:
        config.parallel = parallel
    if fail_fast is not None:
        config.fail_fast = fail_fast
    if skip_delete is not None:
        config.skip_delete = skip_delete

    if not config.cluster.server:
        output_error("No API server configured (use --server or set CHAINSAW_SERVER).")
        sys.exit(1)

    tests = discover_tests(paths or (Path("."),), file_name=config.test_file)
    if not tests:
        output_error("No tests found.")
        sys.exit(1)

    cancel = CancelToken()
    reporter = JsonReporter()

    try:
        with HttpClient(
            config.cluster.server,
            token=config.cluster.token,
            verify=config.cluster.verify,
        ) as client:
            tc = new_context(config, client).with_cancel(cancel)
            runner = Runner(
                sink=click.echo,
                failer=Failer(fail_fast=config.fail_fast, cancel=cancel),
                color=not no_color,
            )
            result = runner.run(tc, config.namespace, tests, parallel=config.parallel)

        report = reporter.generate(result.root, result.summary)
        report_path = None
        if report_dir is not None or config.report is not None:
            directory = report_dir or Path(config.report.path or ".")
            name = config.report.name if config.report is not None else "chainsaw-report"
            report_path = str(reporter.save(report, directory / f"{name}.json"))

        flow_output = reporter.generate_flow_output(report, report_path)
        print(json.dumps(flow_output, ensure_ascii=False))

        if not flow_output.get("success", False):
            sys.exit(1)

    except KeyboardInterrupt:
        cancel.cancel("interrupted")
        duration_ms = int((time.time() - start_time) * 1000)
        output_error("Test run interrupted by user", duration_ms=duration_ms)
        sys.exit(130)


@main.command("validate")
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option("--test-file", default="chainsaw-test", help="Test file name without extension.")
def validate_command(paths: tuple[Path, ...], test_file: str):
    """Load and validate tests below PATHS without running them."""
    tests = discover_tests(paths or (Path("."),), file_name=test_file)
    invalid = [test for test in tests if test.error is not None]
    for test in invalid:
        click.echo(f"{test.base_path}: {test.error}", err=True)

    output = {
        "success": not invalid and bool(tests),
        "command": "validate",
        "data": {"total_tests": len(tests), "invalid": len(invalid)},
        "message": f"{len(tests) - len(invalid)} of {len(tests)} tests valid",
    }
    print(json.dumps(output, ensure_ascii=False))
    if not output["success"]:
        sys.exit(1)


def output_error(message: str, **extra):
    """Output error in the CLI JSON format."""
    output = {
        "success": False,
        "command": "test",
        "data": extra or None,
        "message": message,
    }
    print(json.dumps(output, ensure_ascii=False))


if __name__ == "__main__":
    main()
