"""Run configuration: YAML file, environment overrides, defaults.

Precedence, lowest first: defaults, configuration file, environment,
command line flags (applied by the CLI).
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .engine.context import Timeouts
from .errors import ConfigurationError

CONFIG_API_VERSIONS = {"chainsaw.kyverno.io/v1alpha1", "chainsaw.kyverno.io/v1alpha2"}
CONFIG_KIND = "Configuration"

ENV_SERVER = "CHAINSAW_SERVER"
ENV_TOKEN = "CHAINSAW_TOKEN"
ENV_NAMESPACE = "CHAINSAW_NAMESPACE"

_DURATION = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse ``1m30s``/``250ms``/``5`` into seconds.

    Raises:
        ConfigurationError: If the value is not a duration.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip()
    if not text:
        raise ConfigurationError("empty duration")
    pos = 0
    total = 0.0
    for match in _DURATION.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ConfigurationError(f"invalid duration '{value}'")
    return total


@dataclass
class NamespaceOptions:
    """Shared namespace of a batch; empty name means one per test."""
    name: str = ""
    template: Optional[dict[str, Any]] = None
    compiler: Optional[str] = None


@dataclass
class ReportOptions:
    """Where and how to write the run report."""
    format: str = "JSON"
    path: str = ""
    name: str = "chainsaw-report"


@dataclass
class ClusterOptions:
    """Resource API endpoint."""
    server: str = ""
    token: Optional[str] = None
    verify: bool = True


@dataclass
class Configuration:
    """Everything that tunes a run."""
    timeouts: Timeouts = field(default_factory=Timeouts)
    namespace: NamespaceOptions = field(default_factory=NamespaceOptions)
    report: Optional[ReportOptions] = None
    cluster: ClusterOptions = field(default_factory=ClusterOptions)
    test_file: str = "chainsaw-test"
    full_name: bool = False
    parallel: int = 4
    fail_fast: bool = False
    skip_delete: bool = False


def load_configuration(path: Optional[Union[str, Path]] = None) -> Configuration:
    """Load a configuration file (defaults when ``path`` is None) and apply the environment.

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid.
    """
    config = Configuration()
    if path is not None:
        config = parse_configuration_file(path)
    return apply_env(config)


def parse_configuration_file(path: Union[str, Path]) -> Configuration:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e
    if data is None:
        raise ConfigurationError(f"Empty configuration file: {path}")
    return parse_configuration_data(data, source=str(path))


def parse_configuration_data(data: Any, source: str = "<inline>") -> Configuration:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration must be a YAML mapping in {source}")
    if data.get("apiVersion") not in CONFIG_API_VERSIONS or data.get("kind") != CONFIG_KIND:
        raise ConfigurationError(
            f"Unsupported document {data.get('apiVersion')}/{data.get('kind')} in {source}"
        )
    spec = data.get("spec") or {}
    if not isinstance(spec, dict):
        raise ConfigurationError(f"'spec' must be a mapping in {source}")

    config = Configuration()

    timeouts = spec.get("timeouts") or {}
    config.timeouts = Timeouts(
        apply=parse_duration(timeouts.get("apply", config.timeouts.apply)),
        assertion=parse_duration(timeouts.get("assert", config.timeouts.assertion)),
        cleanup=parse_duration(timeouts.get("cleanup", config.timeouts.cleanup)),
        delete=parse_duration(timeouts.get("delete", config.timeouts.delete)),
        error=parse_duration(timeouts.get("error", config.timeouts.error)),
        exec=parse_duration(timeouts.get("exec", config.timeouts.exec)),
    )

    namespace = spec.get("namespace") or {}
    config.namespace = NamespaceOptions(
        name=str(namespace.get("name", "") or ""),
        template=namespace.get("template"),
        compiler=namespace.get("compiler"),
    )

    report = spec.get("report")
    if report is not None:
        config.report = ReportOptions(
            format=str(report.get("format", "JSON")).upper(),
            path=str(report.get("path", "") or ""),
            name=str(report.get("name", "chainsaw-report")),
        )
        if config.report.format != "JSON":
            raise ConfigurationError(f"Unsupported report format '{config.report.format}' in {source}")

    cluster = spec.get("cluster") or {}
    config.cluster = ClusterOptions(
        server=str(cluster.get("server", "") or ""),
        token=cluster.get("token"),
        verify=bool(cluster.get("verify", True)),
    )

    discovery = spec.get("discovery") or {}
    config.test_file = str(discovery.get("testFile", config.test_file))
    config.full_name = bool(discovery.get("fullName", config.full_name))

    execution = spec.get("execution") or {}
    config.parallel = int(execution.get("parallel", config.parallel))
    config.fail_fast = bool(execution.get("failFast", config.fail_fast))
    if config.parallel < 1:
        raise ConfigurationError(f"'parallel' must be at least 1, got {config.parallel}")

    cleanup = spec.get("cleanup") or {}
    config.skip_delete = bool(cleanup.get("skipDelete", config.skip_delete))

    return config


def apply_env(config: Configuration) -> Configuration:
    """Override cluster and namespace settings from the environment."""
    server = os.environ.get(ENV_SERVER)
    if server:
        config.cluster.server = server
    token = os.environ.get(ENV_TOKEN)
    if token:
        config.cluster.token = token
    namespace = os.environ.get(ENV_NAMESPACE)
    if namespace:
        config.namespace.name = namespace
    return config
