"""YAML test loader.

Walks directories for test files and parses ``kind: Test`` documents into
Test records. Load and validation failures are kept on the record instead of
raised so the runner can count and report them.
"""

import os
from pathlib import Path
from typing import Any, Iterable, Union

import yaml

from ..errors import DiscoveryError
from ..log_config import get_logger
from .model import (
    Binding,
    Scenario,
    Step,
    Test,
    TestSpec,
    TEST_API_VERSIONS,
    TEST_KIND,
)
from .validator import validate_test

logger = get_logger("discovery")

DEFAULT_FILE_NAME = "chainsaw-test"


def discover_tests(
    paths: Iterable[Union[str, Path]],
    file_name: str = DEFAULT_FILE_NAME,
) -> list[Test]:
    """Find and load every test file below ``paths``.

    Args:
        paths: Directories to walk (files are loaded directly).
        file_name: Test file name without extension.

    Returns:
        Tests in a stable order: paths as given, directories sorted.
    """
    tests: list[Test] = []
    for root in paths:
        root = Path(root)
        if root.is_file():
            tests.extend(load_test_file(root))
            continue
        if not root.is_dir():
            tests.append(Test(base_path=str(root), error=DiscoveryError(f"path not found: {root}")))
            continue
        for folder, dirs, files in os.walk(root):
            dirs.sort()
            for candidate in (f"{file_name}.yaml", f"{file_name}.yml"):
                if candidate in files:
                    tests.extend(load_test_file(Path(folder) / candidate))
    logger.debug(f"Discovered {len(tests)} tests", extra={"test_count": len(tests)})
    return tests


def load_test_file(file_path: Union[str, Path]) -> list[Test]:
    """Parse every Test document of a YAML file."""
    file_path = Path(file_path)
    base_path = str(file_path.parent)

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            documents = [doc for doc in yaml.safe_load_all(f) if doc is not None]
    except (OSError, yaml.YAMLError) as e:
        return [Test(base_path=base_path, error=DiscoveryError(f"failed to load {file_path}: {e}"))]

    if not documents:
        return [Test(base_path=base_path, error=DiscoveryError(f"empty test file: {file_path}"))]

    tests = []
    for data in documents:
        try:
            spec = parse_test_data(data, source=str(file_path))
        except DiscoveryError as e:
            tests.append(Test(base_path=base_path, error=e))
            continue
        result = validate_test(spec)
        if not result.valid:
            tests.append(Test(
                base_path=base_path,
                test=spec,
                error=DiscoveryError(f"invalid test in {file_path}: {result}"),
            ))
        else:
            tests.append(Test(base_path=base_path, test=spec))
    return tests


def parse_test_data(data: Any, source: str = "<inline>") -> TestSpec:
    """Parse a test from an already loaded YAML document.

    Raises:
        DiscoveryError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise DiscoveryError(f"Test must be a YAML mapping, got {type(data).__name__} in {source}")

    if data.get("apiVersion") not in TEST_API_VERSIONS or data.get("kind") != TEST_KIND:
        raise DiscoveryError(
            f"Unsupported document {data.get('apiVersion')}/{data.get('kind')} in {source}"
        )

    metadata = _mapping(data.get("metadata", {}), "metadata", source)
    spec = _mapping(data.get("spec", {}), "spec", source)

    namespace_template = spec.get("namespaceTemplate")
    if namespace_template is not None:
        namespace_template = _mapping(namespace_template, "spec.namespaceTemplate", source)

    return TestSpec(
        name=str(metadata.get("name", "") or ""),
        description=str(spec.get("description", "") or ""),
        namespace=str(spec.get("namespace", "") or ""),
        namespace_template=namespace_template,
        concurrent=spec.get("concurrent"),
        skip=bool(spec.get("skip", False)),
        bindings=_parse_bindings(spec.get("bindings", []), "spec.bindings", source),
        scenarios=[
            Scenario(bindings=_parse_bindings(
                _mapping(s, f"spec.scenarios[{i}]", source).get("bindings", []),
                f"spec.scenarios[{i}].bindings",
                source,
            ))
            for i, s in enumerate(_list(spec.get("scenarios", []), "spec.scenarios", source))
        ],
        steps=[
            _parse_step(s, i, source)
            for i, s in enumerate(_list(spec.get("steps", []), "spec.steps", source))
        ],
    )


def _parse_step(data: Any, index: int, source: str) -> Step:
    step = _mapping(data, f"spec.steps[{index}]", source)
    return Step(
        name=str(step.get("name", "") or ""),
        description=str(step.get("description", "") or ""),
        operations=_list(step.get("try", []), f"spec.steps[{index}].try", source),
        cleanup=_list(step.get("cleanup", []), f"spec.steps[{index}].cleanup", source),
    )


def _parse_bindings(data: Any, context: str, source: str) -> list[Binding]:
    bindings = []
    for i, item in enumerate(_list(data, context, source)):
        item = _mapping(item, f"{context}[{i}]", source)
        if "name" not in item:
            raise DiscoveryError(f"Missing required field 'name' in {context}[{i}] ({source})")
        bindings.append(Binding(name=str(item["name"]), value=item.get("value")))
    return bindings


def _mapping(value: Any, context: str, source: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DiscoveryError(f"'{context}' must be a mapping in {source}")
    return value


def _list(value: Any, context: str, source: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DiscoveryError(f"'{context}' must be a list in {source}")
    return value
