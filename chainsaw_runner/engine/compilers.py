"""Expression compilers used to evaluate templates and bindings.

Templates are plain mappings; any string value wrapped in parentheses is an
expression, e.g. ``($namespace)`` or ``($test.metadata.name)``. The built-in
evaluator resolves ``$binding`` references followed by dotted field access.
Real expression languages plug in by registering another evaluator.
"""

from typing import Any, Callable, Mapping, Optional

from ..errors import TemplateError

Evaluator = Callable[[str, Mapping[str, Any]], Any]

DEFAULT_COMPILER = "jp"


def resolve_reference(expression: str, bindings: Mapping[str, Any]) -> Any:
    """Evaluate ``$name.field.sub`` against ``bindings``."""
    expression = expression.strip()
    if not expression.startswith("$"):
        raise TemplateError(f"unsupported expression '{expression}'")
    name, _, path = expression[1:].partition(".")
    if name not in bindings:
        raise TemplateError(f"variable not defined: ${name}")
    value = bindings[name]
    for part in path.split(".") if path else []:
        if isinstance(value, Mapping) and part in value:
            value = value[part]
        else:
            raise TemplateError(f"cannot resolve '{part}' in '{expression}'")
    return value


class Compilers:
    """Registry of named evaluators with a default."""

    def __init__(
        self,
        evaluators: Optional[dict[str, Evaluator]] = None,
        default: str = DEFAULT_COMPILER,
    ):
        self._evaluators = dict(evaluators) if evaluators else {
            "jp": resolve_reference,
            "cel": resolve_reference,
        }
        if default not in self._evaluators:
            raise TemplateError(f"unknown compiler '{default}'")
        self.default = default

    @property
    def names(self) -> list[str]:
        return sorted(self._evaluators)

    def with_default_compiler(self, name: str) -> "Compilers":
        """Return a registry identical to this one but defaulting to ``name``."""
        return Compilers(self._evaluators, default=name)

    def register(self, name: str, evaluator: Evaluator) -> "Compilers":
        evaluators = dict(self._evaluators)
        evaluators[name] = evaluator
        return Compilers(evaluators, default=self.default)

    def evaluate(
        self,
        expression: str,
        bindings: Mapping[str, Any],
        compiler: Optional[str] = None,
    ) -> Any:
        name = compiler or self.default
        evaluator = self._evaluators.get(name)
        if evaluator is None:
            raise TemplateError(f"unknown compiler '{name}'")
        return evaluator(expression, bindings)

    def evaluate_template(self, value: Any, bindings: Mapping[str, Any]) -> Any:
        """Recursively evaluate every ``(expression)`` string in ``value``."""
        if isinstance(value, Mapping):
            return {
                self.evaluate_template(k, bindings): self.evaluate_template(v, bindings)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [self.evaluate_template(item, bindings) for item in value]
        if isinstance(value, str) and len(value) > 2 and value.startswith("(") and value.endswith(")"):
            return self.evaluate(value[1:-1], bindings)
        return value
