"""Application-side registry of deferred snapshot exports.

An export pairs a name with a zero-argument callable. Registration only
stores the callable; it is invoked again on every evaluation so the value
always reflects the state its closure currently sees.

Each expression runs under ``shiny.reactive.isolate()``, so exports may read
reactive values and calcs without taking a dependency on them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from shiny import reactive

logger = logging.getLogger(__name__)

ExportExpression = Callable[[], Any]


class ExportEvaluationError(Exception):
    """Raised when one or more named exports failed to evaluate."""

    def __init__(self, failures: Mapping[str, str], values: Mapping[str, Any]) -> None:
        self.failures = dict(failures)
        self.values = dict(values)
        details = "; ".join(f"{name}: {message}" for name, message in self.failures.items())
        super().__init__(f"Export evaluation failed for {', '.join(self.failures)} ({details})")


@dataclass(frozen=True)
class ExportBinding:
    """One named deferred expression."""

    name: str
    expression: ExportExpression


@dataclass(frozen=True)
class ExportEvaluation:
    """Outcome of evaluating every registered export once."""

    values: Mapping[str, Any] = field(default_factory=dict)
    failures: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def values_or_raise(self) -> dict[str, Any]:
        """Return the evaluated values, raising when any export failed."""
        if self.failures:
            raise ExportEvaluationError(self.failures, self.values)
        return dict(self.values)

    def as_payload(self) -> dict[str, Any]:
        return {"export": dict(self.values), "errors": dict(self.failures)}

    @staticmethod
    def from_payload(payload: Any) -> ExportEvaluation:
        """Rebuild an evaluation from the JSON document served by an application."""
        if not isinstance(payload, Mapping):
            raise ValueError("Export payload must be a JSON object.")
        values = payload.get("export")
        errors = payload.get("errors")
        values = {} if values is None else values
        errors = {} if errors is None else errors
        if not isinstance(values, Mapping) or not isinstance(errors, Mapping):
            raise ValueError("Export payload fields 'export' and 'errors' must be objects.")
        return ExportEvaluation(
            values=dict(values),
            failures={str(name): str(message) for name, message in errors.items()},
        )


class ExportRegistry:
    """Holds the export bindings of one application process."""

    def __init__(self) -> None:
        self._bindings: dict[str, ExportBinding] = {}

    def register(self, name: str, expression: ExportExpression) -> ExportBinding:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Export name must be a non-empty string.")
        if not callable(expression):
            raise TypeError(f"Export '{name}' must be a zero-argument callable.")
        if name in self._bindings:
            logger.debug("Replacing export binding '%s'", name)
        binding = ExportBinding(name=name, expression=expression)
        self._bindings[name] = binding
        return binding

    def unregister(self, name: str) -> None:
        self._bindings.pop(name, None)

    def names(self) -> tuple[str, ...]:
        return tuple(self._bindings)

    def evaluate(self) -> ExportEvaluation:
        """Evaluate every binding against current state, isolating failures per name."""
        values: dict[str, Any] = {}
        failures: dict[str, str] = {}
        for name, binding in self._bindings.items():
            try:
                with reactive.isolate():
                    value = binding.expression()
                json.dumps(value)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.warning("Export '%s' failed to evaluate: %s", name, exc)
                failures[name] = f"{type(exc).__name__}: {exc}"
                continue
            values[name] = value
        return ExportEvaluation(values=values, failures=failures)

    def render_payload(self) -> str:
        """Evaluate all exports and render the JSON document served to the driver."""
        return json.dumps(self.evaluate().as_payload(), ensure_ascii=False)


default_registry = ExportRegistry()


def export_test_values(**bindings: ExportExpression) -> None:
    """Register deferred exports on the process-wide default registry.

    Example::

        nums = reactive.value([])
        export_test_values(nums=lambda: nums.get())
    """
    for name, expression in bindings.items():
        default_registry.register(name, expression)
