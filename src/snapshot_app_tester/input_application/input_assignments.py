"""Input application domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from snapshot_app_tester.value_access.value_models import ValueSnapshot


@dataclass(frozen=True)
class InputAssignment:
    """One value destined for one named input."""

    name: str
    value: Any


@dataclass(frozen=True)
class InputApplyResult:
    """Outcome of one input application call."""

    applied: tuple[str, ...]
    unbound: tuple[str, ...]
    values: ValueSnapshot | None = None


def build_assignments(
    assignments: Mapping[str, Any] | None = None, **named: Any
) -> tuple[InputAssignment, ...]:
    """Merge a mapping and keyword assignments into one ordered batch.

    Raises:
      ValueError: If the batch is empty, a name is blank, or a name is given twice.
    """
    merged: dict[str, Any] = {}
    for source in (assignments or {}, named):
        for name, value in source.items():
            if not isinstance(name, str) or not name.strip():
                raise ValueError("Input names must be non-empty strings.")
            if name in merged:
                raise ValueError(f"Input '{name}' is assigned more than once in one call.")
            merged[name] = value
    if not merged:
        raise ValueError("At least one input assignment is required.")
    return tuple(InputAssignment(name=name, value=value) for name, value in merged.items())
