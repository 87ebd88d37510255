"""Value access domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ValueField(str, Enum):
    """Top-level fields of a value snapshot, in artifact order."""

    INPUT = "input"
    OUTPUT = "output"
    EXPORT = "export"


@dataclass(frozen=True)
class ValueSnapshot:
    """All current input, output and export values of one session."""

    input: Mapping[str, Any] = field(default_factory=dict)
    output: Mapping[str, Any] = field(default_factory=dict)
    export: Mapping[str, Any] = field(default_factory=dict)

    def values_for(self, value_field: ValueField | str) -> Mapping[str, Any]:
        return getattr(self, ValueField(value_field).value)

    def as_payload(self) -> dict[str, dict[str, Any]]:
        return {
            value_field.value: dict(self.values_for(value_field)) for value_field in ValueField
        }
