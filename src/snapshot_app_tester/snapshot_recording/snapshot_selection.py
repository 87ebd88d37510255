"""Selection of the value fields a snapshot persists.

Each of ``input``, ``output`` and ``export`` gets its own tri-state
selection: everything, nothing, or an explicit set of names.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from snapshot_app_tester.value_access.value_models import ValueField, ValueSnapshot

logger = logging.getLogger(__name__)


class SnapshotSelectionError(ValueError):
    """Raised when a snapshot ``items`` argument is malformed."""


class SelectionKind(str, Enum):
    ALL = "all"
    NONE = "none"
    NAMES = "names"


@dataclass(frozen=True)
class FieldSelection:
    """Selection for one value field."""

    kind: SelectionKind
    names: tuple[str, ...] = ()

    @staticmethod
    def all() -> FieldSelection:
        return FieldSelection(kind=SelectionKind.ALL)

    @staticmethod
    def none() -> FieldSelection:
        return FieldSelection(kind=SelectionKind.NONE)

    @staticmethod
    def of(names: Iterable[str]) -> FieldSelection:
        return FieldSelection(kind=SelectionKind.NAMES, names=tuple(dict.fromkeys(names)))

    def apply(self, values: Mapping[str, Any], value_field: ValueField) -> dict[str, Any] | None:
        """Return the retained values, or None when the field is excluded."""
        if self.kind is SelectionKind.NONE:
            return None
        if self.kind is SelectionKind.ALL:
            return {name: values[name] for name in sorted(values)}
        missing = [name for name in self.names if name not in values]
        if missing:
            logger.warning(
                "Snapshot %s item(s) not present and skipped: %s",
                value_field.value,
                ", ".join(missing),
            )
        return {name: values[name] for name in sorted(self.names) if name in values}


@dataclass(frozen=True)
class SnapshotItems:
    """Per-field selections for one snapshot."""

    input: FieldSelection = FieldSelection.all()
    output: FieldSelection = FieldSelection.all()
    export: FieldSelection = FieldSelection.all()

    def selection_for(self, value_field: ValueField) -> FieldSelection:
        return getattr(self, value_field.value)

    def select(self, snapshot: ValueSnapshot) -> dict[str, dict[str, Any]]:
        """Build the artifact payload: selected fields only, in artifact order."""
        payload: dict[str, dict[str, Any]] = {}
        for value_field in ValueField:
            selected = self.selection_for(value_field).apply(
                snapshot.values_for(value_field), value_field
            )
            if selected is not None:
                payload[value_field.value] = selected
        return payload


def parse_snapshot_items(items: Mapping[str, Any] | SnapshotItems | None) -> SnapshotItems:
    """Turn a user-facing ``items`` argument into per-field selections.

    ``None`` selects every field in full. A mapping may carry ``input``,
    ``output`` and ``export`` keys whose values are ``True`` (all names),
    ``False`` (excluded), a single name, or an iterable of names. Fields
    missing from an explicit mapping are excluded.
    """
    if items is None:
        return SnapshotItems()
    if isinstance(items, SnapshotItems):
        return items
    if not isinstance(items, Mapping):
        raise SnapshotSelectionError("Snapshot items must be a mapping of field to selection.")

    known_fields = {value_field.value for value_field in ValueField}
    unknown = sorted(str(key) for key in items if key not in known_fields)
    if unknown:
        raise SnapshotSelectionError(
            f"Unknown snapshot item field(s): {', '.join(unknown)}; "
            f"expected any of input, output, export."
        )
    selections = {
        value_field.value: _parse_field_selection(items.get(value_field.value), value_field)
        for value_field in ValueField
    }
    return SnapshotItems(**selections)


def _parse_field_selection(value: Any, value_field: ValueField) -> FieldSelection:
    if value is None or value is False:
        return FieldSelection.none()
    if value is True:
        return FieldSelection.all()
    if isinstance(value, str):
        return FieldSelection.of((value,))
    if isinstance(value, Iterable) and not isinstance(value, Mapping | bytes):
        names = list(value)
        if not all(isinstance(name, str) and name for name in names):
            raise SnapshotSelectionError(
                f"Snapshot {value_field.value} names must be non-empty strings."
            )
        return FieldSelection.of(names)
    raise SnapshotSelectionError(
        f"Snapshot {value_field.value} selection must be true, false or names; "
        f"got {type(value).__name__}."
    )
