"""Read-only access to the live session's values."""

from __future__ import annotations

from typing import Any

from snapshot_app_tester.browser_session.client_contracts import ClientSession
from snapshot_app_tester.export_evaluation.export_source import ExportSource

from .value_models import ValueField, ValueSnapshot

CLIENT_DATA_PREFIX = ".clientdata_"


class UnknownValueError(KeyError):
    """Raised when a requested value name does not exist in the session."""


class ValueStoreAccessor:
    """Combine client-held inputs/outputs with server-evaluated exports.

    Reads never mutate the session and never touch the snapshot sequence.
    """

    def __init__(self, client_session: ClientSession, export_source: ExportSource) -> None:
        self._client_session = client_session
        self._export_source = export_source

    def get_all_values(self) -> ValueSnapshot:
        client_values = self._client_session.read_client_values()
        inputs = {
            name: value
            for name, value in client_values.input.items()
            if not name.startswith(CLIENT_DATA_PREFIX)
        }
        return ValueSnapshot(
            input=inputs,
            output=dict(client_values.output),
            export=dict(self._export_source.fetch()),
        )

    def get_value(self, name: str, value_field: ValueField | str = ValueField.OUTPUT) -> Any:
        resolved_field = ValueField(value_field)
        values = self.get_all_values().values_for(resolved_field)
        if name not in values:
            raise UnknownValueError(f"No {resolved_field.value} named '{name}'")
        return values[name]
