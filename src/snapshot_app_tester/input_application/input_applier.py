"""Input application service."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Sequence
from pathlib import Path

from snapshot_app_tester.browser_session.client_contracts import ClientSession
from snapshot_app_tester.value_access.value_store_accessor import ValueStoreAccessor

from .input_assignments import InputApplyResult, InputAssignment

logger = logging.getLogger(__name__)


class UnknownInputBindingError(Exception):
    """Raised in strict mode when inputs have no reachable input binding."""

    def __init__(self, names: Sequence[str]) -> None:
        self.names = tuple(names)
        super().__init__(
            f"No input binding found for: {', '.join(self.names)}. "
            "These inputs cannot be replayed."
        )


class UnknownInputBindingWarning(UserWarning):
    """Emitted when inputs without an input binding are skipped."""


class InputApplyTimeout(Exception):
    """Raised when the server does not finish a response cycle in time."""

    def __init__(self, names: Sequence[str], timeout_seconds: float) -> None:
        self.names = tuple(names)
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Timed out after {timeout_seconds}s waiting for the response to "
            f"input(s) {', '.join(self.names)}. Raise the timeout or pass wait=False."
        )


class UploadFixtureNotFoundError(FileNotFoundError):
    """Raised when an upload file is missing from the fixtures directory."""


class InputApplier:
    """Dispatch batched input assignments and wait for the server to respond."""

    def __init__(
        self,
        client_session: ClientSession,
        value_accessor: ValueStoreAccessor,
        *,
        timeout_seconds: float,
        fixtures_dir: Path,
        strict_bindings: bool = False,
    ) -> None:
        self._client_session = client_session
        self._value_accessor = value_accessor
        self._timeout_seconds = timeout_seconds
        self._fixtures_dir = fixtures_dir
        self._strict_bindings = strict_bindings

    def apply(
        self,
        assignments: Sequence[InputAssignment],
        *,
        wait: bool = True,
        values: bool = True,
        timeout_seconds: float | None = None,
    ) -> InputApplyResult:
        """Apply the whole batch in one round trip.

        With ``wait`` the call blocks until the server has completed the
        response cycle the batch triggered, so later reads never observe
        stale outputs. Inputs that already held their assigned value trigger
        no response cycle and are not waited for.
        """
        batch = {assignment.name: assignment.value for assignment in assignments}
        before = self._client_session.response_cycle_count()
        logger.debug("Dispatching inputs %s", ", ".join(batch))
        outcome = self._client_session.dispatch_inputs(batch)
        unbound = tuple(outcome.unbound)
        applied = tuple(name for name in batch if name not in unbound)
        changed = tuple(name for name in applied if name not in outcome.unchanged)
        if len(changed) < len(applied):
            logger.debug(
                "Inputs already held their values: %s",
                ", ".join(name for name in applied if name not in changed),
            )

        if wait and changed:
            self._wait_for_response(changed, before, timeout_seconds)
        self._report_unbound(unbound)
        return InputApplyResult(
            applied=applied,
            unbound=unbound,
            values=self._value_accessor.get_all_values() if values else None,
        )

    def upload_file(
        self,
        name: str,
        filename: str,
        *,
        wait: bool = True,
        values: bool = True,
        timeout_seconds: float | None = None,
    ) -> InputApplyResult:
        """Send a fixture file to a file-upload input.

        ``filename`` is a bare file name looked up in the fixtures directory.
        """
        path = self.resolve_fixture(filename)
        before = self._client_session.response_cycle_count()
        logger.debug("Uploading %s to input %s", path, name)
        if not self._client_session.upload_file(name, path):
            self._report_unbound((name,))
            return InputApplyResult(
                applied=(),
                unbound=(name,),
                values=self._value_accessor.get_all_values() if values else None,
            )
        if wait:
            self._wait_for_response((name,), before, timeout_seconds)
        return InputApplyResult(
            applied=(name,),
            unbound=(),
            values=self._value_accessor.get_all_values() if values else None,
        )

    def resolve_fixture(self, filename: str) -> Path:
        if not filename or Path(filename).name != filename:
            raise ValueError(
                f"Upload file must be a bare file name without directories; got '{filename}'."
            )
        path = self._fixtures_dir / filename
        if not path.is_file():
            raise UploadFixtureNotFoundError(
                f"Upload file '{filename}' not found in fixtures directory {self._fixtures_dir}"
            )
        return path

    def _wait_for_response(
        self, names: Sequence[str], before: int, timeout_seconds: float | None
    ) -> None:
        timeout = self._timeout_seconds if timeout_seconds is None else timeout_seconds
        if not self._client_session.wait_for_response_cycle(before, timeout_seconds=timeout):
            raise InputApplyTimeout(names, timeout)

    def _report_unbound(self, unbound: Sequence[str]) -> None:
        if not unbound:
            return
        if self._strict_bindings:
            raise UnknownInputBindingError(unbound)
        message = (
            f"Input(s) {', '.join(unbound)} have no input binding and were not set; "
            "replaying them is not supported."
        )
        logger.warning(message)
        warnings.warn(message, UnknownInputBindingWarning, stacklevel=4)
