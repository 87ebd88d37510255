"""Browser client session entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


@dataclass(frozen=True)
class ClientValues:
    """Input and output values as currently held by the client."""

    input: Mapping[str, Any] = field(default_factory=dict)
    output: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DispatchOutcome:
    """What the client did with one dispatched batch.

    ``unbound`` names had no input binding. ``unchanged`` names already held
    the assigned value, so the client sent nothing to the server for them.
    """

    unbound: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()


class ClientSession(Protocol):
    """Protocol implemented by the Playwright session and by test fakes."""

    def navigate(self, url: str, *, timeout_seconds: float) -> None: ...

    def response_cycle_count(self) -> int: ...

    def dispatch_inputs(self, assignments: Mapping[str, Any]) -> DispatchOutcome:
        """Send values through input bindings."""
        ...

    def upload_file(self, name: str, path: Path) -> bool:
        """Attach a file to a file-upload input; False when no such input exists."""
        ...

    def wait_for_response_cycle(self, after_cycle: int, *, timeout_seconds: float) -> bool:
        """Block until a response cycle later than after_cycle completed."""
        ...

    def read_client_values(self) -> ClientValues: ...

    def capture_screenshot(self, path: Path) -> None: ...

    def close(self) -> None: ...
