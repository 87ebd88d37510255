"""Driver façade coordinating the app process, browser session and recorder."""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from snapshot_app_tester.app_process.app_launcher import AppProcess
from snapshot_app_tester.browser_session.client_contracts import ClientSession
from snapshot_app_tester.browser_session.playwright_session import PlaywrightClientSession
from snapshot_app_tester.configuration.runtime_settings import (
    AppSettings,
    BrowserSettings,
    DriverSettings,
)
from snapshot_app_tester.export_evaluation.export_source import ExportSource, HttpExportSource
from snapshot_app_tester.input_application.input_applier import InputApplier
from snapshot_app_tester.input_application.input_assignments import (
    InputApplyResult,
    build_assignments,
)
from snapshot_app_tester.snapshot_recording.snapshot_recorder import (
    SnapshotArtifact,
    SnapshotRecorder,
    current_snapshot_dir,
)
from snapshot_app_tester.snapshot_recording.snapshot_selection import parse_snapshot_items
from snapshot_app_tester.value_access.value_models import ValueField, ValueSnapshot
from snapshot_app_tester.value_access.value_store_accessor import ValueStoreAccessor

logger = logging.getLogger(__name__)

_TEST_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class UninitializedDriverError(Exception):
    """Raised when a snapshot is requested before snapshot_init()."""


class DriverAlreadyInitializedError(Exception):
    """Raised when snapshot_init() is called a second time."""


class DriverClosedError(Exception):
    """Raised when the driver is used after stop()."""


class DriverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


class AppHandle(Protocol):
    """What the driver needs from a launched or attached application."""

    url: str
    app_dir: Path | None

    def read_log(self) -> str: ...

    def stop(self) -> None: ...


AppProcessFactory = Callable[..., AppHandle]
ClientSessionFactory = Callable[[BrowserSettings], ClientSession]
ExportSourceFactory = Callable[..., ExportSource]


class AppDriver:  # pylint: disable=too-many-instance-attributes
    """Drive one application session from a test script.

    Typical use::

        with AppDriver("app.py", seed=100) as app:
            app.snapshot_init("mytest")
            app.set_inputs(n=4)
            app.set_inputs(add="click")
            app.snapshot()
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        app_path: str | Path,
        *,
        seed: int | None = None,
        settings: DriverSettings | None = None,
        app_process_factory: AppProcessFactory | None = None,
        client_session_factory: ClientSessionFactory | None = None,
        export_source_factory: ExportSourceFactory | None = None,
    ) -> None:
        self._settings = settings or DriverSettings()
        resolved_app_factory = app_process_factory or _start_app_process
        resolved_client_factory = client_session_factory or PlaywrightClientSession.launch
        resolved_export_factory = export_source_factory or HttpExportSource

        self._seed = seed
        app = resolved_app_factory(app_path, self._settings.app, seed=seed)
        client: ClientSession | None = None
        export_source: ExportSource | None = None
        try:
            client = resolved_client_factory(self._settings.browser)
            client.navigate(app.url, timeout_seconds=self._settings.app.load_timeout_seconds)
            base_dir = app.app_dir or Path.cwd()
            export_source = resolved_export_factory(
                base_url=app.url,
                export_path=self._settings.snapshots.export_path,
                timeout_seconds=self._settings.inputs.timeout_seconds,
            )
            values = ValueStoreAccessor(client, export_source)
            inputs = InputApplier(
                client,
                values,
                timeout_seconds=self._settings.inputs.timeout_seconds,
                fixtures_dir=self._settings.snapshots.resolve_fixtures_dir(base_dir),
                strict_bindings=self._settings.inputs.strict_bindings,
            )
        except Exception:
            _release(app, client, export_source)
            raise

        self._app = app
        self._client = client
        self._export_source = export_source
        self._values = values
        self._inputs = inputs
        self._snapshot_root = self._settings.snapshots.resolve_root(base_dir)
        self._recorder: SnapshotRecorder | None = None
        self._test_name: str | None = None
        self._screenshot_default = self._settings.snapshots.screenshot
        self._state = DriverState.UNINITIALIZED

    # pylint: enable=too-many-arguments

    def __enter__(self) -> AppDriver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def test_name(self) -> str | None:
        return self._test_name

    @property
    def snapshot_dir(self) -> Path | None:
        return self._recorder.directory if self._recorder else None

    @property
    def snapshot_count(self) -> int:
        return self._recorder.sequence if self._recorder else 0

    def get_url(self) -> str:
        return self._app.url

    def snapshot_init(self, test_name: str, screenshot: bool | None = None) -> Path:
        """Start a test: choose its artifact directory and screenshot policy.

        Any artifacts from a previous run of the same test are removed so
        numbering restarts at 001.
        """
        self._ensure_open()
        if self._state is DriverState.INITIALIZED:
            raise DriverAlreadyInitializedError(
                f"snapshot_init() was already called for test '{self._test_name}'"
            )
        if not isinstance(test_name, str) or not _TEST_NAME_PATTERN.match(test_name):
            raise ValueError(
                "Test name must start with a letter or digit and contain only letters, "
                f"digits, '.', '_' or '-'; got {test_name!r}."
            )

        directory = current_snapshot_dir(self._snapshot_root, test_name)
        if directory.exists():
            logger.info("Removing previous snapshots in %s", directory)
            shutil.rmtree(directory)
        self._recorder = SnapshotRecorder(
            directory, screenshot_writer=self._client.capture_screenshot
        )
        self._test_name = test_name
        if screenshot is not None:
            self._screenshot_default = screenshot
        self._state = DriverState.INITIALIZED
        return directory

    def set_inputs(
        self,
        assignments: Mapping[str, Any] | None = None,
        *,
        wait: bool = True,
        values: bool = True,
        timeout_seconds: float | None = None,
        **named: Any,
    ) -> ValueSnapshot | None:
        """Set one or more inputs in a single round trip.

        Inputs whose names collide with the keyword options are passed via
        the ``assignments`` mapping. Returns the post-update values unless
        ``values`` is False.
        """
        self._ensure_open()
        result = self._inputs.apply(
            build_assignments(assignments, **named),
            wait=wait,
            values=values,
            timeout_seconds=timeout_seconds,
        )
        return result.values

    def upload_file(
        self,
        name: str,
        filename: str,
        *,
        wait: bool = True,
        values: bool = True,
        timeout_seconds: float | None = None,
    ) -> InputApplyResult:
        self._ensure_open()
        return self._inputs.upload_file(
            name, filename, wait=wait, values=values, timeout_seconds=timeout_seconds
        )

    def get_all_values(self) -> ValueSnapshot:
        """Read every current value without recording anything."""
        self._ensure_open()
        return self._values.get_all_values()

    def get_value(self, name: str, value_field: ValueField | str = ValueField.OUTPUT) -> Any:
        self._ensure_open()
        return self._values.get_value(name, value_field)

    def snapshot(
        self,
        items: Mapping[str, Any] | None = None,
        screenshot: bool | None = None,
    ) -> SnapshotArtifact:
        """Record the next numbered snapshot artifact."""
        self._ensure_open()
        if self._recorder is None:
            raise UninitializedDriverError("Call snapshot_init() before snapshot().")
        selection = parse_snapshot_items(items)
        take_screenshot = self._screenshot_default if screenshot is None else screenshot
        return self._recorder.record(
            self._values.get_all_values(), selection, screenshot=take_screenshot
        )

    def take_screenshot(self, path: str | Path) -> Path:
        """Capture the page to path without touching the snapshot sequence."""
        self._ensure_open()
        destination = Path(path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._client.capture_screenshot(destination)
        return destination

    def get_debug_log(self) -> str:
        """Return the application's console output captured so far."""
        return self._app.read_log()

    def stop(self) -> None:
        if self._state is DriverState.CLOSED:
            return
        self._state = DriverState.CLOSED
        _release(self._app, self._client, self._export_source)
        logger.debug("Driver stopped")

    def _ensure_open(self) -> None:
        if self._state is DriverState.CLOSED:
            raise DriverClosedError("The driver has been stopped.")


def _release(
    app: AppHandle, client: ClientSession | None, export_source: ExportSource | None
) -> None:
    try:
        if client is not None:
            client.close()
        close_export_source = getattr(export_source, "close", None)
        if close_export_source is not None:
            close_export_source()
    finally:
        app.stop()


def _start_app_process(
    app_path: str | Path, settings: AppSettings, *, seed: int | None
) -> AppProcess:
    return AppProcess.start(app_path, settings, seed=seed)
