"""Shared fakes standing in for a running application and its browser client."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from snapshot_app_tester.browser_session.client_contracts import ClientValues, DispatchOutcome
from snapshot_app_tester.configuration.runtime_settings import (
    DriverSettings,
    InputSettings,
    SnapshotSettings,
)
from snapshot_app_tester.driver.app_driver import AppDriver
from snapshot_app_tester.export_evaluation.export_registry import ExportRegistry

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-screenshot"


class SumApp:
    """The documented sum example: clicking ``add`` appends ``n`` to ``nums``."""

    bound_inputs = ("n", "add")
    file_inputs = ("data",)

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self.inputs: dict[str, Any] = {"n": 0, "add": 0}
        self.nums: list[int] = []
        self.uploads: dict[str, bytes] = {}
        self.registry = ExportRegistry()
        self.registry.register("nums", lambda: list(self.nums))

    def apply(self, assignments: Mapping[str, Any]) -> None:
        clicks = 0
        for name, value in assignments.items():
            if name == "add" and value == "click":
                clicks += 1
            else:
                self.inputs[name] = value
        for _ in range(clicks):
            self.inputs["add"] += 1
            self.nums.append(self.inputs["n"])

    def outputs(self) -> dict[str, Any]:
        return {"sum": str(sum(self.nums))}


class RandomApp:
    """App whose output depends on its random-number generator."""

    bound_inputs = ("n",)
    file_inputs = ()

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self.rng = random.Random(seed)
        self.inputs: dict[str, Any] = {"n": 3}
        self.uploads: dict[str, bytes] = {}
        self.draws = self._draw()
        self.registry = ExportRegistry()
        self.registry.register("draw_count", lambda: len(self.draws))

    def _draw(self) -> list[float]:
        return [round(self.rng.random(), 6) for _ in range(self.inputs["n"])]

    def apply(self, assignments: Mapping[str, Any]) -> None:
        self.inputs.update(assignments)
        self.draws = self._draw()

    def outputs(self) -> dict[str, Any]:
        return {"draws": list(self.draws), "mean": round(sum(self.draws) / len(self.draws), 6)}


class FakeClientSession:
    """Client session answering from an in-memory app.

    Every dispatch that changes a bound input completes one response cycle
    unless the session is unresponsive, in which case waits time out.
    Assigning an input its current value sends nothing, like a real client.
    """

    def __init__(self, app: Any, *, responsive: bool = True) -> None:
        self.app = app
        self.responsive = responsive
        self.cycles = 0
        self.dispatched: list[dict[str, Any]] = []
        self.screenshots: list[Path] = []
        self.navigated_to: str | None = None
        self.closed = False

    def navigate(self, url: str, *, timeout_seconds: float) -> None:
        self.navigated_to = url

    def response_cycle_count(self) -> int:
        return self.cycles

    def dispatch_inputs(self, assignments: Mapping[str, Any]) -> DispatchOutcome:
        self.dispatched.append(dict(assignments))
        unbound = tuple(name for name in assignments if name not in self.app.bound_inputs)
        unchanged = tuple(
            name
            for name, value in assignments.items()
            if name not in unbound and value != "click" and self.app.inputs.get(name) == value
        )
        changed = {
            name: value
            for name, value in assignments.items()
            if name not in unbound and name not in unchanged
        }
        if changed:
            self.app.apply(changed)
            if self.responsive:
                self.cycles += 1
        return DispatchOutcome(unbound=unbound, unchanged=unchanged)

    def upload_file(self, name: str, path: Path) -> bool:
        if name not in self.app.file_inputs:
            return False
        self.app.uploads[name] = path.read_bytes()
        if self.responsive:
            self.cycles += 1
        return True

    def wait_for_response_cycle(self, after_cycle: int, *, timeout_seconds: float) -> bool:
        return self.cycles > after_cycle

    def read_client_values(self) -> ClientValues:
        inputs = dict(self.app.inputs)
        inputs[".clientdata_url_hostname"] = "127.0.0.1"
        return ClientValues(input=inputs, output=self.app.outputs())

    def capture_screenshot(self, path: Path) -> None:
        path.write_bytes(PNG_BYTES)
        self.screenshots.append(path)

    def close(self) -> None:
        self.closed = True


class RegistryExportSource:
    """Export source reading an in-process registry directly."""

    def __init__(self, registry: ExportRegistry) -> None:
        self.registry = registry
        self.fetches = 0

    def fetch(self) -> dict[str, Any]:
        self.fetches += 1
        return self.registry.evaluate().values_or_raise()


@dataclass
class FakeAppHandle:
    url: str
    app_dir: Path | None
    seed: int | None = None
    log: str = ""
    stopped: bool = False

    def read_log(self) -> str:
        return self.log

    def stop(self) -> None:
        self.stopped = True


@dataclass
class DriverHarness:
    """A driver wired to fakes, with the fakes exposed for assertions."""

    driver: AppDriver | None = None
    app: Any = None
    session: FakeClientSession | None = None
    handle: FakeAppHandle | None = None
    export_source: RegistryExportSource | None = None
    app_paths: list[Any] = field(default_factory=list)


def make_settings(root: Path, **input_overrides: Any) -> DriverSettings:
    return DriverSettings(
        snapshots=SnapshotSettings(root=root, fixtures_dir=root / "fixtures"),
        inputs=InputSettings(**input_overrides),
    )


@pytest.fixture
def driver_factory(tmp_path: Path) -> Iterator[Callable[..., DriverHarness]]:
    built: list[DriverHarness] = []

    def _build(
        *,
        app_cls: Callable[..., Any] = SumApp,
        seed: int | None = None,
        responsive: bool = True,
        settings: DriverSettings | None = None,
        root: Path | None = None,
        strict_bindings: bool = False,
    ) -> DriverHarness:
        harness = DriverHarness()

        def _start_app(app_path: Any, app_settings: Any, *, seed: int | None) -> FakeAppHandle:
            harness.app_paths.append(app_path)
            harness.app = app_cls(seed=seed)
            harness.handle = FakeAppHandle(
                url="http://127.0.0.1:8765", app_dir=tmp_path, seed=seed
            )
            return harness.handle

        def _launch_client(browser_settings: Any) -> FakeClientSession:
            harness.session = FakeClientSession(harness.app, responsive=responsive)
            return harness.session

        def _export_source(**kwargs: Any) -> RegistryExportSource:
            harness.export_source = RegistryExportSource(harness.app.registry)
            return harness.export_source

        harness.driver = AppDriver(
            tmp_path / "app.py",
            seed=seed,
            settings=settings
            or make_settings(root or tmp_path / "snapshots", strict_bindings=strict_bindings),
            app_process_factory=_start_app,
            client_session_factory=_launch_client,
            export_source_factory=_export_source,
        )
        built.append(harness)
        return harness

    yield _build
    for harness in built:
        if harness.driver is not None:
            harness.driver.stop()


@pytest.fixture
def sum_app() -> SumApp:
    return SumApp()


@pytest.fixture
def fake_session(sum_app: SumApp) -> FakeClientSession:
    return FakeClientSession(sum_app)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def random_app_cls() -> type[RandomApp]:
    return RandomApp


@pytest.fixture
def fake_session_cls() -> type[FakeClientSession]:
    return FakeClientSession
