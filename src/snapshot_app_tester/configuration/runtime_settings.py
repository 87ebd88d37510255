"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_APP_COMMAND: tuple[str, ...] = (
    "{python}",
    "-m",
    "shiny",
    "run",
    "--host",
    "{host}",
    "--port",
    "{port}",
    "{app_path}",
)
DEFAULT_EXPORT_PATH = "__snapshot_exports__"
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


@dataclass(frozen=True)
class AppSettings:
    """How the application server under test is launched."""

    command: tuple[str, ...] = DEFAULT_APP_COMMAND
    host: str = "127.0.0.1"
    load_timeout_seconds: float = 10.0


@dataclass(frozen=True)
class BrowserSettings:
    """Headless browser used to drive the application client."""

    name: str = "chromium"
    headless: bool = True
    viewport_width: int = 992
    viewport_height: int = 744


@dataclass(frozen=True)
class SnapshotSettings:
    """Where snapshot artifacts and upload fixtures live."""

    root: Path = Path("tests") / "snapshots"
    fixtures_dir: Path | None = None
    screenshot: bool = True
    export_path: str = DEFAULT_EXPORT_PATH

    def resolve_root(self, base_dir: Path) -> Path:
        """Return the snapshot root, anchored at base_dir when relative."""
        if self.root.is_absolute():
            return self.root
        return (base_dir / self.root).resolve()

    def resolve_fixtures_dir(self, base_dir: Path) -> Path:
        """Return the upload fixture directory, defaulting to the snapshot root."""
        if self.fixtures_dir is None:
            return self.resolve_root(base_dir)
        if self.fixtures_dir.is_absolute():
            return self.fixtures_dir
        return (base_dir / self.fixtures_dir).resolve()


@dataclass(frozen=True)
class InputSettings:
    """Input application behaviour."""

    timeout_seconds: float = 3.0
    strict_bindings: bool = False


@dataclass(frozen=True)
class DriverSettings:
    """Top-level configuration aggregate."""

    path: Path | None = None
    app: AppSettings = AppSettings()
    browser: BrowserSettings = BrowserSettings()
    snapshots: SnapshotSettings = SnapshotSettings()
    inputs: InputSettings = InputSettings()
