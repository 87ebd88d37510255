"""Application server process launching and attachment."""

from __future__ import annotations

import logging
import socket
import subprocess
import sys
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import IO

import httpx

from snapshot_app_tester.configuration.runtime_settings import AppSettings
from snapshot_app_tester.export_evaluation.runtime_flags import build_app_environment

logger = logging.getLogger(__name__)

_READY_POLL_INTERVAL_SECONDS = 0.1

PopenFactory = Callable[..., subprocess.Popen]


class AppLaunchError(Exception):
    """Raised when the application cannot be started or never becomes reachable."""


class AppProcess:
    """Handle on the application server under test.

    Either owns a launched server process or merely points at an already
    running application (attached mode, no process).
    """

    def __init__(
        self,
        url: str,
        *,
        app_dir: Path | None = None,
        process: subprocess.Popen | None = None,
        log_path: Path | None = None,
        log_handle: IO[bytes] | None = None,
    ) -> None:
        self.url = url
        self.app_dir = app_dir
        self._process = process
        self._log_path = log_path
        self._log_handle = log_handle

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    @property
    def is_attached(self) -> bool:
        return self._process is None

    @property
    def is_running(self) -> bool:
        if self._process is None:
            return True
        return self._process.poll() is None

    @classmethod
    def start(
        cls,
        app_path: str | Path,
        settings: AppSettings,
        *,
        seed: int | None = None,
        popen: PopenFactory | None = None,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> AppProcess:
        """Launch the application at app_path, or attach when it is a URL."""
        if _is_url(str(app_path)):
            if seed is not None:
                logger.warning(
                    "Seed %s ignored: attached applications are not launched by the driver",
                    seed,
                )
            return cls(str(app_path).rstrip("/"))

        resolved_app = Path(app_path).resolve()
        if not resolved_app.exists():
            raise AppLaunchError(f"Application not found: {resolved_app}")
        app_dir = resolved_app if resolved_app.is_dir() else resolved_app.parent
        port = _find_free_port(settings.host)
        command = build_launch_command(settings.command, resolved_app, settings.host, port)
        url = f"http://{settings.host}:{port}"

        log_handle = tempfile.NamedTemporaryFile(  # pylint: disable=consider-using-with
            prefix="snapshot-app-", suffix=".log", delete=False
        )
        log_path = Path(log_handle.name)
        launcher = popen or subprocess.Popen
        logger.info("Launching application: %s", " ".join(command))
        try:
            process = launcher(
                list(command),
                cwd=str(app_dir),
                env=build_app_environment(seed=seed),
                stdout=log_handle,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            log_handle.close()
            log_path.unlink(missing_ok=True)
            raise AppLaunchError(f"Failed to launch application: {exc}") from exc

        app_process = cls(
            url,
            app_dir=app_dir,
            process=process,
            log_path=log_path,
            log_handle=log_handle,
        )
        client = http_client or httpx.Client(timeout=1.0)
        try:
            app_process.wait_until_ready(
                settings.load_timeout_seconds, client=client, clock=clock, sleep=sleep
            )
        except AppLaunchError:
            app_process.stop(keep_log=True)
            raise
        finally:
            if http_client is None:
                client.close()
        return app_process

    def wait_until_ready(
        self,
        timeout_seconds: float,
        *,
        client: httpx.Client,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        deadline = clock() + timeout_seconds
        while True:
            if not self.is_running:
                raise AppLaunchError(
                    f"Application exited with code {self._process.returncode} during startup; "
                    f"log: {self._log_path}"
                )
            try:
                client.get(self.url)
            except httpx.TransportError:
                pass
            else:
                logger.info("Application ready at %s", self.url)
                return
            if clock() >= deadline:
                raise AppLaunchError(
                    f"Application did not respond at {self.url} within {timeout_seconds}s; "
                    f"log: {self._log_path}"
                )
            sleep(_READY_POLL_INTERVAL_SECONDS)

    def read_log(self) -> str:
        """Return everything the application wrote to stdout/stderr so far."""
        if self._log_path is None or not self._log_path.exists():
            return ""
        return self._log_path.read_text(encoding="utf-8", errors="replace")

    def stop(self, timeout_seconds: float = 5.0, *, keep_log: bool = False) -> None:
        """Stop the launched server and remove its log unless keep_log is set."""
        if self._process is not None and self._process.poll() is None:
            self._process.terminate()
            try:
                self._process.wait(timeout=timeout_seconds)
            except subprocess.TimeoutExpired:
                logger.warning("Application did not terminate; killing it")
                self._process.kill()
                self._process.wait()
        if self._log_handle is not None:
            self._log_handle.close()
            self._log_handle = None
            if keep_log:
                logger.info("Application log kept at %s", self._log_path)
            elif self._log_path is not None:
                self._log_path.unlink(missing_ok=True)


def build_launch_command(
    template: Sequence[str], app_path: Path, host: str, port: int
) -> tuple[str, ...]:
    """Substitute launch placeholders in the configured command template."""
    replacements = {
        "{python}": sys.executable,
        "{host}": host,
        "{port}": str(port),
        "{app_path}": str(app_path),
    }
    command = []
    for part in template:
        for placeholder, value in replacements.items():
            part = part.replace(placeholder, value)
        command.append(part)
    return tuple(command)


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _find_free_port(host: str) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return int(sock.getsockname()[1])
