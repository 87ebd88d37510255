"""Bootstrap of the Playwright browser used by the client session."""

from __future__ import annotations

import shlex
import subprocess
import sys
from collections.abc import Callable

from snapshot_app_tester.configuration.runtime_settings import SUPPORTED_BROWSERS

CommandRunner = Callable[[tuple[str, ...]], None]


class BootstrapError(Exception):
    """Raised when browser bootstrap commands fail."""


def install_browser(
    browser_name: str = "chromium",
    *,
    with_deps: bool = False,
    run_command: CommandRunner | None = None,
) -> tuple[str, ...]:
    """Download the Playwright build of the requested browser."""
    if browser_name not in SUPPORTED_BROWSERS:
        raise BootstrapError(
            f"Unsupported browser '{browser_name}'; choose one of {', '.join(SUPPORTED_BROWSERS)}."
        )
    command_runner = run_command or _run_checked_command
    command: tuple[str, ...] = (sys.executable, "-m", "playwright", "install")
    if with_deps:
        command += ("--with-deps",)
    command += (browser_name,)
    command_runner(command)
    return command


def _run_checked_command(command: tuple[str, ...]) -> None:
    """Run one bootstrap command and wrap subprocess errors with domain-friendly messages."""
    try:
        subprocess.run(list(command), check=True)
    except FileNotFoundError as exc:
        command_text = shlex.join(command)
        raise BootstrapError(f"Bootstrap command not found: {command_text}") from exc
    except subprocess.CalledProcessError as exc:
        command_text = shlex.join(command)
        raise BootstrapError(
            f"Bootstrap command failed with exit code {exc.returncode}: {command_text}"
        ) from exc
