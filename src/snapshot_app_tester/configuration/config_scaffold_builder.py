"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "snapshot-app-tester.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Driver configuration for snapshot-app-tester.
# Every section is optional. Uncomment and adjust only what your app needs.

app:
  # Command used to launch the application. {python}, {host}, {port} and
  # {app_path} are substituted at launch time; {app_path} is required.
  # command: ["{python}", "-m", "shiny", "run", "--host", "{host}", "--port", "{port}", "{app_path}"]
  host: "127.0.0.1"
  # Seconds to wait for the application to answer HTTP requests.
  load_timeout_seconds: 10

browser:
  # One of chromium, firefox, webkit (install it with `install-browser`).
  name: "chromium"
  headless: true
  viewport:
    width: 992
    height: 744

snapshots:
  # Relative paths are resolved against this file's directory.
  root: "tests/snapshots"
  # Directory holding files passed to upload_file(); defaults to root.
  # fixtures_dir: "tests/snapshots"
  # Default screenshot policy for snapshot_init().
  screenshot: true
  # Route served by the application's export registry.
  export_path: "__snapshot_exports__"

inputs:
  # Seconds to wait for the server to finish a response cycle.
  timeout_seconds: 3
  # Raise instead of warning when an input has no input binding.
  strict_bindings: false
"""


def build_placeholder_configuration() -> str:
    """Build a YAML driver configuration template with inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the driver configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
