"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_APP_COMMAND,
    DEFAULT_EXPORT_PATH,
    SUPPORTED_BROWSERS,
    AppSettings,
    BrowserSettings,
    DriverSettings,
    InputSettings,
    SnapshotSettings,
)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> DriverSettings:
    """Load and validate the driver configuration file.

    Every section is optional; omitted values fall back to the defaults of
    the corresponding settings dataclass.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    unknown_sections = sorted(set(parsed) - {"app", "browser", "snapshots", "inputs"})
    if unknown_sections:
        raise ConfigurationError(
            f"Unknown configuration section(s): {', '.join(map(str, unknown_sections))}"
        )

    return DriverSettings(
        path=path,
        app=_parse_app_section(parsed.get("app")),
        browser=_parse_browser_section(parsed.get("browser")),
        snapshots=_parse_snapshots_section(parsed.get("snapshots"), path.parent),
        inputs=_parse_inputs_section(parsed.get("inputs")),
    )


def _parse_app_section(value: Any) -> AppSettings:
    section = _optional_mapping(value, "app")
    command = _normalize_command(section.get("command"))
    host = _require_non_empty_string(section.get("host", "127.0.0.1"), "app.host")
    load_timeout_seconds = _require_positive_number(
        section.get("load_timeout_seconds", 10), "app.load_timeout_seconds"
    )
    return AppSettings(
        command=command,
        host=host,
        load_timeout_seconds=load_timeout_seconds,
    )


def _parse_browser_section(value: Any) -> BrowserSettings:
    section = _optional_mapping(value, "browser")
    name = _require_non_empty_string(section.get("name", "chromium"), "browser.name").lower()
    if name not in SUPPORTED_BROWSERS:
        raise ConfigurationError(
            f"browser.name must be one of {', '.join(SUPPORTED_BROWSERS)}; got '{name}'."
        )
    headless = _require_bool(section.get("headless", True), "browser.headless")
    viewport = _optional_mapping(section.get("viewport"), "browser.viewport")
    viewport_width = _require_positive_int(viewport.get("width", 992), "browser.viewport.width")
    viewport_height = _require_positive_int(
        viewport.get("height", 744), "browser.viewport.height"
    )
    return BrowserSettings(
        name=name,
        headless=headless,
        viewport_width=viewport_width,
        viewport_height=viewport_height,
    )


def _parse_snapshots_section(value: Any, base_path: Path) -> SnapshotSettings:
    section = _optional_mapping(value, "snapshots")
    root_value = section.get("root")
    root = (
        SnapshotSettings().root
        if root_value is None
        else _resolve_path(base_path, _require_non_empty_string(root_value, "snapshots.root"))
    )
    fixtures_value = _optional_string(section.get("fixtures_dir"), "snapshots.fixtures_dir")
    fixtures_dir = _resolve_path(base_path, fixtures_value) if fixtures_value else None
    screenshot = _require_bool(section.get("screenshot", True), "snapshots.screenshot")
    export_path = _require_non_empty_string(
        section.get("export_path", DEFAULT_EXPORT_PATH), "snapshots.export_path"
    ).strip("/")
    return SnapshotSettings(
        root=root,
        fixtures_dir=fixtures_dir,
        screenshot=screenshot,
        export_path=export_path,
    )


def _parse_inputs_section(value: Any) -> InputSettings:
    section = _optional_mapping(value, "inputs")
    timeout_seconds = _require_positive_number(
        section.get("timeout_seconds", 3), "inputs.timeout_seconds"
    )
    strict_bindings = _require_bool(
        section.get("strict_bindings", False), "inputs.strict_bindings"
    )
    return InputSettings(timeout_seconds=timeout_seconds, strict_bindings=strict_bindings)


def _normalize_command(value: Any) -> tuple[str, ...]:
    if value is None:
        return DEFAULT_APP_COMMAND
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigurationError("app.command must be a list of strings.")
    command: list[str] = []
    for item in value:
        if not isinstance(item, str | int) or isinstance(item, bool):
            raise ConfigurationError("app.command entries must be strings.")
        command.append(str(item))
    if not command:
        raise ConfigurationError("app.command must contain at least one entry.")
    if not any("{app_path}" in item for item in command):
        raise ConfigurationError("app.command must reference the {app_path} placeholder.")
    return tuple(command)


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be true or false.")
    return value


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value


def _require_positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigurationError(f"{field_name} must be a number.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return float(value)
