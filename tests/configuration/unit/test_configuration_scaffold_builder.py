"""Configuration scaffold builder tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from snapshot_app_tester.configuration import (
    build_placeholder_configuration,
    load_configuration,
    write_placeholder_configuration,
)


def test_scaffold_is_valid_yaml_with_all_sections() -> None:
    parsed = yaml.safe_load(build_placeholder_configuration())

    assert set(parsed) == {"app", "browser", "snapshots", "inputs"}


def test_written_scaffold_loads_as_configuration(tmp_path: Path) -> None:
    destination = write_placeholder_configuration(tmp_path / "snapshot-app-tester.yaml")

    settings = load_configuration(destination)

    assert destination == (tmp_path / "snapshot-app-tester.yaml").resolve()
    assert settings.browser.name == "chromium"
    assert settings.snapshots.root == (tmp_path / "tests" / "snapshots").resolve()


def test_write_refuses_to_overwrite_existing_file(tmp_path: Path) -> None:
    destination = tmp_path / "existing.yaml"
    destination.write_text("keep me", encoding="utf-8")

    with pytest.raises(FileExistsError):
        write_placeholder_configuration(destination)
    assert destination.read_text(encoding="utf-8") == "keep me"
