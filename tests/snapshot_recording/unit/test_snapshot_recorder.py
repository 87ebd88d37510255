"""Snapshot recorder tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from snapshot_app_tester.snapshot_recording import (
    SequenceArtifactWriteError,
    SnapshotItems,
    SnapshotRecorder,
    artifact_stem,
    current_snapshot_dir,
    expected_snapshot_dir,
    render_snapshot_json,
)
from snapshot_app_tester.value_access import ValueSnapshot

VALUES = ValueSnapshot(input={"n": 4}, output={"sum": "4"}, export={"nums": [4]})


def _writer(png_bytes: bytes):
    def _write(path: Path) -> None:
        path.write_bytes(png_bytes)

    return _write


def test_records_are_numbered_from_one(tmp_path: Path, png_bytes: bytes) -> None:
    recorder = SnapshotRecorder(tmp_path / "sum-current", screenshot_writer=_writer(png_bytes))

    first = recorder.record(VALUES, SnapshotItems(), screenshot=True)
    second = recorder.record(VALUES, SnapshotItems(), screenshot=False)

    assert first.sequence == 1
    assert first.values_path.name == "001.json"
    assert first.screenshot_path is not None
    assert first.screenshot_path.read_bytes() == png_bytes
    assert second.sequence == 2
    assert second.screenshot_path is None
    assert recorder.sequence == 2
    assert sorted(path.name for path in recorder.directory.iterdir()) == [
        "001.json",
        "001.png",
        "002.json",
    ]


def test_values_file_is_deterministic_json(tmp_path: Path, png_bytes: bytes) -> None:
    recorder = SnapshotRecorder(tmp_path, screenshot_writer=_writer(png_bytes))

    artifact = recorder.record(VALUES, SnapshotItems(), screenshot=False)
    text = artifact.values_path.read_text(encoding="utf-8")

    assert text == render_snapshot_json(VALUES.as_payload())
    assert text.endswith("}\n")
    assert json.loads(text) == {
        "input": {"n": 4},
        "output": {"sum": "4"},
        "export": {"nums": [4]},
    }


def test_failed_screenshot_leaves_no_files_and_keeps_counter(
    tmp_path: Path, png_bytes: bytes
) -> None:
    attempts = 0

    def _flaky_writer(path: Path) -> None:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            path.write_bytes(b"partial")
            raise OSError("disk full")
        path.write_bytes(png_bytes)

    recorder = SnapshotRecorder(tmp_path / "flaky-current", screenshot_writer=_flaky_writer)

    with pytest.raises(SequenceArtifactWriteError, match="disk full"):
        recorder.record(VALUES, SnapshotItems(), screenshot=True)

    assert recorder.sequence == 0
    assert list(recorder.directory.iterdir()) == []

    artifact = recorder.record(VALUES, SnapshotItems(), screenshot=True)

    assert artifact.sequence == 1
    assert artifact.values_path.name == "001.json"


def test_screenshot_temporary_keeps_image_extension(tmp_path: Path, png_bytes: bytes) -> None:
    targets: list[Path] = []

    def _recording_writer(path: Path) -> None:
        targets.append(path)
        path.write_bytes(png_bytes)

    recorder = SnapshotRecorder(tmp_path / "sum-current", screenshot_writer=_recording_writer)

    artifact = recorder.record(VALUES, SnapshotItems(), screenshot=True)

    assert [path.suffix for path in targets] == [".png"]
    assert targets[0].name.startswith(".")
    assert not targets[0].exists()
    assert artifact.screenshot_path == recorder.directory / "001.png"


def test_directory_helpers_and_stems(tmp_path: Path) -> None:
    assert current_snapshot_dir(tmp_path, "sum") == tmp_path / "sum-current"
    assert expected_snapshot_dir(tmp_path, "sum") == tmp_path / "sum-expected"
    assert artifact_stem(7) == "007"
    assert artifact_stem(1234) == "1234"


def test_render_keeps_non_ascii_text() -> None:
    assert "café" in render_snapshot_json({"output": {"label": "café"}})
