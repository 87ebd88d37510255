"""Compare recorded snapshot directories."""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

from snapshot_app_tester.snapshot_recording.snapshot_recorder import (
    current_snapshot_dir,
    expected_snapshot_dir,
)

from .comparison_outcomes import ComparisonResult, FileComparison, FileStatus

logger = logging.getLogger(__name__)

_MAX_REPORTED_VALUE_LENGTH = 80


class SnapshotComparisonError(Exception):
    """Raised when snapshot directories cannot be compared."""


def compare_snapshot_directories(
    root: Path | str, test_name: str, *, compare_screenshots: bool = False
) -> ComparisonResult:
    """Compare ``<test>-expected`` against ``<test>-current`` under root.

    JSON artifacts are compared structurally. Screenshots are compared by
    content hash only when ``compare_screenshots`` is set, since rendering
    varies across platforms.
    """
    root_path = Path(root)
    expected_dir = expected_snapshot_dir(root_path, test_name)
    current_dir = current_snapshot_dir(root_path, test_name)
    if not current_dir.is_dir():
        raise SnapshotComparisonError(f"No current snapshots found: {current_dir}")
    if not expected_dir.is_dir():
        raise SnapshotComparisonError(
            f"No expected snapshots found: {expected_dir}. "
            "Review the current snapshots and promote them with `update`."
        )

    suffixes = {".json", ".png"} if compare_screenshots else {".json"}
    expected_files = _artifact_names(expected_dir, suffixes)
    current_files = _artifact_names(current_dir, suffixes)
    files = tuple(
        _compare_file(name, expected_dir, current_dir, expected_files, current_files)
        for name in sorted(expected_files | current_files)
    )
    return ComparisonResult(
        test_name=test_name,
        expected_dir=expected_dir,
        current_dir=current_dir,
        files=files,
    )


def promote_current_snapshots(root: Path | str, test_name: str) -> Path:
    """Replace the expected snapshots of a test with its current ones."""
    root_path = Path(root)
    current_dir = current_snapshot_dir(root_path, test_name)
    expected_dir = expected_snapshot_dir(root_path, test_name)
    if not current_dir.is_dir():
        raise SnapshotComparisonError(f"No current snapshots found: {current_dir}")
    if expected_dir.exists():
        shutil.rmtree(expected_dir)
    shutil.copytree(current_dir, expected_dir)
    logger.info("Promoted %s to %s", current_dir, expected_dir)
    return expected_dir


def _artifact_names(directory: Path, suffixes: set[str]) -> set[str]:
    return {
        path.name
        for path in directory.iterdir()
        if path.is_file() and path.suffix in suffixes and not path.name.startswith(".")
    }


def _compare_file(
    name: str,
    expected_dir: Path,
    current_dir: Path,
    expected_files: set[str],
    current_files: set[str],
) -> FileComparison:
    if name not in current_files:
        return FileComparison(name=name, status=FileStatus.MISSING)
    if name not in expected_files:
        return FileComparison(name=name, status=FileStatus.NEW)
    expected_path = expected_dir / name
    current_path = current_dir / name
    if name.endswith(".json"):
        differences = tuple(
            _diff_values(_load_json(expected_path), _load_json(current_path), path=())
        )
    elif _sha256(expected_path) != _sha256(current_path):
        differences = ("image content differs",)
    else:
        differences = ()
    status = FileStatus.CHANGED if differences else FileStatus.SAME
    return FileComparison(name=name, status=status, differences=differences)


def _diff_values(expected: Any, actual: Any, *, path: Sequence[str]) -> Iterator[str]:
    label = _join_path(path)
    if isinstance(expected, Mapping) and isinstance(actual, Mapping):
        for key in sorted(set(expected) | set(actual)):
            if key not in actual:
                yield f"{_join_path((*path, key))}: removed"
            elif key not in expected:
                yield f"{_join_path((*path, key))}: added"
            else:
                yield from _diff_values(expected[key], actual[key], path=(*path, key))
        return
    if isinstance(expected, list) and isinstance(actual, list):
        if len(expected) != len(actual):
            yield f"{label}: length {len(expected)} != {len(actual)}"
            return
        for index, (left, right) in enumerate(zip(expected, actual, strict=True)):
            yield from _diff_values(left, right, path=(*path, f"[{index}]"))
        return
    if type(expected) is not type(actual) or expected != actual:
        yield f"{label}: {_render(expected)} != {_render(actual)}"


def _join_path(path: Sequence[str]) -> str:
    joined = "".join(part if part.startswith("[") else f".{part}" for part in path)
    return joined.removeprefix(".") or "<root>"


def _render(value: Any) -> str:
    text = json.dumps(value, ensure_ascii=False)
    if len(text) > _MAX_REPORTED_VALUE_LENGTH:
        return text[: _MAX_REPORTED_VALUE_LENGTH - 3] + "..."
    return text


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SnapshotComparisonError(f"Cannot read snapshot {path}: {exc}") from exc


def _sha256(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()
