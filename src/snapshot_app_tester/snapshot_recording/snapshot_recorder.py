"""Numbered snapshot artifact recording service."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from snapshot_app_tester.value_access.value_models import ValueSnapshot

from .snapshot_selection import SnapshotItems

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 3
CURRENT_SUFFIX = "-current"
EXPECTED_SUFFIX = "-expected"

ScreenshotWriter = Callable[[Path], None]


class SequenceArtifactWriteError(Exception):
    """Raised when a snapshot artifact cannot be persisted."""


@dataclass(frozen=True)
class SnapshotArtifact:
    """Files written for one recorded snapshot."""

    sequence: int
    values_path: Path
    screenshot_path: Path | None


class SnapshotSequence:
    """Counter of recorded snapshots for one test."""

    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def peek_next(self) -> int:
        return self._value + 1

    def advance(self) -> int:
        self._value += 1
        return self._value


def artifact_stem(sequence: int) -> str:
    return f"{sequence:0{SEQUENCE_WIDTH}d}"


def current_snapshot_dir(root: Path, test_name: str) -> Path:
    return root / f"{test_name}{CURRENT_SUFFIX}"


def expected_snapshot_dir(root: Path, test_name: str) -> Path:
    return root / f"{test_name}{EXPECTED_SUFFIX}"


def render_snapshot_json(payload: Mapping[str, Any]) -> str:
    """Serialize a snapshot payload deterministically."""
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


class SnapshotRecorder:
    """Write numbered artifacts into one test's snapshot directory.

    The JSON file and optional screenshot are first written to temporary
    names and renamed into place; the sequence only advances once every file
    of the artifact exists under its final name.
    """

    def __init__(self, directory: Path, *, screenshot_writer: ScreenshotWriter) -> None:
        self._directory = directory
        self._screenshot_writer = screenshot_writer
        self._sequence = SnapshotSequence()

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def sequence(self) -> int:
        return self._sequence.value

    def record(
        self, values: ValueSnapshot, items: SnapshotItems, *, screenshot: bool
    ) -> SnapshotArtifact:
        sequence = self._sequence.peek_next()
        stem = artifact_stem(sequence)
        values_path = self._directory / f"{stem}.json"
        screenshot_path = self._directory / f"{stem}.png" if screenshot else None
        pending = [(self._directory / f".{stem}.json.tmp", values_path)]
        if screenshot_path is not None:
            pending.append((self._directory / f".{stem}.tmp.png", screenshot_path))

        placed: list[Path] = []
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            pending[0][0].write_text(render_snapshot_json(items.select(values)), encoding="utf-8")
            if screenshot_path is not None:
                self._screenshot_writer(pending[1][0])
            for temporary, final in pending:
                os.replace(temporary, final)
                placed.append(final)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            _remove_quietly([temporary for temporary, _ in pending] + placed)
            raise SequenceArtifactWriteError(
                f"Failed to write snapshot {stem} in {self._directory}: {exc}"
            ) from exc

        self._sequence.advance()
        logger.info("Recorded snapshot %s", values_path)
        return SnapshotArtifact(
            sequence=sequence,
            values_path=values_path,
            screenshot_path=screenshot_path,
        )


def _remove_quietly(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove partial snapshot file %s", path)
