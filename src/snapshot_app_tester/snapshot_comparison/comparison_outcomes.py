"""Snapshot comparison domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FileStatus(str, Enum):
    """Per-file comparison outcome."""

    SAME = "SAME"
    CHANGED = "CHANGED"
    MISSING = "MISSING"
    NEW = "NEW"


@dataclass(frozen=True)
class FileComparison:
    """Comparison of one artifact file present in either directory."""

    name: str
    status: FileStatus
    differences: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing expected against current snapshots of one test."""

    test_name: str
    expected_dir: Path
    current_dir: Path
    files: tuple[FileComparison, ...]

    @property
    def passed(self) -> bool:
        return all(item.status is FileStatus.SAME for item in self.files)

    @property
    def failures(self) -> tuple[FileComparison, ...]:
        return tuple(item for item in self.files if item.status is not FileStatus.SAME)
