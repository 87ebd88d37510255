"""Snapshot comparison domain exports."""

from .comparison_outcomes import ComparisonResult, FileComparison, FileStatus
from .snapshot_diff import (
    SnapshotComparisonError,
    compare_snapshot_directories,
    promote_current_snapshots,
)

__all__ = [
    "ComparisonResult",
    "FileComparison",
    "FileStatus",
    "SnapshotComparisonError",
    "compare_snapshot_directories",
    "promote_current_snapshots",
]
