"""Snapshot recording domain exports."""

from .snapshot_recorder import (
    SequenceArtifactWriteError,
    SnapshotArtifact,
    SnapshotRecorder,
    SnapshotSequence,
    artifact_stem,
    current_snapshot_dir,
    expected_snapshot_dir,
    render_snapshot_json,
)
from .snapshot_selection import (
    FieldSelection,
    SelectionKind,
    SnapshotItems,
    SnapshotSelectionError,
    parse_snapshot_items,
)

__all__ = [
    "SequenceArtifactWriteError",
    "SnapshotArtifact",
    "SnapshotRecorder",
    "SnapshotSequence",
    "artifact_stem",
    "current_snapshot_dir",
    "expected_snapshot_dir",
    "render_snapshot_json",
    "FieldSelection",
    "SelectionKind",
    "SnapshotItems",
    "SnapshotSelectionError",
    "parse_snapshot_items",
]
