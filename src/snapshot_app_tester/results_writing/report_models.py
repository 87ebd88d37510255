"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata rendered into the RunInfo sheet."""

    generated_at: datetime
    snapshot_root: Path
    compare_screenshots: bool
