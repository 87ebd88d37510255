"""Results writing domain exports."""

from .comparison_report_writer import (
    REPORT_COLUMNS,
    RUN_INFO_SHEET_NAME,
    SNAPSHOTS_SHEET_NAME,
    write_comparison_workbook,
)
from .report_models import ReportMetadata

__all__ = [
    "REPORT_COLUMNS",
    "RUN_INFO_SHEET_NAME",
    "SNAPSHOTS_SHEET_NAME",
    "ReportMetadata",
    "write_comparison_workbook",
]
