"""Comparison report workbook writer service."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from snapshot_app_tester.snapshot_comparison.comparison_outcomes import (
    ComparisonResult,
    FileStatus,
)

from .report_models import ReportMetadata

SNAPSHOTS_SHEET_NAME = "Snapshots"
RUN_INFO_SHEET_NAME = "RunInfo"
REPORT_COLUMNS = ("Test", "File", "Status", "Differences")

_STATUS_FILLS = {
    FileStatus.SAME: "C6EFCE",
    FileStatus.CHANGED: "FFC7CE",
    FileStatus.MISSING: "FFEB9C",
    FileStatus.NEW: "FFEB9C",
}


def write_comparison_workbook(
    results: Sequence[ComparisonResult],
    output_path: Path | str,
    metadata: ReportMetadata,
) -> Path:
    """Write one row per compared artifact plus a RunInfo summary sheet."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SNAPSHOTS_SHEET_NAME
    _write_header(sheet)

    row = 2
    for result in results:
        for file_comparison in result.files:
            sheet.cell(row=row, column=1, value=result.test_name)
            sheet.cell(row=row, column=2, value=file_comparison.name)
            status_cell = sheet.cell(row=row, column=3, value=file_comparison.status.value)
            status_cell.fill = PatternFill(
                start_color=_STATUS_FILLS[file_comparison.status],
                end_color=_STATUS_FILLS[file_comparison.status],
                fill_type="solid",
            )
            sheet.cell(row=row, column=4, value="\n".join(file_comparison.differences) or None)
            row += 1

    _write_run_info_sheet(workbook, results, metadata)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    return output.resolve()


def _write_header(sheet) -> None:
    widths = (24, 14, 12, 80)
    for column, (label, width) in enumerate(zip(REPORT_COLUMNS, widths, strict=True), start=1):
        cell = sheet.cell(row=1, column=column, value=label)
        cell.font = Font(bold=True)
        sheet.column_dimensions[get_column_letter(column)].width = width
    sheet.freeze_panes = "A2"


def _write_run_info_sheet(
    workbook, results: Sequence[ComparisonResult], metadata: ReportMetadata
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    files = [item for result in results for item in result.files]
    entries = (
        ("generated_at", metadata.generated_at.isoformat()),
        ("snapshot_root", str(metadata.snapshot_root)),
        ("compare_screenshots", metadata.compare_screenshots),
        ("tests", len(results)),
        ("tests_passed", sum(1 for result in results if result.passed)),
        ("files", len(files)),
        ("same", _count(files, FileStatus.SAME)),
        ("changed", _count(files, FileStatus.CHANGED)),
        ("missing", _count(files, FileStatus.MISSING)),
        ("new", _count(files, FileStatus.NEW)),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)


def _count(files, status: FileStatus) -> int:
    return sum(1 for item in files if item.status is status)
