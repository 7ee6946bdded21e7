"""Spreadsheet export of the record collection and the upload template."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from ..domain_models import MaintenanceReport
from ..formatting import completion_label, iso_date
from .columns import (
    COL_ACTION,
    COL_CAUSE,
    COL_CREATED_AT,
    COL_EQUIPMENT_NAME,
    COL_FAIL_DATE,
    COL_FAIL_TIME,
    COL_NOTIFICATION_NO,
    COL_SEQUENCE,
    COL_STATUS,
    COL_WORK_CONTENT,
    COL_WORK_DEPT,
    EXPORT_COLUMNS,
    TEMPLATE_COLUMNS,
)

EXPORT_SHEET_TITLE = "정비이력"
TEMPLATE_SHEET_TITLE = "업로드양식"
TEMPLATE_FILENAME = "NPK_정비보고서_일괄업로드_양식.xlsx"

TEMPLATE_EXAMPLE_ROW: dict[str, str] = {
    COL_NOTIFICATION_NO: "예: N-2024-001",
    COL_WORK_DEPT: "공무",
    COL_EQUIPMENT_NAME: "예: 메인 펌프 P-101",
    COL_FAIL_DATE: "20240510",
    COL_FAIL_TIME: "14:30",
    COL_WORK_CONTENT: "운전 중 이상 소음 및 진동 발생",
    COL_CAUSE: "베어링 하우징 마모",
    COL_ACTION: "베어링 교체 및 구리스 주입",
    COL_STATUS: "완료",
}


@dataclass(slots=True, frozen=True)
class SpreadsheetFile:
    filename: str
    content: bytes

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_row(report: MaintenanceReport, sequence: int) -> dict[str, Any]:
    """Project one record onto the export columns."""
    return {
        COL_SEQUENCE: sequence,
        COL_NOTIFICATION_NO: report.notification_no,
        COL_WORK_DEPT: report.work_dept,
        COL_EQUIPMENT_NAME: report.equipment_name,
        COL_FAIL_DATE: report.fail_date,
        COL_FAIL_TIME: report.fail_time,
        COL_WORK_CONTENT: report.work_content,
        COL_CAUSE: report.cause,
        COL_ACTION: report.action,
        COL_STATUS: completion_label(report.is_completed),
        COL_CREATED_AT: report.created_at,
    }


def export_rows(reports: Sequence[MaintenanceReport]) -> list[dict[str, Any]]:
    """Rows in caller order with a descending sequence number."""
    total = len(reports)
    return [export_row(report, total - index) for index, report in enumerate(reports)]


def _cell_value(value: Any) -> Any:
    """Drop control characters that worksheets cannot store."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _workbook_bytes(
    title: str,
    columns: Sequence[str],
    rows: list[dict[str, Any]],
    widths: Sequence[int] | None = None,
) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(list(columns))
    for row in rows:
        ws.append([_cell_value(row.get(col, "")) for col in columns])
        for cell in ws[ws.max_row]:
            # Text starting with "=" stays text, never a formula.
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"
    if widths:
        for col_idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(col_idx)].width = width
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_reports_xlsx(
    reports: Sequence[MaintenanceReport],
    *,
    now: datetime | None = None,
) -> SpreadsheetFile:
    content = _workbook_bytes(EXPORT_SHEET_TITLE, EXPORT_COLUMNS, export_rows(reports))
    stamp = iso_date(now or datetime.now())
    return SpreadsheetFile(filename=f"NPK_정비이력_{stamp}.xlsx", content=content)


def build_template_xlsx() -> SpreadsheetFile:
    """One example row plus column-width hints, shaped for re-import."""
    columns = [label for label, _ in TEMPLATE_COLUMNS]
    widths = [width for _, width in TEMPLATE_COLUMNS]
    content = _workbook_bytes(TEMPLATE_SHEET_TITLE, columns, [dict(TEMPLATE_EXAMPLE_ROW)], widths)
    return SpreadsheetFile(filename=TEMPLATE_FILENAME, content=content)
