"""Spreadsheet upload parsing: workbook bytes -> coerced partial records."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime
from io import BytesIO
from typing import Any

from openpyxl import load_workbook

from ..domain_models import ImportedReport
from ..errors import ParseError
from ..formatting import format_created_at
from .coercion import (
    coerce_completed,
    coerce_date,
    coerce_department,
    coerce_text,
    coerce_time,
)
from .columns import (
    COL_ACTION,
    COL_CAUSE,
    COL_EQUIPMENT_NAME,
    COL_FAIL_DATE,
    COL_FAIL_TIME,
    COL_NOTIFICATION_NO,
    COL_STATUS,
    COL_WORK_CONTENT,
    COL_WORK_DEPT,
)

LOGGER = logging.getLogger(__name__)

RawRow = dict[str, Any]


def drop_template_example_row(rows: list[RawRow]) -> list[RawRow]:
    """Discard the template's example row when more than one row was uploaded.

    The downloadable template ships one example row.  With two or more rows
    the first is assumed to be that example; a single row is assumed to be
    the user's own data written over it.  A user who keeps real data in the
    first row of a multi-row sheet loses that row.
    """
    return rows[1:] if len(rows) > 1 else rows


def _header_label(value: object) -> str:
    return "" if value is None else str(value).strip()


def read_sheet_rows(data: bytes) -> list[RawRow]:
    """Read the first worksheet into header-keyed dicts, skipping blank rows.

    Raises :class:`ParseError` when *data* is not a readable workbook.
    """
    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        raise ParseError(f"Uploaded file is not a readable spreadsheet: {exc}") from exc
    try:
        if not workbook.worksheets:
            return []
        sheet = workbook.worksheets[0]
        rows_iter = sheet.iter_rows(values_only=True)
        header_row = next(rows_iter, None)
        if header_row is None:
            return []
        headers = [_header_label(h) for h in header_row]
        rows: list[RawRow] = []
        for values in rows_iter:
            if all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
                continue
            row = {
                label: value
                for label, value in zip(headers, values, strict=False)
                if label
            }
            rows.append(row)
        return rows
    except ParseError:
        raise
    except Exception as exc:
        raise ParseError(f"Spreadsheet contents could not be read: {exc}") from exc
    finally:
        workbook.close()


def coerce_row(row: RawRow, *, now: datetime | None = None) -> ImportedReport:
    """Coerce one header-keyed row; unknown or missing headers read as empty."""
    moment = now or datetime.now()
    today: date = moment.date()
    return ImportedReport(
        notification_no=coerce_text(row.get(COL_NOTIFICATION_NO)),
        work_dept=coerce_department(row.get(COL_WORK_DEPT)),
        equipment_name=coerce_text(row.get(COL_EQUIPMENT_NAME)),
        fail_date=coerce_date(row.get(COL_FAIL_DATE), today=today),
        fail_time=coerce_time(row.get(COL_FAIL_TIME)),
        work_content=coerce_text(row.get(COL_WORK_CONTENT)),
        cause=coerce_text(row.get(COL_CAUSE)),
        action=coerce_text(row.get(COL_ACTION)),
        is_completed=coerce_completed(row.get(COL_STATUS)),
        created_at=format_created_at(moment),
    )


def iter_imported_reports(data: bytes, *, now: datetime | None = None) -> Iterator[ImportedReport]:
    """Yield coerced partial records in file order.

    The workbook is decoded eagerly so that :class:`ParseError` surfaces on
    the call itself rather than on first iteration.
    """
    rows = drop_template_example_row(read_sheet_rows(data))

    def _generate() -> Iterator[ImportedReport]:
        for row in rows:
            yield coerce_row(row, now=now)

    return _generate()


def parse_reports_from_xlsx(data: bytes, *, now: datetime | None = None) -> list[ImportedReport]:
    reports = list(iter_imported_reports(data, now=now))
    LOGGER.info("Parsed %d report row(s) from uploaded spreadsheet", len(reports))
    return reports
