from __future__ import annotations

from datetime import datetime

import pytest
from builders import build_xlsx

from maintreport.errors import ParseError
from maintreport.spreadsheet import parse_reports_from_xlsx
from maintreport.spreadsheet.xlsx_import import (
    drop_template_example_row,
    iter_imported_reports,
    read_sheet_rows,
)

HEADER = [
    "통지번호",
    "작업부서",
    "설비명칭",
    "발생날짜",
    "발생시간",
    "고장발생경위",
    "고장원인",
    "조치사항",
    "조치상태",
]
NOW = datetime(2024, 6, 1, 9, 0, 0)


def _row(no: str, **overrides: object) -> list[object]:
    values = {
        "통지번호": no,
        "작업부서": "회전",
        "설비명칭": f"Pump {no}",
        "발생날짜": "20240510",
        "발생시간": "14:30",
        "고장발생경위": "noise",
        "고장원인": "wear",
        "조치사항": "replace",
        "조치상태": "완료",
    }
    values.update(overrides)
    return [values[h] for h in HEADER]


def test_multi_row_upload_drops_first_row() -> None:
    data = build_xlsx(HEADER, [_row("EXAMPLE"), _row("N-1"), _row("N-2")])
    reports = parse_reports_from_xlsx(data, now=NOW)
    assert [r.notification_no for r in reports] == ["N-1", "N-2"]


def test_two_row_upload_keeps_only_second_row() -> None:
    data = build_xlsx(HEADER, [_row("EXAMPLE"), _row("N-1")])
    reports = parse_reports_from_xlsx(data, now=NOW)
    assert len(reports) == 1
    assert reports[0].notification_no == "N-1"


def test_single_row_upload_is_kept() -> None:
    data = build_xlsx(HEADER, [_row("ONLY")])
    reports = parse_reports_from_xlsx(data, now=NOW)
    assert [r.notification_no for r in reports] == ["ONLY"]


def test_header_only_upload_yields_nothing() -> None:
    assert parse_reports_from_xlsx(build_xlsx(HEADER, []), now=NOW) == []


def test_rows_are_coerced() -> None:
    data = build_xlsx(
        HEADER,
        [
            _row("EXAMPLE"),
            _row("N-1", 발생날짜=45422, 작업부서="unknown", 조치상태="진행중"),
            _row("N-2", 발생날짜=datetime(2024, 3, 4, 8, 15), 발생시간=None),
        ],
    )
    first, second = parse_reports_from_xlsx(data, now=NOW)
    assert first.fail_date == "2024-05-10"
    assert first.work_dept == "공무"
    assert first.is_completed is False
    assert first.created_at == "2024. 6. 1."
    assert second.fail_date == "2024-03-04"
    assert second.fail_time == "00:00"
    assert second.is_completed is True


def test_unknown_and_missing_headers_read_as_empty() -> None:
    data = build_xlsx(["설비명칭", "Extra"], [["Fan F-1", "ignored"]])
    (report,) = parse_reports_from_xlsx(data, now=NOW)
    assert report.equipment_name == "Fan F-1"
    assert report.notification_no == ""
    assert report.fail_date == "2024-06-01"
    assert report.fail_time == "00:00"
    assert report.work_dept == "공무"


def test_blank_rows_are_skipped() -> None:
    data = build_xlsx(HEADER, [_row("EXAMPLE"), ["   "] * len(HEADER), _row("N-1")])
    rows = read_sheet_rows(data)
    assert len(rows) == 2


@pytest.mark.parametrize("data", [b"", b"not a spreadsheet", b"PK\x03\x04broken"])
def test_unreadable_upload_raises_parse_error(data: bytes) -> None:
    with pytest.raises(ParseError):
        parse_reports_from_xlsx(data)


def test_parse_error_surfaces_before_iteration() -> None:
    with pytest.raises(ParseError):
        iter_imported_reports(b"garbage")


def test_drop_template_example_row_policy() -> None:
    assert drop_template_example_row([]) == []
    assert drop_template_example_row([{"a": 1}]) == [{"a": 1}]
    assert drop_template_example_row([{"a": 1}, {"a": 2}]) == [{"a": 2}]
