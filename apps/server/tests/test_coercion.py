from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from maintreport.spreadsheet.coercion import (
    cell_text,
    coerce_completed,
    coerce_date,
    coerce_department,
    coerce_text,
    coerce_time,
    serial_to_iso_date,
)

TODAY = date(2024, 1, 2)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("20240510", "2024-05-10"),
        (20240510, "2024-05-10"),
        (20240510.0, "2024-05-10"),
        (45422, "2024-05-10"),
        (45422.75, "2024-05-10"),
        (date(2023, 12, 31), "2023-12-31"),
        (datetime(2024, 5, 10, 23, 59), "2024-05-10"),
        ("2024/05/10", "2024/05/10"),
        ("  2024-05-10 ", "2024-05-10"),
    ],
)
def test_coerce_date_rules(value: object, expected: str) -> None:
    assert coerce_date(value, today=TODAY) == expected


@pytest.mark.parametrize("value", [None, "", "   "])
def test_coerce_date_empty_falls_back_to_today(value: object) -> None:
    assert coerce_date(value, today=TODAY) == "2024-01-02"


def test_serial_conversion_is_deterministic() -> None:
    results = {serial_to_iso_date(45422) for _ in range(5)}
    assert results == {"2024-05-10"}


def test_serial_conversion_handles_unrepresentable_values() -> None:
    assert serial_to_iso_date(float("nan")) is None
    assert serial_to_iso_date(float("inf")) is None


def test_large_non_date_number_is_kept_verbatim() -> None:
    # Neither a serial (too large) nor eight digits.
    assert coerce_date(1234567, today=TODAY) == "1234567"


def test_aware_datetime_uses_local_calendar_day() -> None:
    moment = datetime(2024, 5, 10, 12, 0, tzinfo=timezone(timedelta(hours=0)))
    assert coerce_date(moment, today=TODAY) == moment.astimezone().date().isoformat()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (time(9, 5), "09:05"),
        (datetime(2024, 5, 10, 14, 30, 59), "14:30"),
        ("14:30", "14:30"),
        (" 7:00 ", "7:00"),
        (None, "00:00"),
        ("", "00:00"),
    ],
)
def test_coerce_time(value: object, expected: str) -> None:
    assert coerce_time(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("회전", "회전"),
        ("전기 파트", "전기"),
        ("  계기", "계기"),
        ("없는부서", "공무"),
        (None, "공무"),
        (42, "공무"),
    ],
)
def test_coerce_department(value: object, expected: str) -> None:
    assert coerce_department(value) == expected


def test_coerce_completed_matches_marker_substring() -> None:
    assert coerce_completed("완료") is True
    assert coerce_completed("조치 완료됨") is True
    assert coerce_completed("진행중") is False
    assert coerce_completed(None) is False


def test_cell_text_normalises_numbers_and_bools() -> None:
    assert cell_text(None) == ""
    assert cell_text(12.0) == "12"
    assert cell_text(12.5) == "12.5"
    assert cell_text(True) == "true"
    assert coerce_text("  pump  ") == "pump"
