from __future__ import annotations

from datetime import date, datetime

import pytest

from maintreport.formatting import completion_label, format_created_at, format_printed_at, iso_date


def test_created_at_matches_ko_kr_date_style() -> None:
    assert format_created_at(date(2024, 5, 1)) == "2024. 5. 1."


@pytest.mark.parametrize(
    ("moment", "expected"),
    [
        (datetime(2024, 5, 10, 0, 5, 9), "2024. 5. 10. 오전 12:05:09"),
        (datetime(2024, 5, 10, 11, 59, 0), "2024. 5. 10. 오전 11:59:00"),
        (datetime(2024, 5, 10, 12, 0, 0), "2024. 5. 10. 오후 12:00:00"),
        (datetime(2024, 5, 10, 14, 30, 5), "2024. 5. 10. 오후 2:30:05"),
    ],
)
def test_printed_at_matches_ko_kr_timestamp_style(moment: datetime, expected: str) -> None:
    assert format_printed_at(moment) == expected


def test_iso_date_and_completion_label() -> None:
    assert iso_date(date(2024, 1, 2)) == "2024-01-02"
    assert completion_label(True) == "완료"
    assert completion_label(False) == "진행중"
