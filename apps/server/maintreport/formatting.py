"""Fixed ``ko-KR`` locale formatting and shared display constants."""

from __future__ import annotations

from datetime import date, datetime

DEPARTMENTS: tuple[str, ...] = ("고정", "회전", "계기", "전기", "영선", "공무", "기술")
DEFAULT_DEPARTMENT = "공무"

COMPLETE_MARKER = "완료"
COMPLETED_LABEL = "완료"
IN_PROGRESS_LABEL = "진행중"

SYSTEM_LABEL = "NPK SOP System"


def completion_label(is_completed: bool) -> str:
    return COMPLETED_LABEL if is_completed else IN_PROGRESS_LABEL


def format_created_at(moment: date | datetime) -> str:
    """Render a calendar date the way ``toLocaleDateString('ko-KR')`` does."""
    return f"{moment.year}. {moment.month}. {moment.day}."


def format_printed_at(moment: datetime) -> str:
    """Render a timestamp the way ``toLocaleString('ko-KR')`` does.

    >>> format_printed_at(datetime(2024, 5, 10, 14, 30, 5))
    '2024. 5. 10. 오후 2:30:05'
    """
    meridiem = "오전" if moment.hour < 12 else "오후"
    hour = moment.hour % 12 or 12
    return (
        f"{format_created_at(moment)} {meridiem} "
        f"{hour}:{moment.minute:02d}:{moment.second:02d}"
    )


def iso_date(moment: date | datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
