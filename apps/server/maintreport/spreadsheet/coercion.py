"""Total per-field coercion of raw spreadsheet cell values.

Every function here accepts whatever ``openpyxl`` hands back for a cell
(``None``, ``str``, ``int``, ``float``, ``bool``, ``datetime``, ``date`` or
``time``) and always returns a defined value; none of them raise.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta

from ..domain_models import normalize_department
from ..formatting import COMPLETE_MARKER, iso_date

EXCEL_EPOCH_OFFSET_DAYS = 25569
"""Days between the 1899-12-30 spreadsheet day zero and the Unix epoch."""

MS_PER_DAY = 86_400_000
SERIAL_DATE_LIMIT = 100_000
DEFAULT_TIME = "00:00"

_UNIX_EPOCH = datetime(1970, 1, 1)
_EIGHT_DIGITS_RE = re.compile(r"^\d{8}$")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def cell_text(value: object) -> str:
    """String form of a cell value; integral floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _split_yyyymmdd(digits: str) -> str:
    return f"{digits[0:4]}-{digits[4:6]}-{digits[6:8]}"


def serial_to_iso_date(serial: float) -> str | None:
    """Convert a 1899-12-30-based day serial to ``YYYY-MM-DD`` (UTC calendar day).

    Returns ``None`` when the serial falls outside the representable range.
    """
    if not math.isfinite(serial):
        return None
    millis = math.floor((serial - EXCEL_EPOCH_OFFSET_DAYS) * MS_PER_DAY + 0.5)
    try:
        moment = _UNIX_EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return None
    return iso_date(moment)


def _native_calendar_date(value: date) -> str:
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone()
    return iso_date(value)


def coerce_date(value: object, *, today: date | None = None) -> str:
    """Coerce a ``발생날짜`` cell to ``YYYY-MM-DD``; first matching rule wins."""
    result = ""
    if isinstance(value, date):
        result = _native_calendar_date(value)
    else:
        text = cell_text(value).strip()
        if _EIGHT_DIGITS_RE.match(text):
            result = _split_yyyymmdd(text)
        elif _is_number(value) and value < SERIAL_DATE_LIMIT:  # type: ignore[operator]
            result = serial_to_iso_date(float(value)) or text  # type: ignore[arg-type]
        elif _is_number(value) and len(cell_text(value)) == 8:
            result = _split_yyyymmdd(cell_text(value))
        else:
            result = text
    if not result:
        result = iso_date(today or date.today())
    return result


def coerce_time(value: object) -> str:
    """Coerce a ``발생시간`` cell to ``HH:MM`` where the cell carries a native time."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return f"{value.hour:02d}:{value.minute:02d}"
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"
    return cell_text(value).strip() or DEFAULT_TIME


def coerce_department(value: object) -> str:
    return normalize_department(cell_text(value))


def coerce_completed(value: object) -> bool:
    return COMPLETE_MARKER in cell_text(value)


def coerce_text(value: object) -> str:
    return cell_text(value).strip()
