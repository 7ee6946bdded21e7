"""Fixed Korean column labels shared by the spreadsheet importer and exporter."""

from __future__ import annotations

COL_SEQUENCE = "순번"
COL_NOTIFICATION_NO = "통지번호"
COL_WORK_DEPT = "작업부서"
COL_EQUIPMENT_NAME = "설비명칭"
COL_FAIL_DATE = "발생날짜"
COL_FAIL_TIME = "발생시간"
COL_WORK_CONTENT = "고장발생경위"
COL_CAUSE = "고장원인"
COL_ACTION = "조치사항"
COL_STATUS = "조치상태"
COL_CREATED_AT = "등록일시"

# Export column order.  The sequence number is recomputed on every export and
# the creation timestamp is informational; neither is read back on import.
EXPORT_COLUMNS: tuple[str, ...] = (
    COL_SEQUENCE,
    COL_NOTIFICATION_NO,
    COL_WORK_DEPT,
    COL_EQUIPMENT_NAME,
    COL_FAIL_DATE,
    COL_FAIL_TIME,
    COL_WORK_CONTENT,
    COL_CAUSE,
    COL_ACTION,
    COL_STATUS,
    COL_CREATED_AT,
)

# Upload template column order with ``wch``-style width hints.
TEMPLATE_COLUMNS: tuple[tuple[str, int], ...] = (
    (COL_NOTIFICATION_NO, 15),
    (COL_WORK_DEPT, 15),
    (COL_EQUIPMENT_NAME, 30),
    (COL_FAIL_DATE, 15),
    (COL_FAIL_TIME, 10),
    (COL_WORK_CONTENT, 50),
    (COL_CAUSE, 40),
    (COL_ACTION, 40),
    (COL_STATUS, 15),
)
