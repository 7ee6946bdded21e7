from __future__ import annotations

import dataclasses
import json
import logging
import time
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any

from .domain_models import (
    Attachment,
    ImportedReport,
    MaintenanceReport,
    new_report_id,
    normalize_department,
)
from .formatting import format_created_at

LOGGER = logging.getLogger(__name__)

FORM_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ("notificationNo", "notification_no"),
    ("equipmentName", "equipment_name"),
    ("workContent", "work_content"),
    ("failDate", "fail_date"),
    ("failTime", "fail_time"),
    ("cause", "cause"),
    ("action", "action"),
)


def new_report_from_form(
    form: dict[str, Any],
    *,
    advice: str | None,
    attachments: Iterable[Attachment] = (),
    now: datetime | None = None,
) -> MaintenanceReport:
    """Build a fresh record for the form-submit path (new id, creation date)."""
    values = {attr: str(form.get(key) or "") for key, attr in FORM_TEXT_FIELDS}
    return MaintenanceReport(
        id=new_report_id(),
        work_dept=normalize_department(form.get("workDept")),
        created_at=format_created_at(now or datetime.now()),
        ai_insights=advice or None,
        is_completed=bool(form.get("isCompleted")),
        attachments=list(attachments),
        **values,
    )


def _copy(report: MaintenanceReport) -> MaintenanceReport:
    return MaintenanceReport.from_dict(report.to_dict())


class UnknownReportError(KeyError):
    """No record with the requested identifier."""


class ReportStore:
    """Ordered, keyed record collection (most recent first) persisted as JSON.

    Loaded wholesale at construction and written wholesale after every
    mutation.  Callers receive copies; only this class mutates records.
    """

    def __init__(self, persist_path: Path | None = None) -> None:
        self._lock = RLock()
        self._persist_path = persist_path
        self._reports: list[MaintenanceReport] = []
        self._load()

    # -- persistence -----------------------------------------------------------

    def _load(self) -> None:
        if not self._persist_path or not self._persist_path.exists():
            return
        try:
            raw = json.loads(self._persist_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            LOGGER.warning("Could not load reports from %s: %s", self._persist_path, exc)
            return
        if not isinstance(raw, list):
            LOGGER.warning("Ignoring reports file %s: expected a JSON list", self._persist_path)
            return
        with self._lock:
            self._reports = [MaintenanceReport.from_dict(r) for r in raw if isinstance(r, dict)]
        LOGGER.info("Loaded %d report(s) from %s", len(self._reports), self._persist_path)

    def _persist(self, reports: list[MaintenanceReport]) -> None:
        if not self._persist_path:
            return
        payload = [r.to_dict() for r in reports]
        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._persist_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._persist_path)

    # -- reads -----------------------------------------------------------------

    def list_reports(self) -> list[MaintenanceReport]:
        with self._lock:
            return [_copy(r) for r in self._reports]

    def _index_of(self, report_id: str) -> int:
        for index, report in enumerate(self._reports):
            if report.id == report_id:
                return index
        raise UnknownReportError(report_id)

    def get(self, report_id: str) -> MaintenanceReport:
        with self._lock:
            return _copy(self._reports[self._index_of(report_id)])

    def select(self, report_ids: Iterable[str]) -> list[MaintenanceReport]:
        """Records whose id is in *report_ids*, in collection order."""
        wanted = {str(i) for i in report_ids}
        return [r for r in self.list_reports() if r.id in wanted]

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "totalReports": len(self._reports),
                "recentFailures": sum(1 for r in self._reports if not r.is_completed),
                "aiAnalyzed": sum(1 for r in self._reports if r.ai_insights),
            }

    # -- mutations -------------------------------------------------------------

    def _commit(self, candidate: list[MaintenanceReport]) -> None:
        """Persist *candidate*, then make it current; a failed write changes nothing."""
        self._persist(candidate)
        self._reports = candidate

    def _swap_at(self, index: int, updated: MaintenanceReport) -> MaintenanceReport:
        candidate = list(self._reports)
        candidate[index] = updated
        self._commit(candidate)
        return _copy(updated)

    def add(self, report: MaintenanceReport) -> MaintenanceReport:
        with self._lock:
            if any(r.id == report.id for r in self._reports):
                raise ValueError(f"Duplicate report id: {report.id}")
            stored = _copy(report)
            self._commit([stored, *self._reports])
            return _copy(stored)

    def add_imported(self, imported: Iterable[ImportedReport]) -> list[MaintenanceReport]:
        """Insert imported rows ahead of existing records, keeping file order."""
        stamp = int(time.time() * 1000)
        created = [
            MaintenanceReport.from_imported(row, new_report_id(i, now_ms=stamp))
            for i, row in enumerate(imported)
        ]
        with self._lock:
            self._commit([*created, *self._reports])
        LOGGER.info("Imported %d report(s)", len(created))
        return [_copy(r) for r in created]

    def replace(self, report_id: str, report: MaintenanceReport) -> MaintenanceReport:
        """Full replace-on-edit; identifier, creation date and archived flag are kept."""
        with self._lock:
            index = self._index_of(report_id)
            existing = self._reports[index]
            updated = dataclasses.replace(
                _copy(report),
                id=existing.id,
                created_at=existing.created_at,
                is_archived=existing.is_archived,
            )
            return self._swap_at(index, updated)

    def toggle_completed(self, report_id: str) -> MaintenanceReport:
        with self._lock:
            index = self._index_of(report_id)
            current = self._reports[index]
            return self._swap_at(
                index, dataclasses.replace(current, is_completed=not current.is_completed)
            )

    def toggle_archived(self, report_id: str) -> MaintenanceReport:
        with self._lock:
            index = self._index_of(report_id)
            current = self._reports[index]
            return self._swap_at(
                index, dataclasses.replace(current, is_archived=not current.is_archived)
            )

    def set_archived(self, report_ids: Iterable[str], archived: bool) -> int:
        wanted = {str(i) for i in report_ids}
        with self._lock:
            candidate = [
                dataclasses.replace(r, is_archived=archived) if r.id in wanted else r
                for r in self._reports
            ]
            self._commit(candidate)
            return sum(1 for r in candidate if r.id in wanted)

    def remove(self, report_id: str) -> None:
        with self._lock:
            index = self._index_of(report_id)
            self._commit(self._reports[:index] + self._reports[index + 1 :])
