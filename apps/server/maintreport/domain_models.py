"""Domain model objects for the maintenance-report tracker.

Typed dataclasses for the canonical record.  The persisted JSON and the HTTP
payloads keep the camelCase keys used by the web client (``notificationNo``,
``aiInsights``, ...); conversion happens only in ``from_dict`` / ``to_dict``.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .formatting import DEFAULT_DEPARTMENT, DEPARTMENTS, format_created_at

IMAGE_TYPE_PREFIX = "image/"


def normalize_department(value: object) -> str:
    """Return a member of :data:`DEPARTMENTS`, substituting the default."""
    text = str(value or "").strip()
    token = text.split()[0] if text else ""
    return token if token in DEPARTMENTS else DEFAULT_DEPARTMENT


def new_report_id(index: int | None = None, *, now_ms: int | None = None) -> str:
    """Return a fresh ``REP-<epoch ms>`` identifier (``-<index>`` for bulk rows)."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    if index is None:
        return f"REP-{stamp}"
    return f"REP-{stamp}-{index}"


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Attachment
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class Attachment:
    name: str
    type: str
    data: str  # data URI or bare base64

    @property
    def is_image(self) -> bool:
        return self.type.startswith(IMAGE_TYPE_PREFIX)

    def payload_bytes(self) -> bytes:
        """Decode the base64 payload, accepting a ``data:...;base64,`` prefix.

        Raises ``ValueError`` (``binascii.Error``) on malformed payloads.
        """
        encoded = self.data
        if encoded.startswith("data:"):
            _, _, encoded = encoded.partition(",")
        return base64.b64decode(encoded, validate=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Attachment:
        return cls(name=_text(data, "name"), type=_text(data, "type"), data=_text(data, "data"))

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "type": self.type, "data": self.data}


# ---------------------------------------------------------------------------
# Imported (partial) record
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ImportedReport:
    """A spreadsheet row after coercion.

    Lacks the identifier, archived flag and attachments, which the owning
    collection fills in at insertion time.
    """

    notification_no: str
    work_dept: str
    equipment_name: str
    fail_date: str
    fail_time: str
    work_content: str
    cause: str
    action: str
    is_completed: bool
    created_at: str


# ---------------------------------------------------------------------------
# MaintenanceReport
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MaintenanceReport:
    id: str
    notification_no: str
    equipment_name: str
    work_dept: str
    work_content: str
    fail_date: str
    fail_time: str
    cause: str
    action: str
    created_at: str
    ai_insights: str | None = None
    is_completed: bool = False
    is_archived: bool = False
    attachments: list[Attachment] = field(default_factory=list)

    # -- construction ----------------------------------------------------------

    @classmethod
    def from_imported(cls, imported: ImportedReport, report_id: str) -> MaintenanceReport:
        return cls(
            id=report_id,
            notification_no=imported.notification_no,
            equipment_name=imported.equipment_name,
            work_dept=normalize_department(imported.work_dept),
            work_content=imported.work_content,
            fail_date=imported.fail_date,
            fail_time=imported.fail_time,
            cause=imported.cause,
            action=imported.action,
            created_at=imported.created_at,
            is_completed=imported.is_completed,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MaintenanceReport:
        report_id = _text(data, "id").strip() or new_report_id()
        created_at = _text(data, "createdAt") or format_created_at(datetime.now())
        insights = data.get("aiInsights")
        raw_attachments = data.get("attachments") or []
        return cls(
            id=report_id,
            notification_no=_text(data, "notificationNo"),
            equipment_name=_text(data, "equipmentName"),
            work_dept=normalize_department(data.get("workDept")),
            work_content=_text(data, "workContent"),
            fail_date=_text(data, "failDate"),
            fail_time=_text(data, "failTime"),
            cause=_text(data, "cause"),
            action=_text(data, "action"),
            created_at=created_at,
            ai_insights=str(insights) if insights else None,
            is_completed=bool(data.get("isCompleted")),
            is_archived=bool(data.get("isArchived")),
            attachments=[
                Attachment.from_dict(a) for a in raw_attachments if isinstance(a, dict)
            ],
        )

    # -- queries ---------------------------------------------------------------

    @property
    def image_attachments(self) -> list[Attachment]:
        return [a for a in self.attachments if a.is_image]

    # -- serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "notificationNo": self.notification_no,
            "equipmentName": self.equipment_name,
            "workDept": self.work_dept,
            "workContent": self.work_content,
            "failDate": self.fail_date,
            "failTime": self.fail_time,
            "cause": self.cause,
            "action": self.action,
            "createdAt": self.created_at,
            "isCompleted": self.is_completed,
            "isArchived": self.is_archived,
            "attachments": [a.to_dict() for a in self.attachments],
        }
        if self.ai_insights:
            out["aiInsights"] = self.ai_insights
        return out
