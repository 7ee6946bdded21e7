"""Shared route helpers used across multiple route modules."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import quote

from fastapi import HTTPException

from ..record_store import UnknownReportError

if TYPE_CHECKING:
    from ..domain_models import MaintenanceReport
    from ..record_store import ReportStore

_SAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9._-]")


def safe_filename(name: str) -> str:
    """Sanitize *name* for use as the ASCII ``filename`` in Content-Disposition."""
    return _SAFE_FILENAME_RE.sub("_", name)[:200] or "download"


def attachment_headers(filename: str) -> dict[str, str]:
    """Content-Disposition with an ASCII fallback plus the RFC 5987 UTF-8 name."""
    return {
        "Content-Disposition": (
            f"attachment; filename=\"{safe_filename(filename)}\"; "
            f"filename*=UTF-8''{quote(filename)}"
        )
    }


def require_report(store: ReportStore, report_id: str) -> MaintenanceReport:
    """Fetch a record or raise HTTP 404."""
    try:
        return store.get(report_id)
    except UnknownReportError as exc:
        raise HTTPException(status_code=404, detail="Report not found") from exc
