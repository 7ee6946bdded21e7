"""Report CRUD, status toggles, bulk archive, and dashboard stats endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from ..api_models import (
    ArchiveRequest,
    ArchiveResponse,
    ReportFormRequest,
    StatsResponse,
)
from ..domain_models import Attachment
from ..record_store import UnknownReportError, new_report_from_form
from ._helpers import require_report

if TYPE_CHECKING:
    from ..app import RuntimeState

LOGGER = logging.getLogger(__name__)


def _form_attachments(req: ReportFormRequest) -> list[Attachment]:
    return [Attachment(name=a.name, type=a.type, data=a.data) for a in req.attachments]


def create_report_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/api/reports")
    async def list_reports() -> list[dict]:
        return [r.to_dict() for r in state.store.list_reports()]

    @router.get("/api/reports/stats", response_model=StatsResponse)
    async def report_stats() -> dict:
        return state.store.stats()

    @router.post("/api/reports")
    async def create_report(req: ReportFormRequest) -> dict:
        form = req.model_dump(exclude={"attachments"})
        advice = await state.advice.advise(req.equipmentName, req.cause)
        report = new_report_from_form(form, advice=advice, attachments=_form_attachments(req))
        try:
            created = await asyncio.to_thread(state.store.add, report)
        except ValueError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return created.to_dict()

    @router.get("/api/reports/{report_id}")
    async def get_report(report_id: str) -> dict:
        return require_report(state.store, report_id).to_dict()

    @router.put("/api/reports/{report_id}")
    async def replace_report(report_id: str, req: ReportFormRequest) -> dict:
        require_report(state.store, report_id)
        form = req.model_dump(exclude={"attachments"})
        advice = await state.advice.advise(req.equipmentName, req.cause)
        report = new_report_from_form(form, advice=advice, attachments=_form_attachments(req))
        try:
            replaced = await asyncio.to_thread(state.store.replace, report_id, report)
        except UnknownReportError as exc:
            raise HTTPException(status_code=404, detail="Report not found") from exc
        return replaced.to_dict()

    @router.delete("/api/reports/{report_id}")
    async def delete_report(report_id: str) -> dict:
        try:
            await asyncio.to_thread(state.store.remove, report_id)
        except UnknownReportError as exc:
            raise HTTPException(status_code=404, detail="Report not found") from exc
        return {"id": report_id, "status": "deleted"}

    @router.post("/api/reports/{report_id}/toggle-completed")
    async def toggle_completed(report_id: str) -> dict:
        try:
            report = await asyncio.to_thread(state.store.toggle_completed, report_id)
        except UnknownReportError as exc:
            raise HTTPException(status_code=404, detail="Report not found") from exc
        return report.to_dict()

    @router.post("/api/reports/{report_id}/toggle-archived")
    async def toggle_archived(report_id: str) -> dict:
        try:
            report = await asyncio.to_thread(state.store.toggle_archived, report_id)
        except UnknownReportError as exc:
            raise HTTPException(status_code=404, detail="Report not found") from exc
        return report.to_dict()

    @router.post("/api/reports/archive", response_model=ArchiveResponse)
    async def archive_reports(req: ArchiveRequest) -> dict:
        updated = await asyncio.to_thread(state.store.set_archived, req.ids, req.archived)
        return {"updated": updated}

    return router
