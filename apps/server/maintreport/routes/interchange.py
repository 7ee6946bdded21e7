"""Spreadsheet import/export, upload template, and PDF report download endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from ..api_models import ImportResponse, ReportIdsRequest
from ..errors import AssetUnavailable, GenericRenderFailure, ParseError
from ..report import render_reports
from ..spreadsheet import build_template_xlsx, export_reports_xlsx, parse_reports_from_xlsx
from ..spreadsheet.xlsx_export import SpreadsheetFile
from ._helpers import attachment_headers, require_report

if TYPE_CHECKING:
    from ..app import RuntimeState
    from ..domain_models import MaintenanceReport

LOGGER = logging.getLogger(__name__)

_MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def _spreadsheet_response(sheet: SpreadsheetFile) -> Response:
    return Response(
        content=sheet.content,
        media_type=SpreadsheetFile.media_type,
        headers=attachment_headers(sheet.filename),
    )


def create_interchange_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    async def _pdf_response(reports: Sequence[MaintenanceReport]) -> Response:
        try:
            document = await render_reports(
                reports,
                font_cache=state.font_cache,
                font_family=state.config.fonts.family,
            )
        except AssetUnavailable as exc:
            raise HTTPException(status_code=503, detail=f"PDF 생성 에러: {exc}") from exc
        except GenericRenderFailure as exc:
            raise HTTPException(
                status_code=422,
                detail="PDF generation failed. Please try again.",
            ) from exc
        return Response(
            content=document.content,
            media_type=document.media_type,
            headers=attachment_headers(document.filename),
        )

    # -- spreadsheet -----------------------------------------------------------

    @router.post("/api/reports/import", response_model=ImportResponse)
    async def import_reports(request: Request) -> dict:
        data = await request.body()
        if not data:
            raise HTTPException(status_code=400, detail="Empty upload")
        if len(data) > _MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="Upload too large")
        try:
            imported = await asyncio.to_thread(parse_reports_from_xlsx, data)
        except ParseError as exc:
            LOGGER.warning("Spreadsheet import rejected: %s", exc)
            raise HTTPException(status_code=400, detail="엑셀 로드 오류") from exc
        created = await asyncio.to_thread(state.store.add_imported, imported)
        return {"imported": len(created), "ids": [r.id for r in created]}

    @router.get("/api/reports/export")
    async def export_reports() -> Response:
        reports = state.store.list_reports()
        sheet = await asyncio.to_thread(export_reports_xlsx, reports)
        return _spreadsheet_response(sheet)

    @router.get("/api/reports/template")
    async def download_template() -> Response:
        sheet = await asyncio.to_thread(build_template_xlsx)
        return _spreadsheet_response(sheet)

    # -- PDF -------------------------------------------------------------------

    @router.post("/api/reports/pdf")
    async def batch_report_pdf(req: ReportIdsRequest) -> Response:
        reports = state.store.select(req.ids)
        if not reports:
            raise HTTPException(status_code=404, detail="No matching reports")
        return await _pdf_response(reports)

    @router.get("/api/reports/{report_id}/pdf")
    async def report_pdf(report_id: str) -> Response:
        report = require_report(state.store, report_id)
        return await _pdf_response([report])

    return router
