"""PDF document assembly: font resolution, off-loop rendering, and naming."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from ..domain_models import MaintenanceReport
from ..errors import GenericRenderFailure
from ..formatting import iso_date
from .fonts import DEFAULT_FONT_FAMILY, GlyphAssetCache
from .pdf_builder import build_reports_pdf


@dataclass(slots=True, frozen=True)
class RenderedDocument:
    filename: str
    content: bytes

    media_type = "application/pdf"


def document_filename(reports: Sequence[MaintenanceReport], now: datetime | None = None) -> str:
    if len(reports) == 1:
        return f"정비보고서_{reports[0].notification_no}.pdf"
    return f"정비보고서_일괄다운로드_{iso_date(now or datetime.now())}.pdf"


async def render_reports(
    reports: MaintenanceReport | Sequence[MaintenanceReport],
    *,
    font_cache: GlyphAssetCache,
    font_family: str = DEFAULT_FONT_FAMILY,
    now: datetime | None = None,
) -> RenderedDocument:
    """Render one record or an ordered batch into a single PDF.

    Raises :class:`AssetUnavailable` before any layout work when the glyph set
    cannot be obtained, and :class:`GenericRenderFailure` for anything else.
    """
    report_list = [reports] if isinstance(reports, MaintenanceReport) else list(reports)
    if not report_list:
        raise GenericRenderFailure("No reports to render")
    moment = now or datetime.now()
    font_bytes = await font_cache.get_glyph_asset()
    content = await asyncio.to_thread(
        build_reports_pdf,
        report_list,
        font_bytes,
        printed_at=moment,
        font_family=font_family,
    )
    return RenderedDocument(filename=document_filename(report_list, moment), content=content)
