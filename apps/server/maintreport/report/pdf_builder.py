"""PDF report builder – Canvas-based maintenance completion report.

Per record: header band (first page only), attribute table with growing
rows, optional advisory callout, two-column photo grid, and a footer on
every page.  Several records are concatenated, each starting on a new page.

Measurement and pagination happen first (see ``pdf_layout``); drawing then
walks the resulting placements page by page.  Uses the low-level ReportLab
Canvas API for precise positioning.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from .. import __version__
from ..domain_models import Attachment, MaintenanceReport
from ..errors import AssetUnavailable, GenericRenderFailure, ImageInsertFailure
from ..formatting import (
    DEFAULT_DEPARTMENT,
    SYSTEM_LABEL,
    completion_label,
    format_printed_at,
)
from .fonts import DEFAULT_FONT_FAMILY, register_glyph_font
from .pdf_layout import (
    Block,
    PageFrame,
    Placement,
    chunk_lines,
    fit_rect_preserve_aspect,
    layout_blocks,
    page_count,
)
from .theme import REPORT_COLORS

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Style tokens (millimetres unless noted)
# ---------------------------------------------------------------------------

PAGE_SIZE = A4
PAGE_W, PAGE_H = PAGE_SIZE
PAGE_W_MM = PAGE_W / mm
PAGE_H_MM = PAGE_H / mm

MARGIN = 20.0
CONTENT_W = PAGE_W_MM - 2 * MARGIN
FRAME = PageFrame(page_height=PAGE_H_MM, continuation_top=MARGIN, bottom_margin=MARGIN)

HEADER_H = 35.0
HEADER_TITLE_BASELINE = 22.0
TABLE_START = 45.0
REPORT_TITLE = "설비 정비 완료 보고서"

LABEL_W = 40.0
VALUE_W = CONTENT_W - LABEL_W
VALUE_PAD = 5.0
MIN_ROW_H = 10.0
ROW_LINE_H = 6.0
ROW_PAD = 4.0
ROW_FIRST_BASELINE = 6.0

ADVICE_TITLE = "전문가 기술 자문 (AI 분석)"
ADVICE_LINE_H = 5.0
ADVICE_PAD = 15.0
ADVICE_GAP = 10.0

PHOTO_HEADING = "현장 사진 첨부"
PHOTO_HEADING_H = 7.0
PHOTO_COLS = 2
PHOTO_GUTTER = 10.0
PHOTO_W = CONTENT_W / PHOTO_COLS - PHOTO_GUTTER / 2
PHOTO_H = 60.0
PHOTO_TAIL_GAP = 15.0

FOOTER_OFFSET = 15.0
CONTINUED_SUFFIX = " (계속)"

FS_TITLE = 20
FS_LABEL = 9
FS_VALUE = 10
FS_ADVICE_TITLE = 10
FS_ADVICE = 9
FS_PHOTO_HEADING = 11
FS_FOOTER = 8


# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------


def _hex(c: str) -> colors.Color:
    return colors.HexColor(c)


def _pt_y(top_mm: float) -> float:
    """Convert a top-down millimetre offset to a ReportLab y coordinate."""
    return PAGE_H - top_mm * mm


def _split_word(word: str, font: str, size: float, width_pt: float) -> list[str]:
    pieces: list[str] = []
    piece = ""
    for ch in word:
        if piece and stringWidth(piece + ch, font, size) > width_pt:
            pieces.append(piece)
            piece = ch
        else:
            piece += ch
    if piece:
        pieces.append(piece)
    return pieces


def wrap_text(text: str, font: str, size: float, width_mm: float) -> list[str]:
    """Word-wrap *text* to *width_mm*; words wider than a line are broken by character."""
    width_pt = width_mm * mm
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if stringWidth(candidate, font, size) <= width_pt:
                current = candidate
                continue
            if current:
                lines.append(current)
            pieces = _split_word(word, font, size, width_pt)
            lines.extend(pieces[:-1])
            current = pieces[-1]
        lines.append(current)
    return lines


def table_row_height(line_count: int) -> float:
    return max(MIN_ROW_H, line_count * ROW_LINE_H + ROW_PAD)


def advice_box_height(line_count: int) -> float:
    return line_count * ADVICE_LINE_H + ADVICE_PAD


def row_line_capacity() -> int:
    """Most value lines a single table row can hold on an empty page."""
    return math.floor((FRAME.usable_height - ROW_PAD) / ROW_LINE_H)


def advice_line_capacity() -> int:
    return math.floor((FRAME.usable_height - ADVICE_PAD) / ADVICE_LINE_H)


def table_rows(report: MaintenanceReport) -> list[tuple[str, str]]:
    return [
        ("통지번호", report.notification_no),
        ("작업부서", report.work_dept or DEFAULT_DEPARTMENT),
        ("설비명칭", report.equipment_name),
        ("정비일시", f"{report.fail_date} {report.fail_time}"),
        ("고장발생경위", report.work_content),
        ("고장원인", report.cause),
        ("조치사항", report.action),
        ("조치상태", completion_label(report.is_completed)),
    ]


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LoadedImage:
    name: str
    reader: ImageReader
    width: int
    height: int


def _decode_image(attachment: Attachment) -> LoadedImage:
    try:
        reader = ImageReader(BytesIO(attachment.payload_bytes()))
        width, height = reader.getSize()
        reader.getRGBData()  # force a full decode so corrupt bodies fail here
    except Exception as exc:
        raise ImageInsertFailure(attachment.name, str(exc)) from exc
    return LoadedImage(name=attachment.name, reader=reader, width=width, height=height)


def load_report_images(report: MaintenanceReport) -> list[LoadedImage]:
    """Decode the record's image attachments, omitting any that fail."""
    images: list[LoadedImage] = []
    for attachment in report.image_attachments:
        try:
            images.append(_decode_image(attachment))
        except ImageInsertFailure as exc:
            LOGGER.warning("%s; omitting from report %s", exc, report.id)
    return images


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


def _table_blocks(report: MaintenanceReport, font: str) -> list[Block]:
    blocks: list[Block] = []
    for label, value in table_rows(report):
        lines = wrap_text(value or "-", font, FS_VALUE, VALUE_W - 2 * VALUE_PAD)
        for index, chunk in enumerate(chunk_lines(lines, row_line_capacity())):
            shown = label if index == 0 else label + CONTINUED_SUFFIX
            blocks.append(
                Block(kind="row", height=table_row_height(len(chunk)), payload=(shown, chunk))
            )
    return blocks


def _advice_blocks(report: MaintenanceReport, font: str) -> list[Block]:
    if not report.ai_insights:
        return []
    lines = wrap_text(report.ai_insights, font, FS_ADVICE, CONTENT_W - 10)
    chunks = chunk_lines(lines, advice_line_capacity())
    return [
        Block(
            kind="advice",
            height=advice_box_height(len(chunk)),
            gap_before=ADVICE_GAP if index == 0 else 0.0,
            gap_after=ADVICE_GAP if index == len(chunks) - 1 else 0.0,
            payload=(ADVICE_TITLE if index == 0 else ADVICE_TITLE + CONTINUED_SUFFIX, chunk),
        )
        for index, chunk in enumerate(chunks)
    ]


def _photo_blocks(images: Sequence[LoadedImage]) -> list[Block]:
    rows = [list(images[i : i + PHOTO_COLS]) for i in range(0, len(images), PHOTO_COLS)]
    blocks: list[Block] = []
    for index, row in enumerate(rows):
        first = index == 0
        last = index == len(rows) - 1
        blocks.append(
            Block(
                kind="photo_row",
                height=PHOTO_H + (PHOTO_HEADING_H if first else 0.0),
                gap_before=0.0 if first else PHOTO_GUTTER,
                gap_after=PHOTO_TAIL_GAP if last else 0.0,
                payload=(first, row),
            )
        )
    return blocks


def measure_report(
    report: MaintenanceReport, font: str, images: Sequence[LoadedImage]
) -> list[Block]:
    return [
        *_table_blocks(report, font),
        *_advice_blocks(report, font),
        *_photo_blocks(images),
    ]


def layout_report(
    report: MaintenanceReport, font: str, images: Sequence[LoadedImage]
) -> list[Placement]:
    return layout_blocks(measure_report(report, font, images), FRAME, TABLE_START)


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------


def _draw_header(c: Canvas, font: str) -> None:
    c.setFillColor(_hex(REPORT_COLORS["header_band"]))
    c.rect(0, _pt_y(HEADER_H), PAGE_W, HEADER_H * mm, stroke=0, fill=1)
    c.setFillColor(_hex(REPORT_COLORS["header_text"]))
    c.setFont(font, FS_TITLE)
    c.drawCentredString(PAGE_W / 2, _pt_y(HEADER_TITLE_BASELINE), REPORT_TITLE)


def _draw_row(c: Canvas, font: str, top: float, height: float, label: str, lines: list[str]) -> None:
    x = MARGIN * mm
    y = _pt_y(top + height)
    c.setLineWidth(0.2 * mm)
    c.setStrokeColor(_hex(REPORT_COLORS["table_border"]))
    c.setFillColor(_hex(REPORT_COLORS["label_bg"]))
    c.rect(x, y, LABEL_W * mm, height * mm, stroke=0, fill=1)
    c.rect(x, y, CONTENT_W * mm, height * mm, stroke=1, fill=0)
    c.line(x + LABEL_W * mm, y, x + LABEL_W * mm, y + height * mm)

    c.setFillColor(_hex(REPORT_COLORS["label_text"]))
    c.setFont(font, FS_LABEL)
    c.drawString(x + VALUE_PAD * mm, _pt_y(top + height / 2 + 1.2), label)

    c.setFillColor(_hex(REPORT_COLORS["value_text"]))
    c.setFont(font, FS_VALUE)
    baseline = top + ROW_FIRST_BASELINE
    for line in lines:
        c.drawString(x + (LABEL_W + VALUE_PAD) * mm, _pt_y(baseline), line)
        baseline += ROW_LINE_H


def _draw_advice(c: Canvas, font: str, top: float, height: float, title: str, lines: list[str]) -> None:
    x = MARGIN * mm
    c.setLineWidth(0.2 * mm)
    c.setStrokeColor(_hex(REPORT_COLORS["advice_border"]))
    c.setFillColor(_hex(REPORT_COLORS["advice_bg"]))
    c.rect(x, _pt_y(top + height), CONTENT_W * mm, height * mm, stroke=1, fill=1)

    c.setFillColor(_hex(REPORT_COLORS["advice_title"]))
    c.setFont(font, FS_ADVICE_TITLE)
    c.drawString(x + 5 * mm, _pt_y(top + 7), title)

    c.setFillColor(_hex(REPORT_COLORS["advice_text"]))
    c.setFont(font, FS_ADVICE)
    baseline = top + 14
    for line in lines:
        c.drawString(x + 5 * mm, _pt_y(baseline), line)
        baseline += ADVICE_LINE_H


def _draw_photo_row(
    c: Canvas, font: str, top: float, with_heading: bool, images: list[LoadedImage]
) -> None:
    img_top = top
    if with_heading:
        c.setFillColor(_hex(REPORT_COLORS["photo_heading"]))
        c.setFont(font, FS_PHOTO_HEADING)
        c.drawString(MARGIN * mm, _pt_y(top + 4), PHOTO_HEADING)
        img_top = top + PHOTO_HEADING_H
    for col, image in enumerate(images):
        cell_x = MARGIN + col * (PHOTO_W + PHOTO_GUTTER)
        cell_y = _pt_y(img_top + PHOTO_H)
        x, y, w, h = fit_rect_preserve_aspect(
            image.width,
            image.height,
            cell_x * mm,
            cell_y,
            PHOTO_W * mm,
            PHOTO_H * mm,
        )
        try:
            c.drawImage(image.reader, x, y, width=w, height=h)
        except Exception as exc:
            failure = ImageInsertFailure(image.name, str(exc))
            LOGGER.warning("%s; omitting from report", failure)
            continue
        c.setLineWidth(0.2 * mm)
        c.setStrokeColor(_hex(REPORT_COLORS["photo_border"]))
        c.rect(cell_x * mm, cell_y, PHOTO_W * mm, PHOTO_H * mm, stroke=1, fill=0)


def _draw_footer(
    c: Canvas,
    font: str,
    printed_at: str,
    record_page: int,
    record_pages: int,
    doc_page: int,
    doc_pages: int,
) -> None:
    y = _pt_y(PAGE_H_MM - FOOTER_OFFSET)
    c.setFillColor(_hex(REPORT_COLORS["footer_text"]))
    c.setFont(font, FS_FOOTER)
    c.drawString(MARGIN * mm, y, f"출력 일시: {printed_at}")
    c.drawRightString(
        PAGE_W - MARGIN * mm,
        y,
        footer_marker(record_page, record_pages, doc_page, doc_pages),
    )


def footer_marker(record_page: int, record_pages: int, doc_page: int, doc_pages: int) -> str:
    return (
        f"{record_page}/{record_pages} · Page {doc_page} of {doc_pages} | {SYSTEM_LABEL}"
    )


def _draw_placement(c: Canvas, font: str, placement: Placement) -> None:
    block = placement.block
    if block.kind == "row":
        label, lines = block.payload
        _draw_row(c, font, placement.top, block.height, label, lines)
    elif block.kind == "advice":
        title, lines = block.payload
        _draw_advice(c, font, placement.top, block.height, title, lines)
    elif block.kind == "photo_row":
        with_heading, images = block.payload
        _draw_photo_row(c, font, placement.top, with_heading, images)
    else:
        raise ValueError(f"Unknown layout block kind: {block.kind!r}")


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def build_reports_pdf(
    reports: Sequence[MaintenanceReport],
    font_bytes: bytes,
    *,
    printed_at: datetime | None = None,
    font_family: str = DEFAULT_FONT_FAMILY,
) -> bytes:
    """Build one PDF containing every record in *reports*, in order."""
    try:
        return _build_canvas_pdf(reports, font_bytes, printed_at or datetime.now(), font_family)
    except AssetUnavailable:
        raise
    except Exception as exc:
        LOGGER.error("PDF generation failed.", exc_info=True)
        raise GenericRenderFailure("PDF generation failed") from exc


def _build_canvas_pdf(
    reports: Sequence[MaintenanceReport],
    font_bytes: bytes,
    printed_at: datetime,
    font_family: str,
) -> bytes:
    if not reports:
        raise ValueError("No reports to render")
    font = register_glyph_font(font_bytes, font_family)
    layouts = [layout_report(r, font, load_report_images(r)) for r in reports]
    pages_per_record = [page_count(placements) for placements in layouts]
    doc_pages = sum(pages_per_record)
    printed_text = format_printed_at(printed_at)

    buf = BytesIO()
    c = Canvas(buf, pagesize=PAGE_SIZE)
    c.setTitle(REPORT_TITLE)
    c.setAuthor(SYSTEM_LABEL)
    c.setSubject(f"maintreport {__version__}")

    doc_page = 0
    for placements, record_pages in zip(layouts, pages_per_record, strict=True):
        for record_page in range(record_pages):
            doc_page += 1
            if record_page == 0:
                _draw_header(c, font)
            for placement in placements:
                if placement.page == record_page:
                    _draw_placement(c, font, placement)
            _draw_footer(
                c, font, printed_text, record_page + 1, record_pages, doc_page, doc_pages
            )
            c.showPage()

    c.save()
    return buf.getvalue()
