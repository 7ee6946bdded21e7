"""maintreport.report – paginated PDF rendering of maintenance reports."""

from .fonts import GlyphAssetCache, register_glyph_font
from .pdf_builder import build_reports_pdf
from .pdf_document import RenderedDocument, document_filename, render_reports

__all__ = [
    "GlyphAssetCache",
    "RenderedDocument",
    "build_reports_pdf",
    "document_filename",
    "register_glyph_font",
    "render_reports",
]
