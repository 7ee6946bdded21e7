"""Shared test helpers for the maintreport test suite."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
import reportlab

from maintreport.report.fonts import GlyphAssetCache

# reportlab ships Bitstream Vera; good enough to exercise TTF embedding offline.
FIXTURE_FONT_PATH = Path(reportlab.__file__).resolve().parent / "fonts" / "Vera.ttf"
FIXTURE_FONT = FIXTURE_FONT_PATH.read_bytes()

FIXTURE_SOURCES = ("https://fonts.example.test/a.ttf", "https://fonts.example.test/b.ttf")


# ---------------------------------------------------------------------------
# PDF text extraction helper
# ---------------------------------------------------------------------------


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF byte string using pypdf."""
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(pdf_bytes))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def extract_pdf_pages(pdf_bytes: bytes) -> list[str]:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(pdf_bytes))
    return [page.extract_text() or "" for page in reader.pages]


# ---------------------------------------------------------------------------
# Font cache fixtures
# ---------------------------------------------------------------------------


def offline_font_cache(font: bytes = FIXTURE_FONT) -> GlyphAssetCache:
    """A cache whose every source answers with *font* without touching the network."""
    return GlyphAssetCache(FIXTURE_SOURCES, timeout_s=2.0, fetcher=lambda _url, _t: font)


def failing_font_cache() -> GlyphAssetCache:
    def _fail(url: str, _timeout: float) -> bytes:
        raise OSError(f"unreachable: {url}")

    return GlyphAssetCache(FIXTURE_SOURCES, timeout_s=2.0, fetcher=_fail)


@pytest.fixture
def font_cache() -> GlyphAssetCache:
    return offline_font_cache()
