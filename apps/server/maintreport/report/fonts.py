"""Glyph-set (TTF) resolution for the PDF renderer.

The Hangul-capable font is not shipped with the package.  It is fetched once
per process from an ordered list of HTTPS mirrors and kept in memory for the
lifetime of the owning :class:`GlyphAssetCache`.  Concurrent first-time
callers share a single in-flight resolution; a failed resolution is not
cached, so a later call walks the mirror list again.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections.abc import Callable, Sequence
from io import BytesIO
from threading import Lock
from urllib.request import Request, urlopen

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFontFile

from ..errors import AssetUnavailable

LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "NanumGothic"
DEFAULT_FONT_SOURCES: tuple[str, ...] = (
    "https://raw.githubusercontent.com/google/fonts/main/ofl/nanumgothic/NanumGothic-Regular.ttf",
    "https://cdn.jsdelivr.net/gh/googlefonts/nanumgothic@main/fonts/NanumGothic-Regular.ttf",
    "https://github.com/googlefonts/nanumgothic/raw/main/fonts/NanumGothic-Regular.ttf",
)
DEFAULT_FETCH_TIMEOUT_S = 4.0
_MAX_FONT_BYTES = 32 * 1024 * 1024
_READ_CHUNK = 64 * 1024

FontFetcher = Callable[[str, float], bytes]


def _validate_url(url: str) -> None:
    if not url.startswith("https://"):
        raise ValueError(f"Refusing non-HTTPS URL for font download: {url}")


def fetch_font_bytes(url: str, timeout_s: float) -> bytes:
    """Blocking GET of *url* bounded by a total *timeout_s* deadline.

    Raises on HTTP errors, timeouts or oversize bodies.
    """
    _validate_url(url)
    deadline = time.monotonic() + timeout_s
    req = Request(url, headers={"Accept": "application/octet-stream", "Cache-Control": "no-cache"})
    chunks: list[bytes] = []
    size = 0
    with urlopen(req, timeout=timeout_s) as resp:
        while True:
            if time.monotonic() > deadline:
                raise TimeoutError(f"Font download from {url} exceeded {timeout_s:.1f}s")
            chunk = resp.read(_READ_CHUNK)
            if not chunk:
                break
            size += len(chunk)
            if size > _MAX_FONT_BYTES:
                raise ValueError(f"Font download from {url} exceeds {_MAX_FONT_BYTES} bytes")
            chunks.append(chunk)
    return b"".join(chunks)


def check_font_bytes(data: bytes) -> None:
    """Raise ``ValueError`` unless *data* parses as a TrueType font."""
    if not data:
        raise ValueError("empty body")
    try:
        TTFontFile(BytesIO(data), validate=0)
    except Exception as exc:
        raise ValueError(f"not a usable TrueType font ({exc})") from exc


class GlyphAssetCache:
    """Single-flight, process-lifetime cache of the renderer's glyph set."""

    def __init__(
        self,
        sources: Sequence[str] = DEFAULT_FONT_SOURCES,
        *,
        timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
        fetcher: FontFetcher = fetch_font_bytes,
    ) -> None:
        self._sources = tuple(sources)
        self._timeout_s = timeout_s
        self._fetcher = fetcher
        self._asset: bytes | None = None
        self._inflight: asyncio.Task[bytes] | None = None
        self.resolution_count = 0

    @property
    def cached(self) -> bytes | None:
        return self._asset

    async def get_glyph_asset(self) -> bytes:
        """Return the glyph set, resolving it on first use.

        Raises :class:`AssetUnavailable` when every source fails.
        """
        if self._asset is not None:
            return self._asset
        task = self._inflight
        if task is None:
            task = asyncio.get_running_loop().create_task(self._resolve())
            task.add_done_callback(self._release_inflight)
            self._inflight = task
        # Shielded so one abandoned waiter does not cancel the shared attempt.
        return await asyncio.shield(task)

    def _release_inflight(self, task: asyncio.Task[bytes]) -> None:
        if self._inflight is task:
            self._inflight = None

    def _fetch_checked(self, url: str) -> bytes:
        data = self._fetcher(url, self._timeout_s)
        check_font_bytes(data)
        return data

    async def _fetch_one(self, url: str) -> bytes:
        return await asyncio.wait_for(
            asyncio.to_thread(self._fetch_checked, url),
            timeout=self._timeout_s,
        )

    async def _resolve(self) -> bytes:
        self.resolution_count += 1
        for url in self._sources:
            try:
                data = await self._fetch_one(url)
            except TimeoutError:
                LOGGER.warning("Font source timed out after %.1fs: %s", self._timeout_s, url)
                continue
            except Exception as exc:
                LOGGER.warning("Font source failed: %s (%s)", url, exc)
                continue
            self._asset = data
            LOGGER.info("Loaded report font from %s (%d bytes)", url, len(data))
            return data
        LOGGER.error("All %d font source(s) failed; PDF rendering unavailable", len(self._sources))
        raise AssetUnavailable("폰트 로드 실패. 네트워크를 확인하세요.")


# ---------------------------------------------------------------------------
# reportlab registration
# ---------------------------------------------------------------------------

_registered_fonts: dict[str, str] = {}
_registration_lock = Lock()


def register_glyph_font(font_bytes: bytes, family: str = DEFAULT_FONT_FAMILY) -> str:
    """Register *font_bytes* with reportlab and return the font name to use.

    Registration is keyed by content digest so differing payloads never
    shadow one another under the same name.
    """
    digest = hashlib.sha1(font_bytes).hexdigest()[:10]
    key = f"{family}:{digest}"
    with _registration_lock:
        name = _registered_fonts.get(key)
        if name is None:
            name = f"{family}-{digest}"
            pdfmetrics.registerFont(TTFont(name, BytesIO(font_bytes)))
            _registered_fonts[key] = name
        return name
