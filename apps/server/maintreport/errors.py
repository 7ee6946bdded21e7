"""Failure taxonomy for the interchange and rendering pipeline.

Row-level coercion problems during import are never raised; they are
normalised by :mod:`maintreport.spreadsheet.coercion`.
"""

from __future__ import annotations


class MaintReportError(Exception):
    """Base class for pipeline failures surfaced to callers."""


class ParseError(MaintReportError):
    """The uploaded file could not be decoded as a spreadsheet container."""


class AssetUnavailable(MaintReportError):
    """Every glyph-set source was exhausted; rendering cannot proceed."""


class ImageInsertFailure(MaintReportError):
    """A single attachment could not be decoded or drawn.

    Recovered locally by the renderer, which omits the image.
    """

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Image attachment {name!r} could not be inserted: {reason}")
        self.name = name
        self.reason = reason


class GenericRenderFailure(MaintReportError):
    """Unexpected condition during document layout."""
