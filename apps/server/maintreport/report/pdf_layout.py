"""Pure vertical layout for the paginated report.

Offsets are millimetres measured down from the top edge of the page.  A
record's content is a sequence of :class:`Block` heights; placing them is a
left fold of :func:`place_block` over that sequence, so no drawing code ever
tracks a running cursor.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import reduce
from typing import Any


@dataclass(frozen=True, slots=True)
class PageFrame:
    page_height: float
    continuation_top: float
    bottom_margin: float

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.bottom_margin

    @property
    def usable_height(self) -> float:
        return self.bottom_limit - self.continuation_top


@dataclass(frozen=True, slots=True)
class Block:
    kind: str
    height: float
    gap_before: float = 0.0
    gap_after: float = 0.0
    payload: Any = None


@dataclass(frozen=True, slots=True)
class Placement:
    block: Block
    page: int  # zero-based, relative to the record
    top: float


@dataclass(frozen=True, slots=True)
class _FoldState:
    page: int
    offset: float
    placements: tuple[Placement, ...]


def place_block(offset: float, height: float, frame: PageFrame) -> tuple[float, bool]:
    """Return ``(top, page_break)`` for a block of *height* requested at *offset*.

    A block that would cross the bottom limit moves to the top of a new page.
    A block already at the top of a page is never pushed again.
    """
    if offset + height > frame.bottom_limit and offset > frame.continuation_top:
        return frame.continuation_top, True
    return offset, False


def _advance(state: _FoldState, block: Block, frame: PageFrame) -> _FoldState:
    top, page_break = place_block(state.offset + block.gap_before, block.height, frame)
    page = state.page + 1 if page_break else state.page
    return _FoldState(
        page=page,
        offset=top + block.height + block.gap_after,
        placements=(*state.placements, Placement(block=block, page=page, top=top)),
    )


def layout_blocks(
    blocks: Iterable[Block],
    frame: PageFrame,
    start_offset: float,
) -> list[Placement]:
    initial = _FoldState(page=0, offset=start_offset, placements=())
    final = reduce(lambda state, block: _advance(state, block, frame), blocks, initial)
    return list(final.placements)


def page_count(placements: Sequence[Placement]) -> int:
    return max((p.page for p in placements), default=0) + 1


def chunk_lines(lines: Sequence[str], max_lines: int) -> list[list[str]]:
    """Split *lines* into runs that each fit on an otherwise empty page."""
    size = max(1, max_lines)
    if not lines:
        return [[]]
    return [list(lines[i : i + size]) for i in range(0, len(lines), size)]


def fit_rect_preserve_aspect(
    src_w: float,
    src_h: float,
    box_x: float,
    box_y: float,
    box_w: float,
    box_h: float,
) -> tuple[float, float, float, float]:
    """Return (x, y, w, h) fitted inside box while preserving src aspect."""
    if src_w <= 0 or src_h <= 0:
        return box_x, box_y, box_w, box_h
    src_ratio = src_w / src_h
    box_ratio = box_w / box_h if box_h else src_ratio
    if box_ratio > src_ratio:
        h = box_h
        w = h * src_ratio
        x = box_x + (box_w - w) / 2
        y = box_y
    else:
        w = box_w
        h = w / src_ratio
        x = box_x
        y = box_y + (box_h - h) / 2
    return x, y, w, h
