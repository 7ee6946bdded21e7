from __future__ import annotations

import pytest

from maintreport.report.pdf_layout import (
    Block,
    PageFrame,
    chunk_lines,
    fit_rect_preserve_aspect,
    layout_blocks,
    page_count,
    place_block,
)

FRAME = PageFrame(page_height=297.0, continuation_top=20.0, bottom_margin=20.0)


def test_frame_limits() -> None:
    assert FRAME.bottom_limit == pytest.approx(277.0)
    assert FRAME.usable_height == pytest.approx(257.0)


def test_place_block_fits_on_current_page() -> None:
    assert place_block(45.0, 100.0, FRAME) == (45.0, False)
    # Exactly touching the limit still fits.
    assert place_block(177.0, 100.0, FRAME) == (177.0, False)


def test_place_block_breaks_when_crossing_limit() -> None:
    assert place_block(200.0, 100.0, FRAME) == (20.0, True)


def test_block_at_page_top_is_never_pushed_again() -> None:
    assert place_block(20.0, 400.0, FRAME) == (20.0, False)


def test_layout_is_left_fold_with_gaps() -> None:
    blocks = [
        Block("row", 10.0),
        Block("advice", 30.0, gap_before=10.0, gap_after=10.0),
        Block("row", 10.0),
    ]
    placements = layout_blocks(blocks, FRAME, 45.0)
    assert [(p.page, p.top) for p in placements] == [(0, 45.0), (0, 65.0), (0, 105.0)]
    assert page_count(placements) == 1


def test_layout_carries_to_following_pages() -> None:
    blocks = [Block("row", 200.0), Block("row", 200.0), Block("row", 60.0)]
    placements = layout_blocks(blocks, FRAME, 45.0)
    assert [(p.page, p.top) for p in placements] == [(0, 45.0), (1, 20.0), (2, 20.0)]
    assert page_count(placements) == 3


def test_page_count_of_empty_layout_is_one() -> None:
    assert page_count([]) == 1


def test_chunk_lines() -> None:
    assert chunk_lines([], 3) == [[]]
    assert chunk_lines(["a", "b", "c", "d"], 3) == [["a", "b", "c"], ["d"]]
    assert chunk_lines(["a"], 0) == [["a"]]


def test_fit_rect_preserve_aspect_letterboxes_wide_images() -> None:
    x, y, w, h = fit_rect_preserve_aspect(200, 100, 0, 0, 100, 100)
    assert (w, h) == (100, 50)
    assert (x, y) == (0, 25)


def test_fit_rect_preserve_aspect_pillarboxes_tall_images() -> None:
    x, y, w, h = fit_rect_preserve_aspect(100, 200, 0, 0, 100, 100)
    assert (w, h) == (50, 100)
    assert (x, y) == (25, 0)
