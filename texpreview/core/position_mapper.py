# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Bidirectional Position Mapper

Converts a source line into a vertical position on the rendered document
strip (forward sync) and a scroll position back into a source line (reverse
sync). Pages are laid out top to bottom, ``page_height + page_gap`` apart,
and page content is shifted down by the trace's Y offset (or by one inch,
``dpi`` pixels, when the trace declares none).

Forward selection among the hbox blocks of a line:
    leftmost   - first block with the smallest ``left``
    bottommost - first block with the greatest ``y_offset + page_top + bottom``
    chosen     - bottommost if it shares the leftmost's ``left``, else leftmost

Lines with no hbox block fall back to the second glue element of the line,
biased up by GLUE_BASELINE_BIAS pixels.

Reverse sync only accepts exact matches on ``bottom``, walking ``y`` down to
zero; it never approximates.

Each direction can be locked for exactly one call so that a scroll caused by
forward sync does not move the cursor, and vice versa.
"""

import logging
import math

from . import types as tp

logger = logging.getLogger(__name__)


class PositionMapper:

    def __init__(self, index: tp.SyncIndex | None, page_height: int, page_gap: int, dpi: int) -> None:
        self.index = index
        self.page_height = page_height
        self.page_gap = page_gap
        self.dpi = dpi
        self.reverse_locked = False
        self.forward_locked = False

    @property
    def stride(self) -> int:
        return self.page_height + self.page_gap

    @property
    def y_offset(self) -> int:
        if self.index is None:
            return self.dpi
        return self.index.offset.y or self.dpi

    def page_top(self, page: int) -> int:
        """Top of a 1-based page on the document strip."""
        return (page - 1) * self.stride

    def page_index_for(self, v_pos: float) -> int:
        """0-based page index containing a strip position."""
        return math.floor(v_pos / self.stride)

    def select_block(self, blocks: list[tp.PositionBlock]) -> tp.PositionBlock | None:
        """Pick the anchor among the hbox blocks of one line."""
        leftmost = None
        bottommost = None
        max_y = 0
        for block in blocks:
            if block.width <= 0 or block.height <= 0:
                continue
            if leftmost is None or block.left < leftmost.left:
                leftmost = block
            y = self.y_offset + self.page_top(block.page) + block.bottom
            if y > max_y:
                max_y = y
                bottommost = block

        if bottommost is not None and bottommost.left == leftmost.left:
            return bottommost
        return leftmost

    def forward(self, line: int) -> float | None:
        """
        Strip position for a source line.

        Returns:
            Target scroll position, 0 for line 1 and above, or None when the
            line has no usable block.
        """
        if line <= 1:
            return 0
        if self.index is None:
            return None

        hboxes = self.index.blocks_for_line(line, tp.BLOCK_HBOX)
        if hboxes:
            block = self.select_block(hboxes)
            if block is None:
                return None
            return self.y_offset + self.page_top(block.page) + (block.bottom - block.height)

        glue = self.index.blocks_for_line(line, tp.BLOCK_GLUE)
        if len(glue) < 2:
            return None
        block = glue[1]
        return self.y_offset + self.page_top(block.page) + (block.bottom - tp.GLUE_BASELINE_BIAS)

    def reverse(self, scroll_y: float) -> int | None:
        """Source line whose block bottom sits exactly at, or nearest above, ``scroll_y``.

        The search stays on the page containing ``scroll_y``; None if no
        block on that page lies between the page content top and
        ``scroll_y``.
        """
        if self.index is None:
            return None
        page_index = self.page_index_for(scroll_y)
        y = math.floor(scroll_y - (page_index * self.stride + self.y_offset))
        block = self.index.nearest_block_at_or_above(page_index + 1, y)
        if block is None:
            return None
        return block.source_line

    def lock_reverse(self) -> None:
        """Ignore the line lookup of the next reverse sync."""
        self.reverse_locked = True

    def lock_forward(self) -> None:
        """Ignore the next forward sync."""
        self.forward_locked = True

    def consume_reverse_lock(self) -> bool:
        locked = self.reverse_locked
        self.reverse_locked = False
        return locked

    def consume_forward_lock(self) -> bool:
        locked = self.forward_locked
        self.forward_locked = False
        return locked
