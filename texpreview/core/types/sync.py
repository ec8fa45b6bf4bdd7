# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Sync index types.

A PositionBlock is one retained record from a SyncTeX trace file, already
converted to device pixels. The SyncIndex owns every block of one trace and
exposes them in two orders: by source line (forward sync) and by position
on the continuous multi-page strip (reverse sync).
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

__all__ = ["Offset", "PositionBlock", "SyncIndex"]


@dataclass(frozen=True)
class Offset:
    """Device-pixel origin offset applied to all page content."""
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class PositionBlock:
    """One parsed trace block in device pixels."""
    kind: str          # BLOCK_HBOX or BLOCK_GLUE
    page: int          # 1-based
    source_line: int
    left: int
    bottom: int
    width: int
    height: int
    depth: int


@dataclass
class SyncIndex:
    """Result of parsing one trace file for one source file.

    Both views reference the same block objects. ``page_stride`` is the
    page height plus the inter-page gap used for the positional ordering.
    """
    offset: Offset
    blocks_by_line: tuple[PositionBlock, ...]
    blocks_by_position: tuple[PositionBlock, ...]
    page_stride: int = 0
    source_file: str = ""
    _line_lookup: dict[int, list[PositionBlock]] = field(
        default_factory=dict, init=False, repr=False, compare=False)
    _page_lookup: dict[int, tuple[list[int], dict[int, PositionBlock]]] = field(
        default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for block in self.blocks_by_line:
            self._line_lookup.setdefault(block.source_line, []).append(block)

        first_at: dict[int, dict[int, PositionBlock]] = {}
        for block in self.blocks_by_position:
            # first block in positional order wins for a given (page, bottom)
            first_at.setdefault(block.page, {}).setdefault(block.bottom, block)
        for page, bottoms in first_at.items():
            self._page_lookup[page] = (sorted(bottoms), bottoms)

    def __len__(self) -> int:
        return len(self.blocks_by_line)

    def blocks_for_line(self, line: int, kind: str | None = None) -> list[PositionBlock]:
        """Blocks attributed to ``line`` in emission order, optionally by kind."""
        blocks = self._line_lookup.get(line, [])
        if kind is None:
            return list(blocks)
        return [b for b in blocks if b.kind == kind]

    def block_at(self, page: int, bottom: int) -> PositionBlock | None:
        """Exact (page, bottom) match, or None."""
        entry = self._page_lookup.get(page)
        if entry is None:
            return None
        return entry[1].get(bottom)

    def nearest_block_at_or_above(self, page: int, y: int) -> PositionBlock | None:
        """Block with the greatest bottom in ``[0, y]`` on ``page``.

        A negative ``y`` only ever matches exactly, mirroring a downward
        search that stops at zero.
        """
        entry = self._page_lookup.get(page)
        if entry is None:
            return None
        bottoms, first_at = entry
        if y < 0:
            return first_at.get(y)
        pos = bisect.bisect_right(bottoms, y) - 1
        if pos < 0 or bottoms[pos] < 0:
            return None
        return first_at[bottoms[pos]]
