# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
SyncTeX Index Builder

Builds a SyncIndex from the text of a SyncTeX trace file, keeping only the
blocks that belong to one source file.

Units:
    Trace coordinates are TeX scaled points. They are converted to device
    pixels with ``round(value / unit)`` where

        unit = 65781.76 * (72 / dpi) * (100 / magnification)

    Rounding is half-up (``floor(v + 0.5)``), not Python's round-half-even.

Retained blocks:
    - hbox records ``(`` on an open page with a non-zero line number and a
      non-zero converted width and height
    - glue elements ``g`` on an open page with a non-zero line number; the
      optional trailing field becomes the width, height and depth are 0

vbox records are recognised and dropped. Malformed lines are skipped.
"""

import logging
import math
import os

from . import types as tp
from .error import SyncTexError
from .synctex_tokenizer import (
    ElementRecord, HBoxRecord, InputRecord, OffsetRecord, PageCloseRecord,
    PageOpenRecord, VBoxRecord, tokenize_line,
)

logger = logging.getLogger(__name__)


def synctex_unit(dpi: float, magnification: float) -> float:
    """Native trace units per device pixel."""
    return tp.SYNCTEX_UNITS_PER_PIXEL * (72 / dpi) * (100 / magnification)


def to_pixels(value: int, unit: float) -> int:
    """Convert native units to device pixels, rounding halves up."""
    return math.floor(value / unit + 0.5)


def normalize_path(path: str) -> str:
    return os.path.normcase(os.path.normpath(os.path.abspath(path)))


def parse_blocks(trace_text: str, source_file_name: str, dpi: float,
                 magnification: float,
                 base_dir: str | None = None) -> tuple[tp.Offset, list[tp.PositionBlock]]:
    """Parse trace text into the offset and the retained blocks in emission order.

    The first line (the version banner) is skipped. Relative input paths
    are taken relative to ``base_dir`` when given.
    """
    unit = synctex_unit(dpi, magnification)
    target = normalize_path(source_file_name)
    offset_x = 0
    offset_y = 0
    current_page: int | None = None
    file_num: int | None = None
    blocks: list[tp.PositionBlock] = []
    skipped = 0

    lines = trace_text.split("\n")
    for line in lines[1:]:
        try:
            record = tokenize_line(line)
        except ValueError:
            skipped += 1
            continue
        if record is None:
            continue

        if isinstance(record, InputRecord):
            path = record.path
            if base_dir is not None:
                path = os.path.join(base_dir, path)
            if normalize_path(path) == target:
                file_num = record.file_num
        elif isinstance(record, OffsetRecord):
            # later occurrences overwrite earlier ones
            if record.axis == "x":
                offset_x = to_pixels(record.value, unit)
            else:
                offset_y = to_pixels(record.value, unit)
        elif isinstance(record, PageOpenRecord):
            current_page = record.page
        elif isinstance(record, PageCloseRecord):
            current_page = None
        elif isinstance(record, VBoxRecord):
            continue
        elif isinstance(record, HBoxRecord):
            if not current_page or record.file_num != file_num or not record.line:
                continue
            block = tp.PositionBlock(
                kind=tp.BLOCK_HBOX,
                page=current_page,
                source_line=record.line,
                left=to_pixels(record.left, unit),
                bottom=to_pixels(record.bottom, unit),
                width=to_pixels(record.width, unit),
                height=to_pixels(record.height, unit),
                depth=to_pixels(record.depth, unit),
            )
            # degenerate boxes are not source-attributable
            if block.width != 0 and block.height != 0:
                blocks.append(block)
        elif isinstance(record, ElementRecord):
            if record.kind != tp.BLOCK_GLUE:
                continue
            if not current_page or record.file_num != file_num or not record.line:
                continue
            blocks.append(tp.PositionBlock(
                kind=tp.BLOCK_GLUE,
                page=current_page,
                source_line=record.line,
                left=to_pixels(record.left, unit),
                bottom=to_pixels(record.bottom, unit),
                width=to_pixels(record.extra, unit) if record.extra is not None else 0,
                height=0,
                depth=0,
            ))

    if skipped:
        logger.debug("Skipped %d malformed trace lines", skipped)
    if file_num is None:
        logger.warning("Source file %s not listed in trace inputs", source_file_name)
    return tp.Offset(offset_x, offset_y), blocks


def build(trace_text: str, source_file_name: str, dpi: float, magnification: float,
          page_height: int | None = None, page_gap: int = tp.DEFAULT_PAGE_GAP,
          page_size: str = tp.DEFAULT_PAGE_SIZE, base_dir: str | None = None) -> tp.SyncIndex:
    """
    Build the sync index for one source file.

    Args:
        trace_text: Full text of the SyncTeX trace file
        source_file_name: Source file whose blocks are retained
        dpi: Device resolution
        magnification: Magnification in percent
        page_height: Page height in device pixels; derived from ``page_size``
            when omitted
        page_gap: Vertical gap between pages in device pixels
        page_size: Named page size used when ``page_height`` is omitted
        base_dir: Directory of the trace file; relative input paths are
            resolved against it instead of the working directory

    Returns:
        SyncIndex with blocks sorted by source line and by document position.

    Raises:
        SyncTexError: If the trace cannot be parsed at all.
    """
    if page_height is None:
        page_height = tp.page_pixel_size(page_size, dpi, magnification)[1]
    stride = page_height + page_gap

    try:
        offset, blocks = parse_blocks(trace_text, source_file_name, dpi, magnification,
                                     base_dir)
    except Exception as exc:
        raise SyncTexError(f"Could not parse synctex data: {exc}") from exc

    # sorted() is stable: equal keys keep emission order
    by_line = tuple(sorted(blocks, key=lambda b: b.source_line))
    by_position = tuple(sorted(by_line, key=lambda b: b.page * stride + b.bottom))

    logger.debug("Sync index for %s: %d blocks, offset (%d, %d)",
                 source_file_name, len(by_line), offset.x, offset.y)
    return tp.SyncIndex(
        offset=offset,
        blocks_by_line=by_line,
        blocks_by_position=by_position,
        page_stride=stride,
        source_file=source_file_name,
    )
