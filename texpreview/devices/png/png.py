# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
PNG Render Target

An off-screen rendering target: consumes outbound protocol messages, paints
each requested page with the shared Cairo renderer, writes it as
``<base>-<page:04d>.png`` and queues the ``pageRendered`` acknowledgement
for the host to hand back to the session.
"""

import logging
import os

import cairo

from ...core import messages
from ...core import types as tp
from ...core.glyph_cache import GlyphBitmapCache
from ..common.cairo_renderer import render_page

logger = logging.getLogger(__name__)

# Anti-aliasing mode for Cairo rendering (also used by the glyph bitmap cache).
ANTIALIAS_MODE = cairo.ANTIALIAS_GRAY

ANTIALIAS_MAP = {
    "none": cairo.ANTIALIAS_NONE,
    "fast": cairo.ANTIALIAS_FAST,
    "good": cairo.ANTIALIAS_GOOD,
    "best": cairo.ANTIALIAS_BEST,
    "gray": cairo.ANTIALIAS_GRAY,
    "subpixel": cairo.ANTIALIAS_SUBPIXEL,
}


class PngRenderTarget:
    """
    Rendering target writing one PNG per rendered page.

    Args:
        output_dir: Directory the PNG files are written to
        base_name: File name prefix
        image_dir: Directory image references are relative to
        page_filter: 1-based page numbers to write; None writes all. Pages
            outside the filter are still acknowledged.
        antialias: Key of ANTIALIAS_MAP
    """

    def __init__(self, output_dir: str = tp.OUTPUT_DIRECTORY, base_name: str = "page",
                 image_dir: str = ".", page_filter: set[int] | None = None,
                 antialias: str = "gray") -> None:
        self.output_dir = output_dir
        self.base_name = base_name
        self.image_dir = image_dir
        self.page_filter = page_filter
        self.antialias = ANTIALIAS_MAP.get(antialias, ANTIALIAS_MODE)
        self.bitmap_cache = GlyphBitmapCache()
        self.page_count = 0
        self.margin = 0
        self.page_width = 0
        self.page_height = 0
        self.page_gap = 0
        self.scroll_position: float | None = None
        self.written: list[str] = []
        self._inbox: list[dict] = []

    def post_message(self, message: dict) -> None:
        kind = message.get("type")
        value = message.get("value", {})
        if kind == tp.MSG_INIT_CANVAS:
            self.page_count = value["pageCount"]
            self.margin = value["marginPixels"]
            self.page_width = value["pageWidth"]
            self.page_height = value["pageHeight"]
            self.page_gap = value["pageGap"]
        elif kind == tp.MSG_RESET_GLYPH_BITMAPS:
            self.bitmap_cache.clear()
        elif kind == tp.MSG_RENDER_PAGE:
            self._render(value)
        elif kind == tp.MSG_SCROLL:
            self.scroll_position = value["vPos"]
        else:
            logger.debug("Ignoring message type %r", kind)

    def _render(self, value: dict) -> None:
        page_index = value["pageIndex"]
        if self.page_filter is None or page_index + 1 in self.page_filter:
            os.makedirs(self.output_dir, exist_ok=True)
            surface = cairo.ImageSurface(cairo.FORMAT_RGB24, self.page_width, self.page_height)
            cc = cairo.Context(surface)
            cc.set_antialias(self.antialias)
            render_page(cc, value, self.page_width, self.page_height, self.margin,
                        self.bitmap_cache, self.image_dir)
            output_file = os.path.join(self.output_dir, f"{self.base_name}-{page_index + 1:04d}.png")
            surface.write_to_png(output_file)
            self.written.append(output_file)
            logger.info("Wrote %s", output_file)
        self._inbox.append(messages.page_rendered(page_index))

    def take_inbound(self) -> list[dict]:
        """Remove and return queued inbound messages."""
        inbound = self._inbox
        self._inbox = []
        return inbound
