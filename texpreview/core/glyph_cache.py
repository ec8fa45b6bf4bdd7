# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Glyph Path Cache

Turns the glyph references of a page into positioned vector paths. Outline
extraction is the expensive step, so every extracted outline is cached and
reused for the rest of the document session.

Architecture:
- GlyphPathCache: content-addressed map of GlyphKey -> GlyphPathEntry
- to_path_data(): serializes a glyph Path into SVG path data
- resolve(): per-page lookup producing GlyphPlacement records
- GlyphBitmapCache: LRU cache of rasterized glyphs for Cairo render targets

Cache Key Design:
- font_num: page-local font number assigned by the decoder
- glyph_index: glyph index within that font
- size: rendered size in device pixels

Path entries never go stale while the font set is unchanged, so the path
cache has no eviction. The session clears the cache when the active source document
changes.

Placement arithmetic for a glyph at rendered size ``sz``::

    conv     = sz / (unitsPerEm or 1000)
    x_origin = floor(lsb * conv)
    baseline = ceil(bbox.y2 * conv)
    path     = outline drawn at (-x_origin, baseline)
    position = (x + x_origin, y - baseline)
"""

import logging
import math
from collections import OrderedDict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from . import types as tp

logger = logging.getLogger(__name__)


def _format_number(value: float, decimals: int) -> str:
    if value == round(value):
        return str(int(round(value)))
    return f"{value:.{decimals}f}"


def to_path_data(path: tp.Path, decimals: int = tp.PATH_DATA_DECIMALS) -> str:
    """Serialize a glyph outline to SVG path data.

    Commands are concatenated without separators, arguments are separated by
    single spaces, and integral values print without a fractional part::

        M10 0L10 12.50Q4 20 0 12.50Z

    Args:
        path: Path made of SubPaths of MoveTo/LineTo/QuadTo/CurveTo/ClosePath
        decimals: Fractional digits for non-integral coordinates

    Returns:
        Path data string, empty for an outline with no elements.
    """
    def fmt(*points: tp.Point) -> str:
        return " ".join(f"{_format_number(p.x, decimals)} {_format_number(p.y, decimals)}"
                        for p in points)

    parts = []
    for subpath in path:
        for element in subpath:
            if isinstance(element, tp.MoveTo):
                parts.append("M" + fmt(element.p))
            elif isinstance(element, tp.LineTo):
                parts.append("L" + fmt(element.p))
            elif isinstance(element, tp.QuadTo):
                parts.append("Q" + fmt(element.p1, element.p2))
            elif isinstance(element, tp.CurveTo):
                parts.append("C" + fmt(element.p1, element.p2, element.p3))
            elif isinstance(element, tp.ClosePath):
                parts.append("Z")
    return "".join(parts)


class GlyphPathCache:
    """Cache of extracted glyph outlines.

    Glyphs whose outline is empty (spaces) get no entry; their keys are
    remembered separately so they are not extracted again either.
    """

    def __init__(self) -> None:
        self._cache: dict[tp.GlyphKey, tp.GlyphPathEntry] = {}
        self._blank: set[tp.GlyphKey] = set()
        self._hits = 0
        self._misses = 0
        self.extractions = 0

    def get(self, key: tp.GlyphKey) -> tp.GlyphPathEntry | None:
        entry = self._cache.get(key)
        if entry is not None or key in self._blank:
            self._hits += 1
        else:
            self._misses += 1
        return entry

    def put(self, entry: tp.GlyphPathEntry) -> None:
        self._cache[entry.key] = entry

    def mark_blank(self, key: tp.GlyphKey) -> None:
        self._blank.add(key)

    def is_blank(self, key: tp.GlyphKey) -> bool:
        return key in self._blank

    def clear(self) -> None:
        """Clear entire cache and reset statistics."""
        self._cache.clear()
        self._blank.clear()
        self._hits = 0
        self._misses = 0
        self.extractions = 0

    def stats(self) -> dict:
        """Return cache statistics for debugging/profiling."""
        total = self._hits + self._misses
        return {
            'entries': len(self._cache),
            'blank': len(self._blank),
            'hits': self._hits,
            'misses': self._misses,
            'extractions': self.extractions,
            'hit_rate': self._hits / total if total > 0 else 0.0,
        }

    def __contains__(self, key: tp.GlyphKey) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def extract_entry(font: Any, font_num: int, glyph_index: int, size: float) -> tp.GlyphPathEntry | None:
    """Extract one glyph outline at ``size``; None when the outline is empty."""
    glyph = font.get_glyph(glyph_index)
    conv = size / (font.units_per_em or tp.DEFAULT_UNITS_PER_EM)
    x1, y1, x2, y2 = glyph.bounding_box()
    x_origin = math.floor((glyph.left_side_bearing or 0) * conv)
    baseline = math.ceil(y2 * conv)

    path_data = to_path_data(glyph.get_path(-x_origin, baseline, size))
    if not path_data.strip():
        return None

    return tp.GlyphPathEntry(
        font_num=font_num,
        glyph_index=glyph_index,
        size=size,
        path=path_data,
        width=math.ceil(x2 * conv) - math.floor(x1 * conv),
        height=math.ceil(y2 * conv) - math.floor(y1 * conv),
        x_origin=x_origin,
        baseline=baseline,
    )


def resolve(page_fonts: tp.Page | Iterable[tp.PageFont], loaded_fonts: Mapping[int, Any],
            cache: GlyphPathCache) -> tuple[list[tp.GlyphPlacement], GlyphPathCache]:
    """
    Resolve every glyph reference on a page into placements.

    Args:
        page_fonts: A Page, or its page-font list
        loaded_fonts: Font number -> loaded font; missing fonts are skipped
        cache: Cache to consult and extend in place

    Returns:
        (placements, cache) - placements in page-font/glyph/size/point order
    """
    if isinstance(page_fonts, tp.Page):
        page_fonts = page_fonts.page_fonts

    placements: list[tp.GlyphPlacement] = []
    for page_font in page_fonts:
        font = loaded_fonts.get(page_font.font_num)
        if font is None:
            logger.debug("Font %d not loaded, skipping %d glyphs",
                         page_font.font_num, len(page_font.glyphs))
            continue

        for glyph in page_font.glyphs:
            for glyph_size in glyph.sizes:
                key = (page_font.font_num, glyph.glyph_index, glyph_size.size)
                entry = cache.get(key)
                if entry is None:
                    if cache.is_blank(key):
                        continue
                    try:
                        entry = extract_entry(font, page_font.font_num, glyph.glyph_index,
                                              glyph_size.size)
                    except Exception as exc:
                        logger.warning("Glyph %d of font %d failed at size %s: %s",
                                       glyph.glyph_index, page_font.font_num,
                                       glyph_size.size, exc)
                        continue
                    cache.extractions += 1
                    if entry is None:
                        cache.mark_blank(key)
                        continue
                    cache.put(entry)

                for point in glyph_size.placements:
                    placements.append(tp.GlyphPlacement(
                        entry, point.x + entry.x_origin, point.y - entry.baseline))

    return placements, cache


@dataclass
class CachedBitmap:
    """Glyph path rasterized to a Cairo surface.

    The surface is the glyph box plus padding; origin_x/origin_y position
    its top-left relative to the glyph placement.
    """
    surface: Any            # cairo.ImageSurface (ARGB32)
    width: int              # surface width in pixels
    height: int             # surface height in pixels
    origin_x: float         # offset from placement to surface top-left X
    origin_y: float         # offset from placement to surface top-left Y
    backing_data: Any       # bytearray - prevents GC of surface backing memory


class GlyphBitmapCache:
    """LRU cache for rasterized glyph bitmaps, keyed by GlyphKey.

    Enforces both entry count and memory limits to prevent unbounded growth.
    """
    DEFAULT_MAX_ENTRIES = 4096
    DEFAULT_MAX_BYTES = 64 * 1024 * 1024  # 64 MB

    def __init__(self, max_entries: int | None = None, max_bytes: int | None = None) -> None:
        self._cache: OrderedDict[tp.GlyphKey, CachedBitmap] = OrderedDict()
        self._max_entries = max_entries or self.DEFAULT_MAX_ENTRIES
        self._max_bytes = max_bytes or self.DEFAULT_MAX_BYTES
        self._current_bytes = 0
        self._hits = 0
        self._misses = 0

    def get(self, key: tp.GlyphKey) -> CachedBitmap | None:
        """Retrieve cached bitmap, updating LRU order and statistics."""
        entry = self._cache.get(key)
        if entry is not None:
            self._hits += 1
            self._cache.move_to_end(key)
        else:
            self._misses += 1
        return entry

    def put(self, key: tp.GlyphKey, bitmap: CachedBitmap) -> None:
        """Cache a bitmap with LRU eviction by count and memory."""
        entry_bytes = bitmap.width * bitmap.height * 4  # ARGB32

        if key in self._cache:
            old = self._cache.pop(key)
            self._current_bytes -= old.width * old.height * 4

        while (len(self._cache) >= self._max_entries or
               self._current_bytes + entry_bytes > self._max_bytes) and self._cache:
            _, evicted = self._cache.popitem(last=False)
            self._current_bytes -= evicted.width * evicted.height * 4

        self._cache[key] = bitmap
        self._current_bytes += entry_bytes

    def clear(self) -> None:
        """Clear entire cache and reset statistics."""
        self._cache.clear()
        self._current_bytes = 0
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            'entries': len(self._cache),
            'max_entries': self._max_entries,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / total if total > 0 else 0.0,
            'memory_bytes': self._current_bytes,
        }

    def __len__(self) -> int:
        return len(self._cache)
