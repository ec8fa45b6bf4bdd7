# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Shared Cairo Rendering Module

Paints one ``renderPage`` message onto a Cairo context, the way an
interactive preview surface would:

1. white page background
2. images (Pillow-decoded) at margin + (x, y), scaled to (w, h)
3. rules as filled black rectangles at margin + (x, y)
4. glyphs: each GlyphPathEntry is rasterized once into the glyph bitmap
   cache and blitted at margin + placement

Everything here works on the wire dictionaries, not on core types, so any
host that receives the protocol can use it.
"""

import logging
import math
import os
import re
import sys

import cairo
from PIL import Image

from ...core.glyph_cache import CachedBitmap, GlyphBitmapCache

logger = logging.getLogger(__name__)

_PATH_TOKEN = re.compile(r"[MLQCZ]|-?\d+(?:\.\d+)?")

# Number of coordinates taken by each path command
_ARG_COUNTS = {"M": 2, "L": 2, "Q": 4, "C": 6, "Z": 0}

# Encapsulated PostScript figures are expected to have a raster sibling
_EPS_RASTER_SUFFIX = ".png"


def parse_path_data(data: str) -> list[tuple[str, list[float]]]:
    """
    Split SVG path data into (command, coordinates) pairs.

    Raises:
        ValueError: On a number outside a command or a command with the
            wrong number of coordinates.
    """
    commands: list[tuple[str, list[float]]] = []
    for token in _PATH_TOKEN.findall(data):
        if token in _ARG_COUNTS:
            commands.append((token, []))
        elif not commands:
            raise ValueError(f"Path data starts with a number: {data[:20]!r}")
        else:
            commands[-1][1].append(float(token))

    for command, args in commands:
        if len(args) != _ARG_COUNTS[command]:
            raise ValueError(f"Command {command} takes {_ARG_COUNTS[command]} values, got {len(args)}")
    return commands


def trace_path_data(cairo_ctx, data: str) -> None:
    """Append a path-data outline to the current Cairo path."""
    for command, args in parse_path_data(data):
        if command == "M":
            cairo_ctx.move_to(*args)
        elif command == "L":
            cairo_ctx.line_to(*args)
        elif command == "Q":
            # Cairo has no quadratic segments; raise to cubic
            x0, y0 = cairo_ctx.get_current_point()
            qx, qy, x, y = args
            cairo_ctx.curve_to(
                x0 + 2.0 / 3.0 * (qx - x0), y0 + 2.0 / 3.0 * (qy - y0),
                x + 2.0 / 3.0 * (qx - x), y + 2.0 / 3.0 * (qy - y),
                x, y,
            )
        elif command == "C":
            cairo_ctx.curve_to(*args)
        elif command == "Z":
            cairo_ctx.close_path()


def rasterize_glyph(glyph_path: dict, antialias: int = cairo.ANTIALIAS_GRAY) -> CachedBitmap:
    """Rasterize one wire glyph path into a padded ARGB32 bitmap."""
    pad = 1
    width = max(1, int(glyph_path["width"])) + 2 * pad
    height = max(1, int(glyph_path["height"])) + 2 * pad

    backing_data = bytearray(width * height * 4)
    surface = cairo.ImageSurface.create_for_data(
        backing_data, cairo.FORMAT_ARGB32, width, height
    )
    ctx = cairo.Context(surface)
    ctx.set_antialias(antialias)
    ctx.translate(pad, pad)
    trace_path_data(ctx, glyph_path["path"])
    ctx.set_source_rgb(0, 0, 0)
    ctx.fill()
    del ctx
    surface.flush()

    return CachedBitmap(
        surface=surface,
        width=width,
        height=height,
        origin_x=-pad,
        origin_y=-pad,
        backing_data=backing_data,
    )


def image_path(base_dir: str, file_name: str) -> str:
    """Resolve an image reference; .eps figures map to their raster sibling."""
    path = os.path.join(base_dir, file_name)
    if path.lower().endswith(".eps"):
        path = os.path.splitext(path)[0] + _EPS_RASTER_SUFFIX
    return path


def load_image_surface(path: str) -> cairo.ImageSurface:
    """Decode an image file with Pillow into a Cairo ARGB32 surface."""
    with Image.open(path) as img:
        premultiplied = img.convert("RGBA").convert("RGBa")
    width, height = premultiplied.size
    # Cairo ARGB32 is native-endian premultiplied: B, G, R, A in memory on little-endian
    r, g, b, a = premultiplied.split()
    if sys.byteorder == "little":
        bands = (b, g, r, a)
    else:
        bands = (a, r, g, b)
    data = bytearray(Image.merge("RGBA", bands).tobytes())
    stride = cairo.ImageSurface.format_stride_for_width(cairo.FORMAT_ARGB32, width)
    return cairo.ImageSurface.create_for_data(data, cairo.FORMAT_ARGB32, width, height, stride)


def _render_image(cairo_ctx, image: dict, margin: int, base_dir: str) -> None:
    path = image_path(base_dir, image["fileName"])
    try:
        surface = load_image_surface(path)
    except (OSError, ValueError) as exc:
        logger.warning("Could not load image %s: %s", path, exc)
        return
    if surface.get_width() == 0 or surface.get_height() == 0:
        return

    cairo_ctx.save()
    cairo_ctx.translate(margin + image["x"], margin + image["y"])
    cairo_ctx.scale(image["w"] / surface.get_width(), image["h"] / surface.get_height())
    cairo_ctx.set_source_surface(surface, 0, 0)
    cairo_ctx.get_source().set_filter(cairo.FILTER_BILINEAR)
    cairo_ctx.paint()
    cairo_ctx.restore()


def _render_glyph(cairo_ctx, placement: dict, margin: int, bitmap_cache: GlyphBitmapCache) -> None:
    glyph_path = placement["glyphPath"]
    key = (glyph_path["fontNum"], glyph_path["glyphIndex"], glyph_path["size"])
    cached = bitmap_cache.get(key)
    if cached is None:
        try:
            cached = rasterize_glyph(glyph_path, cairo_ctx.get_antialias())
        except ValueError as exc:
            logger.warning("Bad path data for glyph %s: %s", key, exc)
            return
        bitmap_cache.put(key, cached)

    cairo_ctx.save()
    cairo_ctx.set_source_surface(
        cached.surface,
        math.floor(margin + placement["x"]) + cached.origin_x,
        math.floor(margin + placement["y"]) + cached.origin_y,
    )
    cairo_ctx.paint()
    cairo_ctx.restore()


def render_page(cairo_ctx, page_data: dict, width: int, height: int, margin: int,
                bitmap_cache: GlyphBitmapCache, base_dir: str = ".") -> None:
    """
    Paint a renderPage payload onto a Cairo context.

    Args:
        cairo_ctx: Cairo context sized to one page
        page_data: ``value`` of a renderPage message
        width: Page width in device pixels
        height: Page height in device pixels
        margin: Page margin in device pixels
        bitmap_cache: Glyph bitmap cache shared across pages
        base_dir: Directory image file names are relative to
    """
    page_source = page_data["pageSource"]

    cairo_ctx.set_source_rgb(1.0, 1.0, 1.0)
    cairo_ctx.rectangle(0, 0, width, height)
    cairo_ctx.fill()

    for image in page_source.get("images", []):
        _render_image(cairo_ctx, image, margin, base_dir)

    cairo_ctx.set_source_rgb(0, 0, 0)
    for rule in page_source.get("rules", []):
        cairo_ctx.rectangle(margin + rule["x"], margin + rule["y"], rule["w"], rule["h"])
    cairo_ctx.fill()

    for placement in page_data.get("pageGlyphs", []):
        _render_glyph(cairo_ctx, placement, margin, bitmap_cache)
