# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Glyph outline and placement types.

Outlines returned by a font are a Path: a list of SubPaths, each a list of
path construction elements in device space (y axis pointing down).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

__all__ = [
    "Point", "MoveTo", "LineTo", "QuadTo", "CurveTo", "ClosePath",
    "SubPath", "Path", "GlyphPathEntry", "GlyphPlacement", "GlyphKey",
]


class Point(object):
    def __init__(self, x: Union[int, float], y: Union[int, float]) -> None:
        self.x = x
        self.y = y


class MoveTo(object):
    def __init__(self, p: Point) -> None:
        self.p = p


class LineTo(object):
    def __init__(self, p: Point) -> None:
        self.p = p


class QuadTo(object):
    # TrueType outlines are quadratic
    def __init__(self, p1: Point, p2: Point) -> None:
        self.p1 = p1
        self.p2 = p2


class CurveTo(object):
    def __init__(self, p1: Point, p2: Point, p3: Point) -> None:
        self.p1 = p1
        self.p2 = p2
        self.p3 = p3


class ClosePath(object):
    def __init__(self):
        pass


class SubPath(list):
    def __init__(self) -> None:
        super().__init__()


class Path(list):
    def __init__(self) -> None:
        super().__init__()


# (font_num, glyph_index, rendered_size)
GlyphKey = tuple[int, int, float]


@dataclass(frozen=True)
class GlyphPathEntry:
    """Cached vector geometry for one glyph at one rendered size.

    Content-addressed by (font_num, glyph_index, size), so immutable once
    inserted into the cache.
    """
    font_num: int
    glyph_index: int
    size: float
    path: str       # SVG path data, origin already shifted to the glyph box
    width: int      # rendered bounding box in device pixels
    height: int
    x_origin: int = 0   # floor(left side bearing * conv)
    baseline: int = 0   # ceil(bbox y2 * conv)

    @property
    def key(self) -> GlyphKey:
        return (self.font_num, self.glyph_index, self.size)

    def to_wire(self) -> dict:
        return {
            "fontNum": self.font_num,
            "glyphIndex": self.glyph_index,
            "size": self.size,
            "path": self.path,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class GlyphPlacement:
    """One glyph drawn at a device position (top-left of its bounding box)."""
    glyph_path: GlyphPathEntry
    x: float
    y: float

    def to_wire(self) -> dict:
        return {"glyphPath": self.glyph_path.to_wire(), "x": self.x, "y": self.y}
