# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Structured page list types.

The page list is produced by an external DVI decoder as JSON. Each page
carries an image list, a rule list and a page-font list (font number ->
glyph index -> per-size placement list). The classes below mirror that
shape and round-trip back to the wire dict unchanged, since the page source
is forwarded verbatim to the rendering target.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .constants import DEFAULT_PAGE_SIZE, MM_TO_INCH, PAGE_SIZES

__all__ = [
    "FontRef", "PageImage", "PageRule", "GlyphPoint", "GlyphSize",
    "PageGlyph", "PageFont", "Page", "Document", "page_pixel_size",
    "margin_pixels",
]


@dataclass(frozen=True)
class FontRef:
    """A font the decoder resolved for this document."""
    font_num: int
    font_name: str
    font_path: str

    def to_dict(self) -> dict:
        return {"fontNum": self.font_num, "fontName": self.font_name, "fontPath": self.font_path}

    @classmethod
    def from_dict(cls, d: dict) -> FontRef:
        return cls(font_num=int(d["fontNum"]), font_name=d["fontName"], font_path=d.get("fontPath", ""))


@dataclass(frozen=True)
class PageImage:
    file_name: str
    x: float
    y: float
    w: float
    h: float

    def to_dict(self) -> dict:
        return {"fileName": self.file_name, "x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, d: dict) -> PageImage:
        return cls(file_name=d["fileName"], x=d["x"], y=d["y"], w=d["w"], h=d["h"])


@dataclass(frozen=True)
class PageRule:
    """A filled rectangle."""
    x: float
    y: float
    w: float
    h: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, d: dict) -> PageRule:
        return cls(x=d["x"], y=d["y"], w=d["w"], h=d["h"])


@dataclass(frozen=True)
class GlyphPoint:
    """Requested on-page glyph origin in device pixels."""
    x: float
    y: float


@dataclass(frozen=True)
class GlyphSize:
    size: float
    placements: tuple[GlyphPoint, ...]

    def to_dict(self) -> dict:
        return {
            "sz": self.size,
            "glyphPlacements": [{"x": p.x, "y": p.y} for p in self.placements],
        }

    @classmethod
    def from_dict(cls, d: dict) -> GlyphSize:
        return cls(
            size=d["sz"],
            placements=tuple(GlyphPoint(p["x"], p["y"]) for p in d.get("glyphPlacements", [])),
        )


@dataclass(frozen=True)
class PageGlyph:
    glyph_index: int
    sizes: tuple[GlyphSize, ...]

    def to_dict(self) -> dict:
        return {"glyphIndex": self.glyph_index, "glyphSizes": [s.to_dict() for s in self.sizes]}

    @classmethod
    def from_dict(cls, d: dict) -> PageGlyph:
        return cls(
            glyph_index=int(d["glyphIndex"]),
            sizes=tuple(GlyphSize.from_dict(s) for s in d.get("glyphSizes", [])),
        )


@dataclass(frozen=True)
class PageFont:
    """Glyphs used on one page from one font, keyed by page-local font number."""
    font_num: int
    glyphs: tuple[PageGlyph, ...]

    def to_dict(self) -> dict:
        return {"fontNum": self.font_num, "glyphs": [g.to_dict() for g in self.glyphs]}

    @classmethod
    def from_dict(cls, d: dict) -> PageFont:
        return cls(
            font_num=int(d["fontNum"]),
            glyphs=tuple(PageGlyph.from_dict(g) for g in d.get("glyphs", [])),
        )


@dataclass(frozen=True)
class Page:
    images: tuple[PageImage, ...] = ()
    rules: tuple[PageRule, ...] = ()
    page_fonts: tuple[PageFont, ...] = ()

    def to_dict(self) -> dict:
        return {
            "images": [i.to_dict() for i in self.images],
            "rules": [r.to_dict() for r in self.rules],
            "pageFonts": [f.to_dict() for f in self.page_fonts],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Page:
        return cls(
            images=tuple(PageImage.from_dict(i) for i in d.get("images", [])),
            rules=tuple(PageRule.from_dict(r) for r in d.get("rules", [])),
            page_fonts=tuple(PageFont.from_dict(f) for f in d.get("pageFonts", [])),
        )


@dataclass
class Document:
    """Decoded document: the fonts it references and its pages."""
    fonts: list[FontRef] = field(default_factory=list)
    pages: list[Page] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def to_dict(self) -> dict:
        return {
            "fonts": [f.to_dict() for f in self.fonts],
            "pages": [p.to_dict() for p in self.pages],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Document:
        return cls(
            fonts=[FontRef.from_dict(f) for f in d.get("fonts", [])],
            pages=[Page.from_dict(p) for p in d["pages"]],
        )


def page_pixel_size(page_size: str, dpi: int, magnification: int) -> tuple[int, int]:
    """Page (width, height) in device pixels; unknown sizes fall back to A4."""
    width_mm, height_mm = PAGE_SIZES.get(page_size, PAGE_SIZES[DEFAULT_PAGE_SIZE])
    scale = MM_TO_INCH * dpi * (magnification / 100)
    return math.floor(width_mm * scale), math.floor(height_mm * scale)


def margin_pixels(dpi: int, magnification: int) -> int:
    """One inch margin at the current magnification."""
    return math.floor(dpi * (magnification / 100))
