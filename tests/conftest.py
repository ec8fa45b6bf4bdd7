"""Shared fakes: outline fonts, page lists, SyncTeX traces and a manual clock."""

from __future__ import annotations

import pytest

from texpreview.core import types as tp

# Native SyncTeX units for one device pixel at 72 dpi, 100% magnification.
# Multiples of 25 px are whole native units.
PX25 = 1644544


def sp(px: int) -> int:
    """Native units for a pixel count that is a multiple of 25 (72 dpi)."""
    assert px % 25 == 0
    return px // 25 * PX25


class FakeGlyph:
    """Glyph whose outline is a triangle anchored at the requested origin."""

    def __init__(self, lsb, bbox, blank=False, fail=False):
        self.left_side_bearing = lsb
        self._bbox = bbox
        self.blank = blank
        self.fail = fail
        self.path_calls = []

    def bounding_box(self):
        return self._bbox

    def get_path(self, x, y, size):
        self.path_calls.append((x, y, size))
        if self.fail:
            raise RuntimeError("corrupt outline")
        path = tp.Path()
        if self.blank:
            return path
        sub = tp.SubPath()
        sub.append(tp.MoveTo(tp.Point(x, y)))
        sub.append(tp.LineTo(tp.Point(x + size / 2, y - size)))
        sub.append(tp.ClosePath())
        path.append(sub)
        return path


class FakeFont:

    def __init__(self, glyphs, units_per_em=1000):
        self.units_per_em = units_per_em
        self.glyphs = glyphs

    def get_glyph(self, index):
        return self.glyphs[index]

    @property
    def path_calls(self):
        return sum(len(g.path_calls) for g in self.glyphs.values())


class ManualClock:

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_font() -> FakeFont:
    return FakeFont({
        1: FakeGlyph(150, (150, -200, 650, 700)),
        2: FakeGlyph(0, (0, 0, 400, 500)),
        3: FakeGlyph(0, (0, 0, 0, 0), blank=True),
    })


def load_fake_font(font_ref) -> FakeFont:
    """Font loader usable as ``--font-loader conftest:load_fake_font``."""
    return make_font()


def page_dict(glyphs=((1, 10, ((100, 200),)),), rules=(), images=()):
    """Wire page with one page font (fontNum 1)."""
    return {
        "images": [dict(i) for i in images],
        "rules": [{"x": x, "y": y, "w": w, "h": h} for x, y, w, h in rules],
        "pageFonts": [{
            "fontNum": 1,
            "glyphs": [
                {"glyphIndex": index,
                 "glyphSizes": [{"sz": size,
                                 "glyphPlacements": [{"x": x, "y": y} for x, y in points]}]}
                for index, size, points in glyphs
            ],
        }],
    }


def document_dict(page_count: int = 3) -> dict:
    return {
        "fonts": [{"fontNum": 1, "fontName": "cmr10", "fontPath": "/fonts/cmr10.otf"}],
        "pages": [page_dict(rules=((0, 0, 50, 2),)) for _ in range(page_count)],
    }


def trace_text(source: str = "./doc.tex") -> str:
    """Trace at 72 dpi: A4 pages are 841 px high, stride 851 with a 10 px gap."""
    return "\n".join([
        "SyncTeX Version:1",
        f"Input:1:{source}",
        "Input:2:./preamble.sty",
        "Output:dvi",
        "Magnification:1000",
        "Unit:1",
        "X Offset:0",
        "Y Offset:0",
        "Content:",
        "!100",
        "{1",
        f"[1,5:0,0:{sp(400)},{sp(600)},0",
        f"(1,10:{sp(100)},{sp(100)}:{sp(200)},{sp(25)},0",
        f"(1,10:{sp(25)},{sp(200)}:{sp(200)},{sp(25)},0",
        f"(1,12:{sp(25)},{sp(300)}:{sp(50)},{sp(25)},0",
        f"(2,12:{sp(25)},{sp(350)}:{sp(50)},{sp(25)},0",
        f"(1,0:{sp(25)},{sp(375)}:{sp(50)},{sp(25)},0",
        f"(1,14:{sp(25)},{sp(375)}:0,{sp(25)},0",
        f"g1,20:{sp(25)},{sp(400)}",
        f"g1,20:{sp(50)},{sp(500)}:{sp(25)}",
        f"k1,20:{sp(50)},{sp(500)}:{sp(25)}",
        "this line is not a record",
        "}1",
        "{2",
        f"(1,30:{sp(25)},{sp(100)}:{sp(50)},{sp(25)},0",
        "}2",
        f"(1,40:{sp(25)},{sp(100)}:{sp(50)},{sp(25)},0",
        "Postamble:",
        "",
    ])


@pytest.fixture
def font() -> FakeFont:
    return make_font()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def document() -> tp.Document:
    return tp.Document.from_dict(document_dict())


@pytest.fixture
def trace() -> str:
    return trace_text()
