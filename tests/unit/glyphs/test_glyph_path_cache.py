from __future__ import annotations

import logging

import pytest

from conftest import FakeFont, FakeGlyph, make_font, page_dict
from texpreview.core import types as tp
from texpreview.core.glyph_cache import GlyphPathCache, extract_entry, resolve, to_path_data


def _page(glyphs) -> tp.Page:
    return tp.Page.from_dict(page_dict(glyphs=glyphs))


def test_path_data_formatting() -> None:
    sub = tp.SubPath()
    sub.append(tp.MoveTo(tp.Point(10, 0)))
    sub.append(tp.LineTo(tp.Point(10.0, 12.5)))
    sub.append(tp.QuadTo(tp.Point(4, 20), tp.Point(0, 12.5)))
    sub.append(tp.CurveTo(tp.Point(-1.25, 3), tp.Point(0.333, 2), tp.Point(1, 1)))
    sub.append(tp.ClosePath())
    path = tp.Path()
    path.append(sub)
    assert to_path_data(path) == "M10 0L10 12.50Q4 20 0 12.50C-1.25 3 0.33 2 1 1Z"


def test_path_data_for_several_subpaths() -> None:
    path = tp.Path()
    for x in (0, 5):
        sub = tp.SubPath()
        sub.append(tp.MoveTo(tp.Point(x, 0)))
        sub.append(tp.LineTo(tp.Point(x, 1)))
        sub.append(tp.ClosePath())
        path.append(sub)
    assert to_path_data(path) == "M0 0L0 1ZM5 0L5 1Z"


def test_path_data_empty() -> None:
    assert to_path_data(tp.Path()) == ""


def test_extract_entry_geometry(font: FakeFont) -> None:
    entry = extract_entry(font, 1, 1, 10)
    assert font.glyphs[1].path_calls == [(-1, 7, 10)]
    assert entry.path == "M-1 7L4 -3Z"
    assert (entry.width, entry.height) == (6, 9)
    assert (entry.x_origin, entry.baseline) == (1, 7)
    assert entry.key == (1, 1, 10)


def test_extract_entry_other_size(font: FakeFont) -> None:
    entry = extract_entry(font, 1, 1, 12)
    assert entry.path == "M-1 9L5 -3Z"
    assert (entry.width, entry.height) == (7, 12)


def test_extract_entry_blank_glyph(font: FakeFont) -> None:
    assert extract_entry(font, 1, 3, 10) is None


def test_extract_entry_without_units_per_em() -> None:
    font = FakeFont({1: FakeGlyph(150, (150, -200, 650, 700))}, units_per_em=None)
    entry = extract_entry(font, 1, 1, 10)
    assert (entry.width, entry.height, entry.baseline) == (6, 9, 7)


def test_resolve_positions_and_caches(font: FakeFont) -> None:
    page = _page(((1, 10, ((100, 200), (300, 200))), (3, 10, ((5, 5),)), (2, 10, ((0, 0),))))
    cache = GlyphPathCache()

    placements, returned = resolve(page, {1: font}, cache)

    assert returned is cache
    assert [(p.glyph_path.glyph_index, p.x, p.y) for p in placements] == [
        (1, 101, 193), (1, 301, 193), (2, 0, -5),
    ]
    assert placements[0].glyph_path is placements[1].glyph_path
    stats = cache.stats()
    assert (stats['entries'], stats['blank'], stats['extractions']) == (2, 1, 3)
    assert (stats['hits'], stats['misses']) == (0, 3)


def test_resolve_reuses_cached_outlines(font: FakeFont) -> None:
    page = _page(((1, 10, ((100, 200),)), (3, 10, ((5, 5),))))
    cache = GlyphPathCache()
    first, _ = resolve(page, {1: font}, cache)
    calls = font.path_calls

    second, _ = resolve(page.page_fonts, {1: font}, cache)

    assert font.path_calls == calls
    assert [p.to_wire() for p in second] == [p.to_wire() for p in first]
    assert cache.stats()['hits'] == 2
    assert cache.extractions == 2


def test_resolve_is_idempotent_across_pages(font: FakeFont) -> None:
    cache = GlyphPathCache()
    resolve(_page(((1, 10, ((0, 0),)),)), {1: font}, cache)
    resolve(_page(((1, 10, ((50, 50),)), (1, 12, ((0, 0),)))), {1: font}, cache)
    assert len(cache) == 2
    assert (1, 1, 10) in cache and (1, 1, 12) in cache


def test_resolve_skips_missing_font(font: FakeFont) -> None:
    cache = GlyphPathCache()
    placements, _ = resolve(_page(((1, 10, ((0, 0),)),)), {7: font}, cache)
    assert placements == []
    assert len(cache) == 0
    assert font.path_calls == 0


def test_resolve_skips_failing_glyph(caplog: pytest.LogCaptureFixture) -> None:
    font = FakeFont({
        1: FakeGlyph(0, (0, 0, 400, 500), fail=True),
        2: FakeGlyph(0, (0, 0, 400, 500)),
    })
    cache = GlyphPathCache()
    with caplog.at_level(logging.WARNING, logger="texpreview"):
        placements, _ = resolve(_page(((1, 10, ((0, 0),)), (2, 10, ((0, 0),)))), {1: font}, cache)
    assert [p.glyph_path.glyph_index for p in placements] == [2]
    assert "corrupt outline" in caplog.text
    assert not cache.is_blank((1, 1, 10))


def test_placement_wire_format(font: FakeFont) -> None:
    placements, _ = resolve(_page(((2, 10, ((3, 4),)),)), {1: font}, GlyphPathCache())
    assert placements[0].to_wire() == {
        "glyphPath": {"fontNum": 1, "glyphIndex": 2, "size": 10,
                      "path": "M0 5L5 -5Z", "width": 4, "height": 5},
        "x": 3,
        "y": -1,
    }


def test_clear_resets_entries_and_counters() -> None:
    cache = GlyphPathCache()
    resolve(_page(((1, 10, ((0, 0),)), (3, 10, ((0, 0),)))), {1: make_font()}, cache)
    cache.clear()
    assert len(cache) == 0
    assert not cache.is_blank((1, 3, 10))
    assert cache.stats() == {'entries': 0, 'blank': 0, 'hits': 0, 'misses': 0,
                             'extractions': 0, 'hit_rate': 0.0}
