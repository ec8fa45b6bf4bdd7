from __future__ import annotations

import json
from pathlib import Path

from PIL import Image

from conftest import ManualClock, document_dict, load_fake_font, trace_text
from texpreview.cli_runner import pump
from texpreview.core import messages
from texpreview.core.context_init import PreviewSettings, create_session
from texpreview.devices.png.png import PngRenderTarget


def _write_build(directory: Path, stem: str, pages: int) -> Path:
    source = directory / f"{stem}.tex"
    source.write_text("\\documentclass{article}\n")
    (directory / f"{stem}.json").write_text(json.dumps(document_dict(pages)))
    (directory / f"{stem}.synctex").write_text(trace_text(str(source)))
    return source


def test_render_and_sync_through_png_target(tmp_path: Path) -> None:
    source = _write_build(tmp_path, "doc", 3)
    target = PngRenderTarget(output_dir=str(tmp_path / "out"), base_name="doc")
    revealed = []
    session = create_session(PreviewSettings(dpi=72), target, reveal_line=revealed.append,
                             clock=ManualClock())

    session.regenerate_from_files(str(source), font_loader=load_fake_font)
    assert pump(session, target) == 3

    written = sorted(Path(p).name for p in target.written)
    assert written == ["doc-0001.png", "doc-0002.png", "doc-0003.png"]
    with Image.open(target.written[0]) as img:
        assert img.size == (595, 841)
        # the 50x2 rule at the page origin, inside the one inch margin
        assert img.convert("RGB").getpixel((72 + 25, 72 + 1)) == (0, 0, 0)
        assert img.convert("RGB").getpixel((10, 10)) == (255, 255, 255)
    # one glyph shared by all three pages
    assert len(target.bitmap_cache) == 1
    assert target.bitmap_cache.stats()['hits'] == 2

    assert session.scroll_to_line(30) == 998
    assert target.scroll_position == 998

    # the rendering target echoes the scroll; forward sync caused it
    session.handle_message(messages.webview_scrolled(998))
    assert revealed == []
    session.handle_message(messages.webview_scrolled(272))
    assert revealed == [10]


def test_switching_documents_resets_target_glyphs(tmp_path: Path) -> None:
    first = _write_build(tmp_path, "first", 1)
    second = _write_build(tmp_path, "second", 2)
    target = PngRenderTarget(output_dir=str(tmp_path / "out"), base_name="doc")
    session = create_session(PreviewSettings(dpi=72), target, clock=ManualClock())

    session.regenerate_from_files(str(first), font_loader=load_fake_font)
    pump(session, target)
    assert len(target.bitmap_cache) == 1

    session.regenerate_from_files(str(second), font_loader=load_fake_font)
    assert len(target.bitmap_cache) == 1
    assert target.bitmap_cache.stats()['hits'] == 0
    pump(session, target)

    assert target.page_count == 2
    assert session.scheduler.stats()['rendered'] == 2
    assert session.status_text() == "Page 1/2 Size: A4 Mag: 100% DPI: 72"
