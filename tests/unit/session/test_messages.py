from __future__ import annotations

import pytest

from conftest import page_dict
from texpreview.core import messages
from texpreview.core import types as tp
from texpreview.core.error import ChannelFullError
from texpreview.core.messages import MessageChannel, PageRendered, WebviewScrolled, parse_inbound


def test_outbound_envelopes() -> None:
    assert messages.init_canvas(3, 96, 793, 1122, 10) == {
        "type": "initCanvas",
        "value": {"pageCount": 3, "marginPixels": 96, "pageWidth": 793,
                  "pageHeight": 1122, "pageGap": 10},
    }
    assert messages.reset_glyph_bitmaps() == {"type": "resetGlyphBitmaps", "value": {}}
    assert messages.scroll(247) == {"type": "scroll", "value": {"vPos": 247}}


def test_render_page_forwards_page_source_verbatim() -> None:
    source = page_dict(rules=((1, 2, 3, 4),),
                       images=({"fileName": "fig.png", "x": 0, "y": 0, "w": 10, "h": 5},))
    message = messages.render_page(4, tp.Page.from_dict(source), [])
    assert message["type"] == "renderPage"
    assert message["value"] == {"pageIndex": 4, "pageSource": source, "pageGlyphs": []}


@pytest.mark.parametrize("raw, expected", [
    ({"command": "pageRendered", "pageIndex": 2}, PageRendered(2)),
    ({"command": "pageRendered", "pageIndex": "2"}, PageRendered(2)),
    ({"command": "webviewScrolled", "scrollY": 120.5}, WebviewScrolled(120.5)),
    (messages.page_rendered(0), PageRendered(0)),
    (messages.webview_scrolled(9), WebviewScrolled(9)),
])
def test_parse_inbound(raw: dict, expected) -> None:
    assert parse_inbound(raw) == expected


@pytest.mark.parametrize("raw", [
    {"command": "pageRendered"},
    {"command": "pageRendered", "pageIndex": None},
    {"command": "webviewScrolled"},
    {"command": "zoom", "level": 2},
    {},
])
def test_parse_inbound_rejects(raw: dict) -> None:
    assert parse_inbound(raw) is None


def test_channel_is_fifo_and_bounded() -> None:
    channel = MessageChannel(max_messages=2)
    channel.post_message(messages.scroll(1))
    channel.post_message(messages.scroll(2))
    with pytest.raises(ChannelFullError):
        channel.post_message(messages.scroll(3))
    assert [m["value"]["vPos"] for m in channel.drain()] == [1, 2]
    assert len(channel) == 0
    channel.post_message(messages.scroll(3))
    assert len(channel) == 1
