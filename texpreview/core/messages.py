# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Rendering target wire protocol.

The rendering target is reachable only through messages. Outbound messages
use the envelope ``{"type": <name>, "value": {...}}``; inbound messages are
flat, ``{"command": <name>, ...}``. Field names are part of the contract
with existing rendering targets and must not change.

Outbound:
    initCanvas{pageCount, marginPixels, pageWidth, pageHeight, pageGap}
    resetGlyphBitmaps{}
    renderPage{pageIndex, pageSource, pageGlyphs}
    scroll{vPos}

Inbound:
    pageRendered{pageIndex}
    webviewScrolled{scrollY}
"""

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, Union

from . import types as tp
from .error import ChannelFullError

logger = logging.getLogger(__name__)


class RenderTarget(Protocol):
    """Anything that accepts outbound protocol messages."""

    def post_message(self, message: dict) -> None:
        ...


def init_canvas(page_count: int, margin_pixels: int, page_width: int, page_height: int,
                page_gap: int) -> dict:
    return {
        "type": tp.MSG_INIT_CANVAS,
        "value": {
            "pageCount": page_count,
            "marginPixels": margin_pixels,
            "pageWidth": page_width,
            "pageHeight": page_height,
            "pageGap": page_gap,
        },
    }


def reset_glyph_bitmaps() -> dict:
    return {"type": tp.MSG_RESET_GLYPH_BITMAPS, "value": {}}


def render_page(page_index: int, page: tp.Page, placements: Iterable[tp.GlyphPlacement]) -> dict:
    """Render request carrying the page content and its resolved glyphs."""
    return {
        "type": tp.MSG_RENDER_PAGE,
        "value": {
            "pageIndex": page_index,
            "pageSource": page.to_dict(),
            "pageGlyphs": [p.to_wire() for p in placements],
        },
    }


def scroll(v_pos: float) -> dict:
    return {"type": tp.MSG_SCROLL, "value": {"vPos": v_pos}}


@dataclass(frozen=True)
class PageRendered:
    page_index: int


@dataclass(frozen=True)
class WebviewScrolled:
    scroll_y: float


InboundMessage = Union[PageRendered, WebviewScrolled]


def page_rendered(page_index: int) -> dict:
    """Inbound acknowledgement as a rendering target sends it."""
    return {"command": tp.CMD_PAGE_RENDERED, "pageIndex": page_index}


def webview_scrolled(scroll_y: float) -> dict:
    return {"command": tp.CMD_WEBVIEW_SCROLLED, "scrollY": scroll_y}


def parse_inbound(message: dict) -> InboundMessage | None:
    """Decode an inbound message; None for unknown or malformed ones."""
    command = message.get("command")
    try:
        if command == tp.CMD_PAGE_RENDERED:
            return PageRendered(int(message["pageIndex"]))
        if command == tp.CMD_WEBVIEW_SCROLLED:
            return WebviewScrolled(message["scrollY"])
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Malformed %s message: %s", command, exc)
        return None
    logger.debug("Ignoring unknown command %r", command)
    return None


class MessageChannel:
    """Bounded FIFO of outbound messages.

    Hosts drain it and forward the messages to the real rendering target.
    ``post_message`` raises ChannelFullError once ``max_messages`` are
    pending, which the scheduler treats as a rejected dispatch.
    """
    DEFAULT_MAX_MESSAGES = 256

    def __init__(self, max_messages: int | None = None) -> None:
        self._queue: deque[dict] = deque()
        self._max_messages = max_messages or self.DEFAULT_MAX_MESSAGES

    def post_message(self, message: dict) -> None:
        if len(self._queue) >= self._max_messages:
            raise ChannelFullError(
                f"{len(self._queue)} messages pending, dropping {message.get('type')}")
        self._queue.append(message)

    def drain(self) -> list[dict]:
        """Remove and return every pending message in posting order."""
        messages = list(self._queue)
        self._queue.clear()
        return messages

    def __len__(self) -> int:
        return len(self._queue)
