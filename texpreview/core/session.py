# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Preview Session

One PreviewSession owns every piece of mutable preview state for one
preview: the decoded document, the loaded fonts, the sync index, the glyph
path cache, the page render scheduler and the position mapper. Hosts feed
it editor events (``scroll_to_line``), rendering target messages
(``handle_message``) and new builds (``regenerate``); everything it sends
goes through ``target.post_message``.

Regeneration replaces the index and all per-page state at once. Anything
still in flight from the previous build is ignored: acknowledgements for
pages that are not rendering are no-ops in the scheduler.
"""

import logging
import os
import time
from typing import TYPE_CHECKING, Any, Callable

from . import messages
from . import page_list
from . import synctex_parser
from . import types as tp
from .error import GenerationError, PreviewError, SyncTexError
from .fonts import FontLoader, load_fonts
from .glyph_cache import GlyphPathCache, resolve
from .messages import RenderTarget
from .page_scheduler import PageRenderScheduler
from .position_mapper import PositionMapper
from ..utils.throttle import Throttle

if TYPE_CHECKING:
    from .context_init import PreviewSettings

logger = logging.getLogger(__name__)

NO_SYNCTEX_WARNING = "No synctex file found. Scroll synchronization will be unavailable."


class PreviewSession:

    def __init__(self, settings: PreviewSettings, target: RenderTarget,
                 reveal_line: Callable[[int], None] | None = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.settings = settings
        self.target = target
        self.reveal_line = reveal_line

        self.source_file: str | None = None
        self.document: tp.Document | None = None
        self.fonts: dict[int, Any] = {}
        self.sync_index: tp.SyncIndex | None = None
        self.glyph_cache = GlyphPathCache()
        self.scheduler = PageRenderScheduler(0, settings.page_buffer_size)
        self.mapper = PositionMapper(None, settings.page_height_pixels,
                                     settings.page_gap, settings.dpi)
        self.current_page = 0
        self.last_scroll_y: float = 0
        self.generation = 0

        self._forward = Throttle(self._scroll_to_line, settings.sync_interval, clock)

    # ------------------------------------------------------------------
    # Document lifecycle

    def _discard(self) -> None:
        """Drop every per-document structure except the glyph cache."""
        self._forward.cancel()
        self.document = None
        self.fonts = {}
        self.sync_index = None
        self.scheduler.reset(0)
        self.mapper = PositionMapper(None, self.settings.page_height_pixels,
                                     self.settings.page_gap, self.settings.dpi)
        self.current_page = 0
        self.last_scroll_y = 0

    def regenerate(self, source_file: str, document: tp.Document, trace_text: str | None = None,
                   fonts: dict[int, Any] | None = None, trace_dir: str | None = None) -> None:
        """
        Install a newly built document.

        Args:
            source_file: Source file the document was built from
            document: Decoded page list
            trace_text: SyncTeX trace text, or None if the build produced none
            fonts: Font number -> loaded font
            trace_dir: Directory the trace was read from; relative input
                paths in the trace resolve against it

        Raises:
            GenerationError: If ``document`` is not a decoded page list, or
                the rendering target cannot be initialized. Prior state is
                already discarded when this is raised.
        """
        self._discard()
        self.generation += 1
        if not isinstance(document, tp.Document):
            raise GenerationError(f"Expected a decoded document, got {type(document).__name__}")

        if source_file != self.source_file:
            self.glyph_cache.clear()
            if self.source_file is not None:
                self._post(messages.reset_glyph_bitmaps())
            self.source_file = source_file

        settings = self.settings
        page_height = settings.page_height_pixels
        if trace_text is None:
            logger.warning(NO_SYNCTEX_WARNING)
        else:
            try:
                self.sync_index = synctex_parser.build(
                    trace_text, source_file, settings.dpi, settings.magnification,
                    page_height=page_height, page_gap=settings.page_gap,
                    base_dir=trace_dir)
            except SyncTexError as exc:
                logger.error("%s - scroll synchronization disabled", exc)

        self.document = document
        self.fonts = fonts or {}
        self.scheduler.buffer_size = settings.page_buffer_size
        self.scheduler.reset(document.page_count)
        self.mapper = PositionMapper(self.sync_index, page_height, settings.page_gap, settings.dpi)
        self.current_page = 1 if document.page_count else 0

        init = messages.init_canvas(document.page_count, settings.margin_pixels,
                                    settings.page_width_pixels, page_height, settings.page_gap)
        if not self._post(init):
            self._discard()
            raise GenerationError("Rendering target rejected the canvas initialization")

        logger.info("Generation %d: %s, %d pages, %d sync blocks", self.generation,
                    source_file, document.page_count,
                    len(self.sync_index) if self.sync_index is not None else 0)
        self.render_from(0, 1)

    def regenerate_from_files(self, source_file: str, synctex_path: str | None = None,
                              page_list_path: str | None = None,
                              font_loader: FontLoader | None = None) -> None:
        """Load the build outputs that sit next to ``source_file`` and regenerate."""
        try:
            document, trace_text = page_list.load_build_outputs(
                source_file, synctex_path, page_list_path)
        except GenerationError:
            self._discard()
            raise
        trace_path = synctex_path or page_list.default_paths(source_file)[0]
        self.regenerate(source_file, document, trace_text, load_fonts(document, font_loader),
                        trace_dir=os.path.dirname(os.path.abspath(trace_path)))

    # ------------------------------------------------------------------
    # Rendering

    def _post(self, message: dict) -> bool:
        try:
            self.target.post_message(message)
        except PreviewError as exc:
            logger.warning("Could not post %s: %s", message.get("type"), exc)
            return False
        return True

    def _dispatch(self, page_indices: list[int]) -> None:
        for page_index in page_indices:
            page = self.document.pages[page_index]
            try:
                placements, _ = resolve(page, self.fonts, self.glyph_cache)
                self.target.post_message(messages.render_page(page_index, page, placements))
            except Exception as exc:
                logger.warning("Render of page %d failed: %s", page_index + 1, exc)
                self.scheduler.fail(page_index)

    def render_from(self, page_index: int, direction: int) -> None:
        """Prefetch around a page and dispatch whatever the scheduler picks."""
        if self.document is None:
            return
        self._dispatch(self.scheduler.render_from(page_index, direction))

    def on_page_rendered(self, page_index: int) -> None:
        if self.document is None:
            return
        self._dispatch(self.scheduler.acknowledge(page_index))

    def handle_message(self, message: dict) -> None:
        """Route one inbound rendering target message."""
        inbound = messages.parse_inbound(message)
        if isinstance(inbound, messages.PageRendered):
            self.on_page_rendered(inbound.page_index)
        elif isinstance(inbound, messages.WebviewScrolled):
            self.on_webview_scrolled(inbound.scroll_y)

    # ------------------------------------------------------------------
    # Synchronization

    def _direction(self, v_pos: float) -> int:
        if self.last_scroll_y < v_pos:
            return 1
        if self.last_scroll_y > v_pos:
            return -1
        return 0

    def on_webview_scrolled(self, scroll_y: float) -> int | None:
        """
        Reverse sync for a scroll of the rendered document.

        Returns:
            The source line revealed in the editor, or None
        """
        if scroll_y == self.last_scroll_y or self.document is None:
            return None

        page_index = self.mapper.page_index_for(scroll_y)
        self.current_page = page_index + 1
        self.render_from(page_index, self._direction(scroll_y))

        if self.mapper.consume_reverse_lock():
            # this scroll was caused by forward sync
            self.last_scroll_y = scroll_y
            return None

        line = self.mapper.reverse(scroll_y)
        if line and self.reveal_line is not None:
            self.mapper.lock_forward()
            self.reveal_line(line)
        self.last_scroll_y = scroll_y
        return line

    def scroll_to_line(self, line: int) -> float | None:
        """Forward sync, rate limited; returns the position when it ran now."""
        return self._forward(line)

    def _scroll_to_line(self, line: int) -> float | None:
        if self.document is None:
            return None
        if self.mapper.consume_forward_lock():
            # the editor moved because of reverse sync
            return None

        v_pos = self.mapper.forward(line)
        if v_pos is None:
            logger.debug("No sync block for line %d", line)
            return None
        if line > 1:
            self.render_from(self.mapper.page_index_for(v_pos), self._direction(v_pos))
        if v_pos != self.last_scroll_y:
            self.mapper.lock_reverse()
        self._post(messages.scroll(v_pos))
        return v_pos

    def poll(self) -> float | None:
        """Run a coalesced forward sync once its interval has elapsed."""
        return self._forward.poll()

    def flush(self) -> float | None:
        """Run a coalesced forward sync now."""
        return self._forward.flush()

    # ------------------------------------------------------------------
    # Settings and reporting

    def set_page_size(self, page_size: str) -> None:
        if page_size not in tp.PAGE_SIZES:
            logger.warning("Unknown page size '%s', using %s dimensions",
                           page_size, tp.DEFAULT_PAGE_SIZE)
        self.settings.page_size = page_size

    def set_magnification(self, magnification: int) -> None:
        if magnification <= 0:
            raise ValueError(f"Magnification must be positive, got {magnification}")
        self.settings.magnification = magnification

    def zoom_in(self) -> int:
        self.set_magnification(self.settings.magnification + tp.MAGNIFICATION_STEP)
        return self.settings.magnification

    def zoom_out(self) -> int:
        if self.settings.magnification > tp.MAGNIFICATION_STEP:
            self.set_magnification(self.settings.magnification - tp.MAGNIFICATION_STEP)
        return self.settings.magnification

    def status_text(self) -> str:
        if self.document is None:
            return ""
        s = self.settings
        return (f"Page {self.current_page}/{self.document.page_count} "
                f"Size: {s.page_size} Mag: {s.magnification}% DPI: {s.dpi}")

    def export_document(self, path: str) -> None:
        if self.document is None:
            raise PreviewError("No document to export")
        page_list.export_document(self.document, path)

    def cache_stats(self) -> dict:
        return self.glyph_cache.stats()
