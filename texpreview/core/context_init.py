# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Preview session initialization.

Holds the preview settings and creates PreviewSession objects wired to a
rendering target.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from . import types as tp
from .messages import MessageChannel, RenderTarget
from .session import PreviewSession

logger = logging.getLogger(__name__)


@dataclass
class PreviewSettings:
    """
    Preview parameters.

    Attributes:
        dpi: Device resolution
        magnification: Magnification in percent
        page_size: Name from PAGE_SIZES; unknown names use A4 dimensions
        page_buffer_size: Pages prefetched in the scroll direction
        page_gap: Vertical gap between pages in device pixels
        debug_mode: Log scheduler and sync activity at DEBUG level
        sync_interval: Minimum seconds between forward syncs
    """
    dpi: int = tp.DEFAULT_DPI
    magnification: int = tp.DEFAULT_MAGNIFICATION
    page_size: str = tp.DEFAULT_PAGE_SIZE
    page_buffer_size: int = tp.DEFAULT_PAGE_BUFFER_SIZE
    page_gap: int = tp.DEFAULT_PAGE_GAP
    debug_mode: bool = False
    sync_interval: float = tp.DEFAULT_SYNC_INTERVAL

    @property
    def page_width_pixels(self) -> int:
        return tp.page_pixel_size(self.page_size, self.dpi, self.magnification)[0]

    @property
    def page_height_pixels(self) -> int:
        return tp.page_pixel_size(self.page_size, self.dpi, self.magnification)[1]

    @property
    def margin_pixels(self) -> int:
        return tp.margin_pixels(self.dpi, self.magnification)

    def validate(self) -> str | None:
        """Return an error message for out-of-range values, or None."""
        if self.dpi <= 0:
            return f"DPI must be positive, got {self.dpi}"
        if self.magnification <= 0:
            return f"Magnification must be positive, got {self.magnification}"
        if self.page_buffer_size < 0:
            return f"Page buffer size cannot be negative, got {self.page_buffer_size}"
        if self.page_gap < 0:
            return f"Page gap cannot be negative, got {self.page_gap}"
        return None


def create_session(settings: PreviewSettings | None = None, target: RenderTarget | None = None,
                   reveal_line: Callable[[int], None] | None = None,
                   clock: Callable[[], float] = time.monotonic) -> PreviewSession:
    """
    Create a preview session.

    Args:
        settings: Preview settings (defaults if None)
        target: Rendering target; a MessageChannel is created if None
        reveal_line: Called with the source line found by reverse sync
        clock: Time source for forward sync rate limiting

    Returns:
        PreviewSession
    """
    settings = settings or PreviewSettings()
    if settings.page_size not in tp.PAGE_SIZES:
        logger.warning("Unknown page size '%s', using %s dimensions",
                       settings.page_size, tp.DEFAULT_PAGE_SIZE)
    if settings.debug_mode:
        logging.getLogger("texpreview").setLevel(logging.DEBUG)
    return PreviewSession(settings, target if target is not None else MessageChannel(),
                          reveal_line=reveal_line, clock=clock)
