# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Font loading boundary.

Outline parsing belongs to an external glyph-outline library. Any object
with the shape of GlyphOutlineFont works; a loader is a callable taking a
FontRef and returning such an object (or raising). Loaders are plugged in
from the command line as ``module:callable``.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Protocol

from . import types as tp
from .error import FontLoadError

logger = logging.getLogger(__name__)


class OutlineGlyph(Protocol):
    left_side_bearing: float | None

    def bounding_box(self) -> tuple[float, float, float, float]:
        """(x1, y1, x2, y2) in font units."""
        ...

    def get_path(self, x: float, y: float, size: float) -> tp.Path:
        """Outline at ``size`` pixels with its origin at (x, y), y axis down."""
        ...


class GlyphOutlineFont(Protocol):
    units_per_em: int | None

    def get_glyph(self, index: int) -> OutlineGlyph:
        ...


FontLoader = Callable[[tp.FontRef], Any]


def load_fonts(document: tp.Document, loader: FontLoader | None) -> dict[int, Any]:
    """
    Load every font the document references.

    A font that fails to load is logged and left out; its glyphs are
    skipped at render time.

    Returns:
        Font number -> loaded font
    """
    fonts: dict[int, Any] = {}
    if loader is None:
        if document.fonts:
            logger.info("No font loader configured, %d fonts skipped", len(document.fonts))
        return fonts

    for font_ref in document.fonts:
        try:
            fonts[font_ref.font_num] = loader(font_ref)
        except Exception as exc:
            logger.warning("Error loading font %s (%s): %s",
                           font_ref.font_name, font_ref.font_path, exc)
    logger.info("Loaded %d of %d fonts", len(fonts), len(document.fonts))
    return fonts


def resolve_loader(spec: str) -> FontLoader:
    """
    Import a font loader given as ``package.module:callable``.

    Raises:
        FontLoadError: If the module or attribute cannot be found.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise FontLoadError(f"Font loader must be given as module:callable, got '{spec}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise FontLoadError(f"Cannot import font loader module '{module_name}': {exc}") from exc
    loader = getattr(module, attr, None)
    if not callable(loader):
        raise FontLoadError(f"'{attr}' in '{module_name}' is not callable")
    return loader
