# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later
from __future__ import annotations

"""
Error types.

Per-item failures (a malformed trace line, a missing glyph, a font that
will not load, one page failing to render) are logged and skipped where they
happen and never leave the component. Only whole-generation failures reach
the caller, as GenerationError.
"""


class PreviewError(Exception):
    """Base class for TeXPreview errors."""
    pass


class SyncTexError(PreviewError):
    """The trace file could not be parsed at all. Scroll sync is disabled."""
    pass


class GenerationError(PreviewError):
    """A document generation attempt failed as a whole.

    Args:
        message: Summary of what failed.
        output: Captured output of the external tool or decoder, if any.
    """

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class FontLoadError(PreviewError):
    """A single font could not be loaded."""
    pass


class ChannelFullError(PreviewError):
    """The outbound message channel to the rendering target is full."""
    pass
