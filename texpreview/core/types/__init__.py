# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TeXPreview Types Package - Public API

Re-exports every core type and constant so callers can use the single
namespace import pattern: ``from ..core import types as tp``

**Internal Module Organization:**
- constants.py: trace units, page geometry, wire message names, render states
- sync.py: PositionBlock, Offset, SyncIndex
- page.py: structured page list (Document, Page, PageFont, ...) and page geometry
- glyph.py: glyph outline elements, GlyphPathEntry, GlyphPlacement
"""

from .constants import *
from .sync import *
from .page import *
from .glyph import *
