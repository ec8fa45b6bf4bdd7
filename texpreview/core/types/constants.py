# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TeXPreview constants: trace units, page geometry and wire message names.
"""

# SyncTeX native units per big point at 72 dpi, 100% magnification
SYNCTEX_UNITS_PER_PIXEL = 65781.76

# Vertical bias applied to glue-element anchors during forward sync
GLUE_BASELINE_BIAS = 15

# Fallback when a font declares no unitsPerEm
DEFAULT_UNITS_PER_EM = 1000

# Decimal places used when serializing glyph outlines to path data
PATH_DATA_DECIMALS = 2

MM_TO_INCH = 0.039370079

# Page sizes in millimetres: (width, height)
PAGE_SIZES = {
    "A3": (297, 420),
    "A4": (210, 297),
    "A5": (148, 210),
    "US Letter": (216, 279),
    "US Legal": (216, 356),
}
DEFAULT_PAGE_SIZE = "A4"

# Defaults mirror the editor extension settings
DEFAULT_DPI = 96
DEFAULT_MAGNIFICATION = 100
DEFAULT_PAGE_BUFFER_SIZE = 2
DEFAULT_PAGE_GAP = 10
DEFAULT_SYNC_INTERVAL = 0.05  # seconds between coalesced forward syncs
MAGNIFICATION_STEP = 10

OUTPUT_DIRECTORY = "tp_output"

# Rendering target protocol - outbound message types
MSG_INIT_CANVAS = "initCanvas"
MSG_RESET_GLYPH_BITMAPS = "resetGlyphBitmaps"
MSG_RENDER_PAGE = "renderPage"
MSG_SCROLL = "scroll"

# Rendering target protocol - inbound commands
CMD_PAGE_RENDERED = "pageRendered"
CMD_WEBVIEW_SCROLLED = "webviewScrolled"

# Trace block kinds
BLOCK_HBOX = "h"
BLOCK_GLUE = "g"

# Page render states
PAGE_UNRENDERED = 0
PAGE_QUEUED = 1
PAGE_RENDERING = 2
PAGE_RENDERED = 3

PAGE_STATE_NAMES = ("unrendered", "queued", "rendering", "rendered")
