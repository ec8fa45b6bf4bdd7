#!/usr/bin/env python3
# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TeXPreview - Incremental LaTeX Preview Engine

Main entry point. Drives a preview session from the command line against the
outputs of a LaTeX build: the SyncTeX trace and the decoded page list.

Architecture Overview:
    - Sync Index Builder: SyncTeX trace -> blocks sorted by line and position
    - Glyph Path Cache: glyph references -> positioned vector paths
    - Page Render Scheduler: windowed, acknowledgement-chained page rendering
    - Position Mapper: source line <-> scroll position
    - Preview Session: owns all of the above for one document

Usage:
    texpreview paper.tex
    texpreview paper.tex --pages 1-3 --output-dir previews
    texpreview paper.tex -d none --line 42 --scroll-y 1200

License: AGPL-3.0-or-later
"""

import logging
import os
import sys

from .cli_args import _parse_page_ranges, build_argument_parser
from .cli_runner import run


def main() -> int:
    """
    Main entry point for TeXPreview.

    Returns:
        Exit code: 0 for success, 1 for error
    """
    parser = build_argument_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate --pages format early
    page_filter = None
    if args.pages:
        try:
            page_filter = _parse_page_ranges(args.pages)
        except ValueError as e:
            print(f"TeXPreview Error: {e}")
            print("Expected format: 1-5, 3, 1-3,7,10-12")
            return 1

    if not os.path.isfile(args.source):
        print(f"TeXPreview Error: Source file '{args.source}' not found.")
        return 1

    try:
        return run(args, page_filter)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 1


if __name__ == "__main__":
    sys.exit(main())
