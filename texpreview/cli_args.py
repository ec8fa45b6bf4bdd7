# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
CLI argument parsing for TeXPreview.

Handles command-line argument definition, parsing, page range specifications,
and output file naming.
"""

from __future__ import annotations

import argparse
import os
from importlib.metadata import PackageNotFoundError, version

from .core import types as tp


def _parse_page_ranges(spec: str) -> set[int]:
    """Parse a page range specification into a set of page numbers.

    Supports single pages (``3``), ranges (``1-5``), and comma-separated
    combinations (``1-3,7,10-12``).  Page numbers are 1-based.

    Args:
        spec: Page range string, e.g. ``"1-5,8,10-12"``

    Returns:
        Set of integer page numbers.

    Raises:
        ValueError: If the specification is malformed.
    """
    pages: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            bounds = part.split("-", 1)
            if not bounds[0].strip() or not bounds[1].strip():
                raise ValueError(f"Invalid page range: '{part}'")
            try:
                start = int(bounds[0])
                end = int(bounds[1])
            except ValueError:
                raise ValueError(f"Invalid page range: '{part}'")
            if start < 1 or end < 1:
                raise ValueError(f"Page numbers must be positive: '{part}'")
            if start > end:
                raise ValueError(f"Invalid page range (start > end): '{part}'")
            pages.update(range(start, end + 1))
        else:
            try:
                num = int(part)
            except ValueError:
                raise ValueError(f"Invalid page number: '{part}'")
            if num < 1:
                raise ValueError(f"Page numbers must be positive: '{part}'")
            pages.add(num)
    if not pages:
        raise ValueError("Empty page range specification")
    return pages


def get_output_base_name(source_file: str) -> str:
    """Output base name (file stem) for a source file."""
    return os.path.splitext(os.path.basename(source_file))[0]


def _get_version() -> str:
    """Installed TeXPreview version."""
    try:
        return version("texpreview")
    except PackageNotFoundError:
        return "unknown"


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the TeXPreview argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="texpreview",
        description="TeXPreview - Incremental LaTeX Preview Engine",
        epilog="Reads <stem>.synctex and <stem>.json produced next to SOURCE by the "
               "compile and decode steps.",
    )

    parser.add_argument(
        "-V", "--version", action="version",
        version=f"TeXPreview {_get_version()}"
    )
    parser.add_argument("source", help="LaTeX source file the build outputs belong to")
    parser.add_argument(
        "--synctex", help="SyncTeX trace file (default: <stem>.synctex)"
    )
    parser.add_argument(
        "--page-list", dest="page_list",
        help="Decoded page list JSON (default: <stem>.json)"
    )
    parser.add_argument(
        "-d", "--device", choices=["png", "none"], default="png",
        help="Rendering target: png writes page images, none only reports (default: png)"
    )
    parser.add_argument(
        "--output-dir", dest="output_dir", default=tp.OUTPUT_DIRECTORY,
        help=f"Specify output directory (default: {tp.OUTPUT_DIRECTORY})"
    )
    parser.add_argument(
        "--dpi", type=int, default=tp.DEFAULT_DPI,
        help=f"Device resolution (default: {tp.DEFAULT_DPI})"
    )
    parser.add_argument(
        "--mag", type=int, default=tp.DEFAULT_MAGNIFICATION,
        help=f"Magnification in percent (default: {tp.DEFAULT_MAGNIFICATION})"
    )
    parser.add_argument(
        "--page-size", dest="page_size", choices=sorted(tp.PAGE_SIZES),
        default=tp.DEFAULT_PAGE_SIZE,
        help=f"Page size (default: {tp.DEFAULT_PAGE_SIZE})"
    )
    parser.add_argument(
        "--page-buffer-size", dest="page_buffer_size", type=int,
        default=tp.DEFAULT_PAGE_BUFFER_SIZE,
        help=f"Pages prefetched in the scroll direction (default: {tp.DEFAULT_PAGE_BUFFER_SIZE})"
    )
    parser.add_argument(
        "--page-gap", dest="page_gap", type=int, default=tp.DEFAULT_PAGE_GAP,
        help=f"Gap between pages in pixels (default: {tp.DEFAULT_PAGE_GAP})"
    )
    parser.add_argument(
        "--pages",
        help="Page range to render (e.g., 1-5, 3, 1-3,7,10-12; default: all)"
    )
    parser.add_argument(
        "--line", type=int,
        help="Report the scroll position for this source line"
    )
    parser.add_argument(
        "--scroll-y", dest="scroll_y", type=float,
        help="Report the source line at this scroll position"
    )
    parser.add_argument(
        "--font-loader", dest="font_loader",
        help="Font loader as module:callable, called with each FontRef"
    )
    parser.add_argument(
        "--antialias",
        choices=["none", "fast", "good", "best", "gray", "subpixel"],
        default="gray",
        help="Set anti-aliasing mode for Cairo rendering (default: gray)"
    )
    parser.add_argument(
        "--export-json", dest="export_json",
        help="Write the decoded page list to this file"
    )
    parser.add_argument(
        "--cache-stats", action="store_true",
        help="Print glyph cache statistics after rendering"
    )
    parser.add_argument(
        "--memory-profile", action="store_true",
        help="Enable memory profiling and print a memory usage report"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    return parser
