# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TeXPreview execution logic.

Sets up the rendering target and the preview session, loads the build
outputs, renders the requested pages and answers sync queries.
"""

import os

from .cli_args import get_output_base_name
from .core import messages
from .core import types as tp
from .core.context_init import PreviewSettings, create_session
from .core.error import FontLoadError, GenerationError, PreviewError
from .core.fonts import resolve_loader
from .core.messages import MessageChannel
from .devices.png.png import PngRenderTarget
from .utils.memory import MemoryProfiler


def _setup_target(args, page_filter):
    """Create the rendering target selected with -d/--device."""
    if args.device == "png":
        return PngRenderTarget(
            output_dir=args.output_dir,
            base_name=get_output_base_name(args.source),
            image_dir=os.path.dirname(os.path.abspath(args.source)),
            page_filter=page_filter,
            antialias=args.antialias,
        )
    return MessageChannel()


def _inbound_from(target):
    """Collect what the target has to say back to the session."""
    if isinstance(target, PngRenderTarget):
        return target.take_inbound()
    # no real surface behind a bare channel: every render succeeds at once
    return [messages.page_rendered(m["value"]["pageIndex"])
            for m in target.drain() if m["type"] == tp.MSG_RENDER_PAGE]


def pump(session, target) -> int:
    """Feed target acknowledgements back until the render chain settles.

    Returns:
        Number of inbound messages handled.
    """
    handled = 0
    inbound = _inbound_from(target)
    while inbound:
        for message in inbound:
            session.handle_message(message)
            handled += 1
        inbound = _inbound_from(target)
    return handled


def _render_pages(session, target, page_filter):
    page_count = session.document.page_count
    wanted = sorted(page_filter) if page_filter is not None else range(1, page_count + 1)
    for page_num in wanted:
        if page_num > page_count:
            print(f"Warning: page {page_num} is beyond the last page ({page_count})")
            continue
        session.render_from(page_num - 1, 1)
        pump(session, target)


def _print_cache_stats(session, target):
    stats = session.cache_stats()
    print(f"   Glyph path cache: {stats['hits']} hits, {stats['misses']} misses, "
          f"{stats['hit_rate']:.1%} hit rate, {stats['entries']} entries, "
          f"{stats['extractions']} extractions")
    if isinstance(target, PngRenderTarget):
        stats = target.bitmap_cache.stats()
        print(f"   Glyph bitmap cache: {stats['hits']} hits, {stats['misses']} misses, "
              f"{stats['hit_rate']:.1%} hit rate, {stats['entries']} entries, "
              f"{stats['memory_bytes']/1024/1024:.1f}MB used")


def run(args, page_filter):
    """Core TeXPreview execution logic.

    Args:
        args: Parsed CLI arguments.
        page_filter: Set of page numbers to render (or None for all).

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    settings = PreviewSettings(
        dpi=args.dpi,
        magnification=args.mag,
        page_size=args.page_size,
        page_buffer_size=args.page_buffer_size,
        page_gap=args.page_gap,
        debug_mode=args.verbose,
    )
    error = settings.validate()
    if error:
        print(f"TeXPreview Error: {error}")
        return 1

    font_loader = None
    if args.font_loader:
        try:
            font_loader = resolve_loader(args.font_loader)
        except FontLoadError as e:
            print(f"TeXPreview Error: {e}")
            return 1

    memory_profiler = MemoryProfiler() if args.memory_profile else None

    target = _setup_target(args, page_filter)
    session = create_session(settings, target)

    print(f"Processing {args.source}")
    try:
        session.regenerate_from_files(args.source, args.synctex, args.page_list, font_loader)
    except GenerationError as e:
        print(f"TeXPreview Error: {e}")
        if e.output and args.verbose:
            print(e.output)
        print("Could not generate the preview - review the log for errors.")
        return 1
    pump(session, target)

    if memory_profiler:
        memory_profiler.take_snapshot("document_loaded", session)

    _render_pages(session, target, page_filter)
    rendered = session.scheduler.stats()['rendered']
    print(f"Rendered {rendered}/{session.document.page_count} pages")
    if isinstance(target, PngRenderTarget) and target.written:
        print(f"Output written to {os.path.abspath(args.output_dir)}")

    # reverse first: a forward sync locks the next reverse sync
    if args.scroll_y is not None:
        line = session.on_webview_scrolled(args.scroll_y)
        pump(session, target)
        if line:
            print(f"Scroll position {args.scroll_y:g} -> line {line}")
        else:
            print(f"Scroll position {args.scroll_y:g} -> no line found")

    if args.line is not None:
        v_pos = session.scroll_to_line(args.line)
        pump(session, target)
        if v_pos is not None:
            print(f"Line {args.line} -> scroll position {v_pos:g}")
        else:
            print(f"Line {args.line} -> no position found")

    if args.export_json:
        try:
            session.export_document(args.export_json)
        except (OSError, PreviewError) as e:
            print(f"TeXPreview Error: Cannot export document: {e}")
            return 1
        print(f"Document exported to {args.export_json}")

    print(session.status_text())

    if args.cache_stats:
        _print_cache_stats(session, target)

    if memory_profiler:
        memory_profiler.take_snapshot("run_complete", session)
        print("\n" + memory_profiler.generate_report())

    return 0
