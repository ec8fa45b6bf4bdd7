# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Structured page list input and export.

The external DVI decoder writes the page list as JSON next to the compiled
output. Decoding failures are generation-fatal and raise GenerationError
carrying the offending text, so the caller can show what the decoder
produced.
"""

from __future__ import annotations

import json
import logging
import os

from . import types as tp
from .error import GenerationError

logger = logging.getLogger(__name__)

SYNCTEX_SUFFIX = ".synctex"
PAGE_LIST_SUFFIX = ".json"


def decode(text: str) -> tp.Document:
    """Decode page list JSON into a Document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Page list is not valid JSON: {exc}", output=text) from exc
    if not isinstance(data, dict):
        raise GenerationError("Page list must be a JSON object", output=text)
    try:
        return tp.Document.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise GenerationError(f"Malformed page list: missing or invalid {exc}", output=text) from exc


def load_document(path: str) -> tp.Document:
    """Read and decode a page list file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise GenerationError(f"Cannot read page list '{path}': {exc}") from exc
    document = decode(text)
    logger.info("Decoded %s: %d pages, %d fonts", path, document.page_count, len(document.fonts))
    return document


def export_document(document: tp.Document, path: str) -> None:
    """Write the page list as indented JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document.to_dict(), f, indent=2)
    logger.info("Exported document to %s", path)


def default_paths(source_file: str) -> tuple[str, str]:
    """Trace file and page list paths that sit next to a source file."""
    stem = os.path.splitext(source_file)[0]
    return stem + SYNCTEX_SUFFIX, stem + PAGE_LIST_SUFFIX


def read_trace(path: str) -> str | None:
    """Trace file text, or None if there is no readable trace file."""
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read synctex file '%s': %s", path, exc)
        return None


def load_build_outputs(source_file: str, synctex_path: str | None = None,
                       page_list_path: str | None = None) -> tuple[tp.Document, str | None]:
    """
    Load the decoder's page list and the trace text for a source file.

    Returns:
        (document, trace_text) - trace_text is None when no trace exists

    Raises:
        GenerationError: If the page list is missing or cannot be decoded.
    """
    default_trace, default_pages = default_paths(source_file)
    document = load_document(page_list_path or default_pages)
    trace_text = read_trace(synctex_path or default_trace)
    return document, trace_text
