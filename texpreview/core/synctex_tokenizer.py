# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
SyncTeX record tokenizer.

Each line of a SyncTeX trace holds at most one record, identified by its
first character. This module turns one line into one typed record, with a
dedicated matcher per record kind:

    Input:<file>:<path>                           InputRecord
    X Offset:<n> / Y Offset:<n>                   OffsetRecord
    {<page>                                       PageOpenRecord
    }<page>                                       PageCloseRecord
    (<file>,<line>:<left>,<bottom>:<w>,<h>,<d>    HBoxRecord
    [<file>,<line>:<left>,<bottom>:<w>,<h>,<d>    VBoxRecord
    <kind><file>,<line>:<left>,<bottom>[:<n>]     ElementRecord

File numbers, line numbers, page numbers and offsets are unsigned; all box
coordinates are signed. Anything else yields None.
"""

from dataclasses import dataclass

# Record leader characters
L_PAREN = "("
L_SQR_BRACKET = "["
L_CRLY_BRACKET = "{"
R_CRLY_BRACKET = "}"
COLON = ":"
COMMA = ","
MINUS = "-"

INPUT_PREFIX = "Input:"
OFFSET_SUFFIX = " Offset:"

DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class InputRecord:
    file_num: int
    path: str


@dataclass(frozen=True)
class OffsetRecord:
    axis: str      # "x" or "y"
    value: int     # native units


@dataclass(frozen=True)
class PageOpenRecord:
    page: int


@dataclass(frozen=True)
class PageCloseRecord:
    page: int


@dataclass(frozen=True)
class HBoxRecord:
    file_num: int
    line: int
    left: int
    bottom: int
    width: int
    height: int
    depth: int


@dataclass(frozen=True)
class VBoxRecord:
    file_num: int
    line: int
    left: int
    bottom: int
    width: int
    height: int
    depth: int


@dataclass(frozen=True)
class ElementRecord:
    kind: str
    file_num: int
    line: int
    left: int
    bottom: int
    extra: int | None


class LineScanner:
    """Cursor over a single trace line."""

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def expect(self, ch: str) -> bool:
        if self.pos < len(self.text) and self.text[self.pos] == ch:
            self.pos += 1
            return True
        return False

    def unsigned(self) -> int | None:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in DIGITS:
            self.pos += 1
        if self.pos == start:
            return None
        return int(self.text[start:self.pos])

    def signed(self) -> int | None:
        start = self.pos
        negative = self.expect(MINUS)
        value = self.unsigned()
        if value is None:
            self.pos = start
            return None
        return -value if negative else value


def _link_and_point(scanner: LineScanner) -> tuple[int, int, int, int] | None:
    """Parse ``<file>,<line>:<left>,<bottom>`` shared by box and element records."""
    file_num = scanner.unsigned()
    if file_num is None or not scanner.expect(COMMA):
        return None
    line = scanner.unsigned()
    if line is None or not scanner.expect(COLON):
        return None
    left = scanner.signed()
    if left is None or not scanner.expect(COMMA):
        return None
    bottom = scanner.signed()
    if bottom is None:
        return None
    return file_num, line, left, bottom


def _box_fields(text: str) -> tuple[int, int, int, int, int, int, int] | None:
    scanner = LineScanner(text, 1)
    head = _link_and_point(scanner)
    if head is None or not scanner.expect(COLON):
        return None
    width = scanner.signed()
    if width is None or not scanner.expect(COMMA):
        return None
    height = scanner.signed()
    if height is None or not scanner.expect(COMMA):
        return None
    depth = scanner.signed()
    if depth is None:
        return None
    return head + (width, height, depth)


def match_input(text: str) -> InputRecord | None:
    if not text.startswith(INPUT_PREFIX):
        return None
    scanner = LineScanner(text, len(INPUT_PREFIX))
    file_num = scanner.unsigned()
    if file_num is None or not scanner.expect(COLON) or scanner.at_end():
        return None
    return InputRecord(file_num, text[scanner.pos:])


def match_offset(text: str) -> OffsetRecord | None:
    if len(text) < 2 or text[0] not in "XY" or not text.startswith(OFFSET_SUFFIX, 1):
        return None
    scanner = LineScanner(text, 1 + len(OFFSET_SUFFIX))
    value = scanner.unsigned()
    if value is None:
        return None
    return OffsetRecord(text[0].lower(), value)


def match_page_open(text: str) -> PageOpenRecord | None:
    if not text.startswith(L_CRLY_BRACKET):
        return None
    scanner = LineScanner(text, 1)
    page = scanner.unsigned()
    if page is None or not scanner.at_end():
        return None
    return PageOpenRecord(page)


def match_page_close(text: str) -> PageCloseRecord | None:
    if not text.startswith(R_CRLY_BRACKET):
        return None
    scanner = LineScanner(text, 1)
    page = scanner.unsigned()
    if page is None or not scanner.at_end():
        return None
    return PageCloseRecord(page)


def match_hbox(text: str) -> HBoxRecord | None:
    if not text.startswith(L_PAREN):
        return None
    fields = _box_fields(text)
    return HBoxRecord(*fields) if fields else None


def match_vbox(text: str) -> VBoxRecord | None:
    if not text.startswith(L_SQR_BRACKET):
        return None
    fields = _box_fields(text)
    return VBoxRecord(*fields) if fields else None


def match_element(text: str) -> ElementRecord | None:
    if len(text) < 2:
        return None
    scanner = LineScanner(text, 1)
    head = _link_and_point(scanner)
    if head is None:
        return None
    extra = None
    if scanner.expect(COLON):
        extra = scanner.signed()
    return ElementRecord(text[0], *head, extra)


# leader character -> matcher; anything else is tried as an element record
_MATCHERS = {
    "I": match_input,
    "X": match_offset,
    "Y": match_offset,
    L_CRLY_BRACKET: match_page_open,
    R_CRLY_BRACKET: match_page_close,
    L_PAREN: match_hbox,
    L_SQR_BRACKET: match_vbox,
}


def tokenize_line(line: str):
    """Return the record on ``line``, or None if it holds no known record."""
    text = line.rstrip("\r")
    if not text:
        return None
    matcher = _MATCHERS.get(text[0])
    if matcher is not None:
        return matcher(text)
    return match_element(text)
