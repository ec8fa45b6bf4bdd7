from __future__ import annotations

import pytest

from texpreview.cli_args import _parse_page_ranges, build_argument_parser, get_output_base_name


@pytest.mark.parametrize("spec, expected", [
    ("3", {3}),
    ("1-3", {1, 2, 3}),
    ("1-3,7, 10-11", {1, 2, 3, 7, 10, 11}),
    ("2,2,", {2}),
])
def test_parse_page_ranges(spec: str, expected: set[int]) -> None:
    assert _parse_page_ranges(spec) == expected


@pytest.mark.parametrize("spec", ["", ",", "0", "-2", "5-3", "a", "1-", "1-b"])
def test_parse_page_ranges_rejects(spec: str) -> None:
    with pytest.raises(ValueError):
        _parse_page_ranges(spec)


def test_output_base_name() -> None:
    assert get_output_base_name("papers/thesis.tex") == "thesis"
    assert get_output_base_name("notes") == "notes"


def test_parser_defaults() -> None:
    args = build_argument_parser().parse_args(["doc.tex"])
    assert args.source == "doc.tex"
    assert args.device == "png"
    assert (args.dpi, args.mag, args.page_size) == (96, 100, "A4")
    assert (args.page_buffer_size, args.page_gap) == (2, 10)
    assert args.output_dir == "tp_output"
    assert args.line is None and args.scroll_y is None
    assert not args.cache_stats and not args.memory_profile


def test_parser_options() -> None:
    args = build_argument_parser().parse_args([
        "doc.tex", "-d", "none", "--dpi", "72", "--page-size", "US Letter",
        "--line", "12", "--scroll-y", "40.5", "--synctex", "b.synctex", "--page-list", "b.json",
    ])
    assert args.device == "none"
    assert args.dpi == 72
    assert args.page_size == "US Letter"
    assert (args.line, args.scroll_y) == (12, 40.5)
    assert (args.synctex, args.page_list) == ("b.synctex", "b.json")


def test_parser_rejects_unknown_page_size() -> None:
    with pytest.raises(SystemExit):
        build_argument_parser().parse_args(["doc.tex", "--page-size", "Tabloid"])
