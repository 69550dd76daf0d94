"""Unit tests for the RST-to-Markdown converter."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

from lmms_docs.converter import rst
from lmms_docs.converter.rst import (
    convert_doc_directives,
    convert_headers,
    convert_inline_formatting,
    convert_rst_to_markdown,
    convert_toctree,
    escape_curly_braces,
    remove_rst_directives,
    toctree_entry_title,
    try_convert_rst,
)

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

TOCTREE_SOURCE = dedent(
    """\
    .. toctree::
       :maxdepth: 2
       :caption: Guide

       getting_started/install
    """
)


def test_toctree_becomes_caption_heading_and_links() -> None:
    result = convert_rst_to_markdown(TOCTREE_SOURCE)
    assert result == (
        "## Guide\n\n- [Install](/docs/lmms-engine/getting_started/install)"
    ), f"unexpected toctree conversion: {result!r}"


def test_toctree_resolves_entries_against_current_dir() -> None:
    source = ".. toctree::\n\n   faq_page\n   /reference/api\n\nAfter.\n"
    result = convert_toctree(source, "user_guide", "/docs/x/")
    assert "- [Faq Page](/docs/x/user_guide/faq_page)" in result
    assert "- [Api](/docs/x/reference/api)" in result, (
        "absolute entries must ignore the current directory"
    )
    assert result.rstrip().endswith("After."), "text after the block must survive"
    assert "##" not in result, "no caption means no heading"


def test_toctree_entry_title_uses_last_segment() -> None:
    assert toctree_entry_title("user_guide/faq_page") == "Faq Page"


def test_headers_use_underline_character_for_level() -> None:
    source = "Title\n=====\n\nSection\n-------\n\nSub\n~~~\n\nText"
    assert convert_headers(source) == "# Title\n\n## Section\n\n### Sub\n\nText"


def test_stray_underlines_are_dropped() -> None:
    assert convert_headers("\n=====\nText") == "\n\nText"


def test_doc_roles_become_links() -> None:
    result = convert_doc_directives("See :doc:`guides/quick_start` first.")
    assert result == "See [quick_start](guides/quick_start) first."


def test_inline_literals_and_hyperlinks() -> None:
    source = (
        "Run ``pip install`` or read `the docs <https://example.invalid>`_. **bold**"
    )
    assert convert_inline_formatting(source) == (
        "Run `pip install` or read [the docs](https://example.invalid). **bold**"
    )


def test_ref_roles_directives_and_bullet_only_lines_are_removed() -> None:
    source = "See :ref:`label` here.\n.. note::\n*\nKeep"
    assert remove_rst_directives(source) == "See  here.\n\n\nKeep"


def test_curly_braces_escaped_outside_code_fences_only() -> None:
    source = "Use {x}\n```\ndict = {}\n```\nand }"
    assert escape_curly_braces(source) == (
        "Use \\{x\\}\n```\ndict = {}\n```\nand \\}"
    )


def test_conversion_is_idempotent_without_directives() -> None:
    source = "Title\n=====\n\nUse ``code`` and {x} in `docs <https://e.invalid>`_.\n"
    once = convert_rst_to_markdown(source)
    twice = convert_rst_to_markdown(once)
    assert once == twice, f"second pass changed output: {once!r} -> {twice!r}"


def test_failing_stage_reports_error_and_keeps_source(mocker: MockerFixture) -> None:
    mocker.patch.object(rst, "convert_headers", side_effect=ValueError("boom"))
    result = try_convert_rst("Title\n=====\n")
    assert result.error is not None, "expected a conversion error"
    assert result.error.stage == "headers"
    assert result.text_or("fallback") == "fallback"
    assert convert_rst_to_markdown("Title\n=====\n") == "Title\n=====\n", (
        "the composed conversion must fall back to the original text"
    )
