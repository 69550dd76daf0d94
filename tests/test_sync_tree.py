"""Tests for the recursive (unversioned) documentation sync."""

from __future__ import annotations

import json
import logging
import typing as typ
from textwrap import dedent

import pytest

from lmms_docs.config import TREE, PipelineConfig
from lmms_docs.converter import rst
from lmms_docs.sync import TreeDocsSync

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from pytest_mock import MockerFixture

ENGINE_TREE = {
    "docs/index.rst": dedent(
        """\
        LMMs Engine
        ===========

        .. toctree::
           :caption: Getting Started

           getting_started/install
        """
    ),
    "docs/getting_started/index.rst": dedent(
        """\
        Getting started
        ---------------

        .. toctree::

           install
        """
    ),
    "docs/getting_started/install.md": "Set `lr` to $10^{-4}$ and <span> <foo>\n",
    "docs/api/reference/models.md": "Models\n",
    "docs/images/logo.md": "never synced\n",
    "docs/notes.txt": "not a doc\n",
}


def _pipeline(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        key="lmms-engine",
        kind=TREE,
        repo="owner/lmms-engine",
        content_dir=tmp_path / "engine",
        title="lmms-engine",
        description="Training framework documentation",
        link_base="/docs/lmms-engine",
        excluded_folders=frozenset({"images"}),
        escape_math=False,
    )


def _run(
    tmp_path: Path, make_client: cabc.Callable[..., typ.Any]
) -> tuple[Path, typ.Any]:
    client = make_client({"main": ENGINE_TREE})
    report = TreeDocsSync(_pipeline(tmp_path), client).run()
    return tmp_path / "engine", report


def test_tree_keeps_directory_layout_at_any_depth(
    tmp_path: Path, make_client: cabc.Callable[..., typ.Any]
) -> None:
    root, report = _run(tmp_path, make_client)

    assert (root / "getting_started" / "install.mdx").exists()
    assert (root / "getting_started" / "index.mdx").exists()
    assert (root / "api" / "reference" / "models.mdx").exists(), (
        "nested folders must be walked without a depth limit"
    )
    assert not (root / "images").exists(), "excluded folders are skipped"
    assert not (root / "notes.mdx").exists()
    assert root / "meta.json" in report.written


def test_root_manifest_lists_index_and_top_level_folders(
    tmp_path: Path, make_client: cabc.Callable[..., typ.Any]
) -> None:
    root, _ = _run(tmp_path, make_client)

    manifest = json.loads((root / "meta.json").read_text(encoding="utf-8"))
    assert manifest == {
        "title": "lmms-engine",
        "description": "Training framework documentation",
        "root": True,
        "pages": ["index", "api", "getting_started"],
    }, f"unexpected manifest {manifest!r}"


def test_rst_toctrees_link_relative_to_page_directory(
    tmp_path: Path, make_client: cabc.Callable[..., typ.Any]
) -> None:
    root, _ = _run(tmp_path, make_client)

    index = (root / "index.mdx").read_text(encoding="utf-8")
    assert index.startswith("---\ntitle: Welcome\n"), "root index is the welcome page"
    assert "# LMMs Engine" in index
    assert "## Getting Started" in index
    assert "- [Install](/docs/lmms-engine/getting_started/install)" in index

    nested = (root / "getting_started" / "index.mdx").read_text(encoding="utf-8")
    assert nested.startswith("---\ntitle: Getting Started\n"), (
        "nested index pages take their folder name"
    )
    assert "- [Install](/docs/lmms-engine/getting_started/install)" in nested


def test_markdown_pages_skip_math_when_disabled(
    tmp_path: Path, make_client: cabc.Callable[..., typ.Any]
) -> None:
    root, _ = _run(tmp_path, make_client)

    install = (root / "getting_started" / "install.mdx").read_text(encoding="utf-8")
    assert "$10^{-4}$" in install, "math escaping is disabled for this pipeline"
    assert "<span> \\<foo\\>" in install, "HTML escaping still applies"


def test_rerun_overwrites_pages(
    tmp_path: Path, make_client: cabc.Callable[..., typ.Any]
) -> None:
    root, _ = _run(tmp_path, make_client)
    page = root / "api" / "reference" / "models.mdx"
    page.write_text("stale\n", encoding="utf-8")

    _run(tmp_path, make_client)

    assert page.read_text(encoding="utf-8").endswith("Models\n")


def test_failed_rst_conversion_writes_source_unconverted(
    tmp_path: Path,
    make_client: cabc.Callable[..., typ.Any],
    mocker: MockerFixture,
    caplog: pytest.LogCaptureFixture,
) -> None:
    source = "Overview\n========\n\nSee the install guide.\n"
    client = make_client({"main": {"docs/index.rst": source}})
    mocker.patch.object(
        rst, "convert_headers", side_effect=RuntimeError("unbalanced underline")
    )

    with caplog.at_level(logging.WARNING, logger="lmms_docs"):
        TreeDocsSync(_pipeline(tmp_path), client).run()

    page = (tmp_path / "engine" / "index.mdx").read_text(encoding="utf-8")
    assert page == '---\ntitle: Welcome\ndescription: ""\n---\n\n' + source, (
        f"expected frontmatter plus the raw RST source, got {page!r}"
    )
    assert "Keeping RST source for 'index'" in caplog.text
    assert "unbalanced underline" in caplog.text
