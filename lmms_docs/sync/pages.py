"""Per-page helpers shared by the sync pipelines.

These functions derive slugs and titles from upstream filenames, run the
converters with an explicit fallback to the untouched source, and persist
pages and manifests as UTF-8 files.
"""

from __future__ import annotations

import json
import posixpath
import re
import typing as typ

from lmms_docs._constants import PAGE_SUFFIX
from lmms_docs.converter import (
    render_frontmatter,
    try_convert_rst,
    try_prepare_markdown,
)
from lmms_docs.log import get_logger
from lmms_docs.models import DocMetadata
from lmms_docs.navigation import folder_title

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

MARKDOWN_PATTERN = re.compile(r"\.mdx?$", re.IGNORECASE)
DOC_SOURCE_PATTERN = re.compile(r"\.(?:rst|mdx?)$", re.IGNORECASE)
INDEX_NAMES = frozenset({"index.rst", "index.md", "index.mdx"})


def is_markdown(name: str) -> bool:
    return bool(MARKDOWN_PATTERN.search(name))


def is_doc_source(name: str) -> bool:
    return bool(DOC_SOURCE_PATTERN.search(name))


def is_rst(name: str) -> bool:
    return name.lower().endswith(".rst")


def _strip_extension(name: str) -> str:
    return DOC_SOURCE_PATTERN.sub("", name)


def slug_for(relative_path: str) -> str:
    """Return the page slug for a docs-relative path.

    ``README.md`` (any case) maps to ``index``; otherwise the extension is
    stripped and the path lower-cased.

    >>> slug_for("README.md")
    'index'
    >>> slug_for("Getting_Started/Install.rst")
    'getting_started/install'
    """
    normalized = relative_path.replace("\\", "/").strip("/")
    directory, name = posixpath.split(normalized)
    stem = "index" if name.lower() == "readme.md" else _strip_extension(name)
    slug = f"{directory}/{stem}" if directory else stem
    return slug.lower()


def title_for(
    name: str, parent_dir: str | None = None, *, root_index_title: str = "Welcome"
) -> str:
    """Return the display title for a source file.

    ``README.md`` is titled ``Index``. An ``index`` page is ``root_index_title`` at
    the docs root and takes its parent directory's name when nested.

    >>> title_for("model_guide.md")
    'Model Guide'
    >>> title_for("index.rst")
    'Welcome'
    >>> title_for("index.rst", "user_guide")
    'User Guide'
    """
    lowered = name.lower()
    if lowered == "readme.md":
        return "Index"
    if lowered in INDEX_NAMES:
        return folder_title(parent_dir) if parent_dir else root_index_title
    return folder_title(_strip_extension(name))


def render_page(
    source: str,
    metadata: DocMetadata,
    *,
    rst: bool = False,
    current_dir: str = "",
    link_base: str | None = None,
    math: bool = True,
) -> str:
    """Convert ``source`` into an MDX page with frontmatter.

    Each conversion step that fails leaves its input untouched, so a page
    whose markup trips the converter is still written, unconverted.
    """
    body = source
    if rst:
        options = {"link_base": link_base} if link_base else {}
        result = try_convert_rst(body, current_dir, **options)
        if result.error is not None:
            logger.warning(
                "Keeping RST source for '%s': %s", metadata.slug, result.error
            )
        body = result.text_or(body)

    prepared = try_prepare_markdown(body, math=math)
    if prepared.error is not None:
        logger.warning("Keeping Markdown for '%s': %s", metadata.slug, prepared.error)
    body = prepared.text_or(body)
    return render_frontmatter(metadata) + body


def page_path(root: Path, slug: str) -> Path:
    *parents, name = slug.split("/")
    return root.joinpath(*parents, f"{name}{PAGE_SUFFIX}")


def write_text(path: Path, content: str) -> Path:
    """Write ``content`` to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_json(path: Path, payload: object) -> Path:
    """Write ``payload`` as indented JSON."""
    return write_text(path, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


__all__ = [
    "is_doc_source",
    "is_markdown",
    "is_rst",
    "page_path",
    "render_page",
    "slug_for",
    "title_for",
    "write_json",
    "write_text",
]
