r"""Convert the reStructuredText subset used by lmms-engine docs to Markdown.

Only the constructs that appear upstream are handled: ``toctree`` blocks,
underlined section titles, ``:doc:`` and ``:ref:`` roles, inline literals and
named hyperlinks. Everything else is passed through or stripped. The composed
conversion never raises; a failing stage makes it return the input unchanged.

Examples
--------
>>> from lmms_docs.converter.rst import convert_rst_to_markdown
>>> print(convert_rst_to_markdown("Install\n=======\n\nRun ``pip``."))
# Install
<BLANKLINE>
Run `pip`.
"""

from __future__ import annotations

import re

from lmms_docs._constants import DEFAULT_LINK_BASE
from lmms_docs.log import get_logger

from .fences import map_outside_fences
from .models import ConversionResult, run_stages

logger = get_logger(__name__)

TOCTREE_PATTERN = re.compile(
    r"^[ \t]*\.\. toctree::[ \t]*\n((?:(?:[ \t]+[^\n]*)?\n)*?)(?=\S|\n\S|\n*\Z)",
    re.MULTILINE,
)
HEADER_PATTERNS = (
    (re.compile(r"^(.+)\n=+[ \t]*$", re.MULTILINE), "#"),
    (re.compile(r"^(.+)\n-+[ \t]*$", re.MULTILINE), "##"),
    (re.compile(r"^(.+)\n~+[ \t]*$", re.MULTILINE), "###"),
)
UNDERLINE_PATTERN = re.compile(r"^[=\-~]+[ \t]*$", re.MULTILINE)
DOC_ROLE_PATTERN = re.compile(r":doc:`([^`]+)`")
LABELLED_TARGET_PATTERN = re.compile(r"^(.*?)\s*<([^>]+)>$")
INLINE_LITERAL_PATTERN = re.compile(r"``([^`]+)``")
HYPERLINK_PATTERN = re.compile(r"`([^`<]+?)\s*<([^>`]+)>`_{1,2}")
REF_ROLE_PATTERN = re.compile(r":ref:`[^`]+`")
DIRECTIVE_LINE_PATTERN = re.compile(r"^[ \t]*\.\. [a-z][a-z0-9-]*::.*$", re.MULTILINE)
BULLET_ONLY_PATTERN = re.compile(r"^\*[ \t]*$", re.MULTILINE)
BRACE_PATTERN = re.compile(r"(?<!\\)([{}])")
WORD_START_PATTERN = re.compile(r"\b\w")


def _title_case(text: str) -> str:
    return WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), text)


def toctree_entry_title(entry: str) -> str:
    """Return the link label for a toctree entry.

    >>> toctree_entry_title("user_guide/faq_page")
    'Faq Page'
    """
    return _title_case(entry.rstrip("/").split("/")[-1].replace("_", " "))


def _resolve_entry(entry: str, current_dir: str) -> str:
    if entry.startswith("/"):
        return entry[1:]
    if current_dir:
        return f"{current_dir.strip('/')}/{entry}"
    return entry


def convert_toctree(
    content: str, current_dir: str = "", link_base: str = DEFAULT_LINK_BASE
) -> str:
    """Rewrite ``.. toctree::`` blocks into a heading plus a bullet list of links.

    Parameters
    ----------
    content : str
        RST source.
    current_dir : str, optional
        Directory of the document relative to the docs root (``""`` at the
        root); relative entries are resolved against it.
    link_base : str, optional
        URL prefix prepended to every resolved entry path.

    Returns
    -------
    str
        The source with each toctree replaced by ``## caption`` (when a
        ``:caption:`` option is present) and ``- [Title](link)`` lines.
    """
    base = link_base.rstrip("/")

    def _replace(match: re.Match[str]) -> str:
        lines = [line.strip() for line in match.group(1).split("\n")]
        lines = [line for line in lines if line]
        options = [line for line in lines if line.startswith(":")]
        entries = [line for line in lines if not line.startswith(":")]
        caption = next(
            (
                option.removeprefix(":caption:").strip()
                for option in options
                if option.startswith(":caption:")
            ),
            "",
        )

        result = f"## {caption}\n\n" if caption else ""
        for entry in entries:
            target = _resolve_entry(entry, current_dir)
            result += f"- [{toctree_entry_title(entry)}]({base}/{target})\n"
        return result + "\n"

    return TOCTREE_PATTERN.sub(_replace, content)


def convert_headers(content: str) -> str:
    """Turn ``=``, ``-`` and ``~`` underlined titles into ATX headings."""
    result = content
    for pattern, marker in HEADER_PATTERNS:
        result = pattern.sub(lambda match, m=marker: f"{m} {match.group(1)}", result)
    return UNDERLINE_PATTERN.sub("", result)


def convert_doc_directives(content: str) -> str:
    """Turn ``:doc:`path``` roles into links labelled with the last path segment."""

    def _replace(match: re.Match[str]) -> str:
        target = match.group(1)
        labelled = LABELLED_TARGET_PATTERN.match(target)
        if labelled and labelled.group(1):
            return f"[{labelled.group(1)}]({labelled.group(2)})"
        title = target.split("/")[-1] or target
        return f"[{title}]({target})"

    return DOC_ROLE_PATTERN.sub(_replace, content)


def convert_inline_formatting(content: str) -> str:
    """Normalise inline literals and named hyperlinks; bold is already Markdown."""
    result = INLINE_LITERAL_PATTERN.sub(r"`\1`", content)
    return HYPERLINK_PATTERN.sub(r"[\1](\2)", result)


def remove_rst_directives(content: str) -> str:
    """Drop ``:ref:`` roles, leftover directive lines and bullet-only lines."""
    result = REF_ROLE_PATTERN.sub("", content)
    result = DIRECTIVE_LINE_PATTERN.sub("", result)
    return BULLET_ONLY_PATTERN.sub("", result)


def escape_curly_braces(content: str) -> str:
    r"""Escape ``{`` and ``}`` outside fenced code so MDX reads them literally.

    Braces that are already escaped are left alone.

    >>> escape_curly_braces("Use {x} here")
    'Use \\{x\\} here'
    """
    return map_outside_fences(content, lambda line: BRACE_PATTERN.sub(r"\\\1", line))


def try_convert_rst(
    source: str, current_dir: str = "", *, link_base: str = DEFAULT_LINK_BASE
) -> ConversionResult:
    """Run the RST-to-Markdown stages, returning the text or the failing stage."""
    return run_stages(
        source,
        (
            ("toctree", lambda text: convert_toctree(text, current_dir, link_base)),
            ("headers", convert_headers),
            ("doc-roles", convert_doc_directives),
            ("inline", convert_inline_formatting),
            ("directives", remove_rst_directives),
            ("braces", escape_curly_braces),
            ("trim", str.strip),
        ),
    )


def convert_rst_to_markdown(
    source: str, current_dir: str = "", *, link_base: str = DEFAULT_LINK_BASE
) -> str:
    """Convert ``source`` to Markdown, returning it unchanged if conversion fails."""
    result = try_convert_rst(source, current_dir, link_base=link_base)
    if result.error is not None:
        logger.warning("RST conversion failed, keeping source: %s", result.error)
    return result.text_or(source)


__all__ = [
    "convert_doc_directives",
    "convert_headers",
    "convert_inline_formatting",
    "convert_rst_to_markdown",
    "convert_toctree",
    "escape_curly_braces",
    "remove_rst_directives",
    "toctree_entry_title",
    "try_convert_rst",
]
