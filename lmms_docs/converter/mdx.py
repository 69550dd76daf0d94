r"""Make Markdown safe for the MDX renderer and wrap it with frontmatter.

MDX parses ``<word>`` as JSX, ``$...$`` collides with math plugins, and
Markdown images make the renderer probe remote dimensions at build time. The
helpers here escape pseudo-tags, fence math, pin image sizes and prepend the
``title``/``description`` frontmatter block.

Examples
--------
>>> from lmms_docs.converter.mdx import escape_html_tags
>>> escape_html_tags("<div> <foo> <br>")
'<div> \\<foo\\> <br />'
"""

from __future__ import annotations

import re
import typing as typ

from lmms_docs._constants import IMAGE_HEIGHT, IMAGE_WIDTH

from .fences import is_fence, map_outside_fences
from .models import ConversionResult, Stage, run_stages

if typ.TYPE_CHECKING:
    from lmms_docs.models import DocMetadata

HTML_TAGS = frozenset(
    {
        "div",
        "span",
        "p",
        "a",
        "img",
        "ul",
        "ol",
        "li",
        "table",
        "tr",
        "td",
        "th",
        "br",
        "hr",
    }
)
VOID_TAGS = frozenset({"br", "hr", "img"})

ANGLE_URL_PATTERN = re.compile(r"<(https?://[^>\s]+)>")
LESS_THAN_DIGIT_PATTERN = re.compile(r"(?<!\\)<(\d)")
PSEUDO_TAG_PATTERN = re.compile(r"<([a-z_][a-z0-9_-]*)>", re.IGNORECASE)
INLINE_MATH_PATTERN = re.compile(r"\$([^$\n]+)\$")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
YAML_SPECIAL_PATTERN = re.compile(r"[:\"'\[\]{}#&*!|>@`]|^\s|^-")
MATH_DELIMITER = "$$"


def _escape_tag(match: re.Match[str]) -> str:
    name = match.group(1)
    lowered = name.lower()
    if lowered in VOID_TAGS:
        return f"<{name} />"
    if lowered in HTML_TAGS:
        return match.group(0)
    return f"\\<{name}\\>"


def _escape_html_line(line: str) -> str:
    escaped = ANGLE_URL_PATTERN.sub(r"[\1](\1)", line)
    escaped = LESS_THAN_DIGIT_PATTERN.sub(r"\\<\1", escaped)
    return PSEUDO_TAG_PATTERN.sub(_escape_tag, escaped)


def escape_html_tags(content: str) -> str:
    """Escape ``<word>`` pseudo-tags outside fenced code, keeping real HTML tags.

    Angle-bracket URLs become Markdown links, a ``<`` followed by a digit is
    escaped on its own, and ``<br>``/``<hr>``/``<img>`` are made self-closing.
    """
    return map_outside_fences(content, _escape_html_line)


def escape_math(content: str) -> str:
    r"""Fence display math and turn inline math into code spans.

    A line that is exactly ``$$`` opens a ``math`` fence and the next one
    closes it; lines inside the fence are kept verbatim. A line wrapped in
    ``$$...$$`` becomes a one-line fenced block. Nothing inside regular code
    fences is touched.

    >>> print(escape_math("Cost is $O(n)$\n$$x^2$$"))
    Cost is `O(n)`
    ```
    x^2
    ```
    """
    lines: list[str] = []
    in_code = False
    in_math = False
    for line in content.split("\n"):
        stripped = line.strip()
        if in_math:
            if stripped == MATH_DELIMITER:
                lines.append("```")
                in_math = False
            else:
                lines.append(line)
        elif is_fence(line):
            in_code = not in_code
            lines.append(line)
        elif in_code:
            lines.append(line)
        elif stripped == MATH_DELIMITER:
            lines.append("```math")
            in_math = True
        elif (
            len(stripped) > 2 * len(MATH_DELIMITER)
            and stripped.startswith(MATH_DELIMITER)
            and stripped.endswith(MATH_DELIMITER)
        ):
            lines.append(f"```\n{stripped[2:-2]}\n```")
        else:
            lines.append(INLINE_MATH_PATTERN.sub(r"`\1`", line))
    if in_math:
        lines.append("```")
    return "\n".join(lines)


def add_image_dimensions(content: str) -> str:
    """Replace Markdown images with ``<img>`` tags carrying fixed dimensions."""

    def _replace(match: re.Match[str]) -> str:
        alt = match.group(1).replace('"', "&quot;")
        src = match.group(2)
        return (
            f'<img src="{src}" alt="{alt}" '
            f'width="{IMAGE_WIDTH}" height="{IMAGE_HEIGHT}" />'
        )

    return IMAGE_PATTERN.sub(_replace, content)


def escape_yaml_value(value: str) -> str:
    """Double-quote ``value`` when it contains YAML-significant characters.

    >>> escape_yaml_value("Model Guide")
    'Model Guide'
    >>> escape_yaml_value("FAQ: Caching")
    '"FAQ: Caching"'
    """
    if YAML_SPECIAL_PATTERN.search(value):
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'
    return value


def render_frontmatter(metadata: DocMetadata) -> str:
    """Return the MDX frontmatter block for ``metadata``."""
    title = escape_yaml_value(metadata.title)
    description = '""'
    if metadata.description:
        description = escape_yaml_value(metadata.description)
    return f"---\ntitle: {title}\ndescription: {description}\n---\n\n"


def try_prepare_markdown(content: str, *, math: bool = True) -> ConversionResult:
    """Run the MDX safety stages over Markdown ``content``."""
    stages: list[Stage] = [("html-tags", escape_html_tags)]
    if math:
        stages.append(("math", escape_math))
    stages.append(("images", add_image_dimensions))
    return run_stages(content, stages)


__all__ = [
    "HTML_TAGS",
    "add_image_dimensions",
    "escape_html_tags",
    "escape_math",
    "escape_yaml_value",
    "render_frontmatter",
    "try_prepare_markdown",
]
