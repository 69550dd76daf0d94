"""Markup converters that turn upstream RST and Markdown into MDX-safe text."""

from .mdx import (
    add_image_dimensions,
    escape_html_tags,
    escape_math,
    escape_yaml_value,
    render_frontmatter,
    try_prepare_markdown,
)
from .models import ConversionError, ConversionResult
from .rst import convert_rst_to_markdown, escape_curly_braces, try_convert_rst

__all__ = [
    "ConversionError",
    "ConversionResult",
    "add_image_dimensions",
    "convert_rst_to_markdown",
    "escape_curly_braces",
    "escape_html_tags",
    "escape_math",
    "escape_yaml_value",
    "render_frontmatter",
    "try_convert_rst",
    "try_prepare_markdown",
]
