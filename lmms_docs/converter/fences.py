"""Line helpers that skip fenced code blocks.

Fence detection is a plain toggle on lines whose stripped text starts with
three backticks. Nested or unbalanced fences are not repaired: an unclosed
opening fence leaves the rest of the document untouched.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FENCE_MARKER = "```"


def is_fence(line: str) -> bool:
    return line.strip().startswith(FENCE_MARKER)


def map_outside_fences(content: str, transform: cabc.Callable[[str], str]) -> str:
    """Apply ``transform`` to every line that is not inside a fenced block."""
    in_code = False
    lines: list[str] = []
    for line in content.split("\n"):
        if is_fence(line):
            in_code = not in_code
            lines.append(line)
        elif in_code:
            lines.append(line)
        else:
            lines.append(transform(line))
    return "\n".join(lines)


__all__ = ["FENCE_MARKER", "is_fence", "map_outside_fences"]
