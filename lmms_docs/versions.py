r"""Parse release tags and choose which documentation versions to sync.

Tags follow ``vMAJOR.MINOR[.PATCH]``; development and post releases
(``v0.6.1.dev0``, ``v0.4.post1``) and anything else that does not match are
ignored. The selected versions are always preceded by a synthetic ``latest``
entry that tracks the default branch.

Examples
--------
>>> from lmms_docs.versions import parse_version, select_versions
>>> parse_version("v0.6.1")
ParsedVersion(major=0, minor=6, patch=1, tag='v0.6.1')
>>> parse_version("v0.6.1.dev0") is None
True
>>> [v.tag for v in select_versions(["v0.5.0", "v1.2.0", "v1.1.9", "abc"])]
['v1.2.0', 'v1.1.9', 'v0.5.0']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ._constants import DEFAULT_BRANCH, LATEST_SLUG
from .models import VersionEntry

if typ.TYPE_CHECKING:
    import collections.abc as cabc

VERSION_PATTERN = re.compile(r"^v(\d+)\.(\d+)(?:\.(\d+))?$")
PRERELEASE_PATTERN = re.compile(
    r"(?:\.(?:dev|post)\d*|-?(?:a|b|rc|alpha|beta)\d*)$", re.IGNORECASE
)


@dc.dataclass(slots=True, frozen=True)
class ParsedVersion:
    """Structured form of a release tag."""

    major: int
    minor: int
    patch: int
    tag: str

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


def parse_version(tag: str) -> ParsedVersion | None:
    """Return the parsed version for ``tag`` or ``None`` when it is not a release.

    A missing patch component is treated as ``0``.
    """
    if PRERELEASE_PATTERN.search(tag):
        return None
    match = VERSION_PATTERN.match(tag)
    if not match:
        return None
    major, minor, patch = match.groups()
    return ParsedVersion(
        major=int(major),
        minor=int(minor),
        patch=int(patch) if patch is not None else 0,
        tag=tag,
    )


def select_versions(tags: cabc.Iterable[str]) -> list[ParsedVersion]:
    """Parse ``tags`` and return every release sorted newest first."""
    parsed = [version for tag in tags if (version := parse_version(tag))]
    return sorted(parsed, key=lambda version: version.key, reverse=True)


def latest_patch_per_minor(
    versions: cabc.Iterable[ParsedVersion],
) -> list[ParsedVersion]:
    """Keep only the newest patch of each ``(major, minor)`` pair, newest first."""
    newest: dict[tuple[int, int], ParsedVersion] = {}
    for version in versions:
        series = (version.major, version.minor)
        current = newest.get(series)
        if current is None or version.key > current.key:
            newest[series] = version
    return sorted(newest.values(), key=lambda version: version.key, reverse=True)


def build_version_entries(
    versions: cabc.Iterable[ParsedVersion],
    *,
    default_branch: str = DEFAULT_BRANCH,
    latest_label: str = "Latest",
) -> list[VersionEntry]:
    """Return the sync targets: ``latest`` first, then one entry per tag."""
    entries = [VersionEntry(slug=LATEST_SLUG, ref=default_branch, label=latest_label)]
    entries.extend(
        VersionEntry(slug=version.tag, ref=version.tag, label=version.tag)
        for version in versions
    )
    return entries


__all__ = [
    "ParsedVersion",
    "build_version_entries",
    "latest_patch_per_minor",
    "parse_version",
    "select_versions",
]
