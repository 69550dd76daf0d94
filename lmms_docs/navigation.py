r"""Build the sidebar manifests (``meta.json``) for synced documentation.

A manifest is an ordered list of page slugs interleaved with ``---Name---``
separators. :func:`build_manifest` assigns every page of a version exactly
once: static sections first, then sections detected from upstream folders,
then an ``Others`` catch-all. Changelog pages are collected under a single
``changelogs`` entry whose own manifest is sorted newest first.

Examples
--------
>>> from lmms_docs.config import SectionConfig
>>> from lmms_docs.models import DocMetadata
>>> from lmms_docs.navigation import build_manifest
>>> slugs = ("index", "quickstart", "extra")
>>> docs = [DocMetadata(title=s.title(), slug=s) for s in slugs]
>>> started = SectionConfig("Getting Started", ["index", "quickstart"])
>>> manifest = build_manifest("Latest", docs, [], sections=[started])
>>> manifest.pages
['---Getting Started---', 'index', 'quickstart', '---Others---', 'extra']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ._constants import CHANGELOGS_DIR, OTHERS_SECTION, separator_label

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SectionConfig
    from .models import DocMetadata, FolderSection

LEADING_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")
TRAILING_VERSION_PATTERN = re.compile(r"(\d[\d.]*)$")
WORD_START_PATTERN = re.compile(r"\b\w")


@dc.dataclass(slots=True)
class NavigationManifest:
    """Ordered sidebar description for one content directory."""

    title: str
    pages: list[str]
    description: str = ""
    root: bool = True

    def to_json(self) -> dict[str, typ.Any]:
        return {
            "title": self.title,
            "description": self.description,
            "root": self.root,
            "pages": list(self.pages),
        }


@dc.dataclass(slots=True)
class ChangelogManifest:
    """Collapsible changelog folder listing, newest release first."""

    pages: list[str]
    title: str = "Changelogs"
    default_open: bool = False

    def to_json(self) -> dict[str, typ.Any]:
        return {
            "title": self.title,
            "defaultOpen": self.default_open,
            "pages": list(self.pages),
        }


def folder_title(name: str) -> str:
    """Turn ``getting_started`` or ``model-guide`` into a display title."""
    spaced = re.sub(r"[-_]", " ", name)
    return WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), spaced)


def is_changelog(slug: str, pattern: re.Pattern[str] | None) -> bool:
    return bool(pattern and pattern.search(slug))


def build_manifest(
    version_label: str,
    docs: cabc.Sequence[DocMetadata],
    folder_sections: cabc.Sequence[FolderSection],
    *,
    sections: cabc.Sequence[SectionConfig] = (),
    changelog_pattern: re.Pattern[str] | None = None,
    changelog_slugs: cabc.Collection[str] = (),
    description: str = "",
) -> NavigationManifest:
    """Return the sidebar manifest for one version directory.

    Parameters
    ----------
    version_label : str
        Manifest title (the version's display label).
    docs : Sequence[DocMetadata]
        Every page synced for the version, top-level and folder pages alike.
    folder_sections : Sequence[FolderSection]
        Sections detected from upstream subfolders, in upstream order.
    sections : Sequence[SectionConfig], optional
        Static sections, in display order.
    changelog_pattern : re.Pattern[str] | None, optional
        Slugs matching this pattern are treated as changelog pages.
    changelog_slugs : Collection[str], optional
        Additional slugs that live in the changelogs folder.
    description : str, optional
        Manifest description.

    Returns
    -------
    NavigationManifest
        Pages in display order. Each non-changelog slug of ``docs`` appears
        exactly once; changelogs are represented by a single ``changelogs``
        entry appended last.
    """
    changelogs = set(changelog_slugs)

    def _is_changelog(slug: str) -> bool:
        return slug in changelogs or is_changelog(slug, changelog_pattern)

    all_slugs = [doc.slug for doc in docs]
    known = set(all_slugs)
    folders_by_name = {folder.name.lower(): folder for folder in folder_sections}
    static_names = {section.name.lower() for section in sections}
    placed: set[str] = set()
    pages: list[str] = []

    def _emit(name: str, candidates: cabc.Iterable[str]) -> None:
        selected: list[str] = []
        for slug in candidates:
            if slug in placed or slug not in known or _is_changelog(slug):
                continue
            if slug in selected:
                continue
            selected.append(slug)
        if not selected:
            return
        pages.append(separator_label(name))
        pages.extend(selected)
        placed.update(selected)

    # A folder named like a static section appends its unlisted pages to it.
    for section in sections:
        folder = folders_by_name.get(section.name.lower())
        folder_pages = [] if folder is None else list(folder.pages)
        _emit(section.name, [*section.pages, *folder_pages])

    for folder in folder_sections:
        if folder.name.lower() in static_names:
            continue
        _emit(folder.name, folder.pages)

    _emit(OTHERS_SECTION, all_slugs)

    if any(_is_changelog(slug) for slug in all_slugs) or changelogs:
        pages.append(CHANGELOGS_DIR)

    return NavigationManifest(title=version_label, pages=pages, description=description)


def changelog_version(slug: str) -> float | None:
    """Return the release number embedded at the end of a changelog slug.

    >>> changelog_version("lmms-eval-0.4")
    0.4
    >>> changelog_version("lmms-eval-0.3.1")
    0.3
    """
    match = TRAILING_VERSION_PATTERN.search(slug)
    if not match:
        return None
    number = LEADING_NUMBER_PATTERN.match(match.group(1))
    return float(number.group(0)) if number else None


def build_changelog_manifest(slugs: cabc.Iterable[str]) -> ChangelogManifest:
    """Return the changelog folder manifest, newest release first.

    Slugs without a parsable version keep their relative order at the end.
    """
    unique = list(dict.fromkeys(slugs))
    versioned = [(slug, changelog_version(slug)) for slug in unique]
    numbered = sorted(
        (item for item in versioned if item[1] is not None),
        key=lambda item: typ.cast("float", item[1]),
        reverse=True,
    )
    unnumbered = [slug for slug, version in versioned if version is None]
    return ChangelogManifest(pages=[slug for slug, _ in numbered] + unnumbered)


def build_tree_manifest(
    title: str, docs: cabc.Sequence[DocMetadata], *, description: str = ""
) -> NavigationManifest:
    """Return the root manifest of a recursively synced tree.

    ``index`` comes first when present, followed by every top-level folder in
    the order its first page was synced.
    """
    pages: list[str] = []
    if any(doc.slug == "index" for doc in docs):
        pages.append("index")
    groups: dict[str, None] = {}
    for doc in docs:
        head, sep, _ = doc.slug.partition("/")
        if sep:
            groups.setdefault(head, None)
    pages.extend(groups)
    return NavigationManifest(title=title, pages=pages, description=description)


__all__ = [
    "ChangelogManifest",
    "NavigationManifest",
    "build_changelog_manifest",
    "build_manifest",
    "build_tree_manifest",
    "changelog_version",
    "folder_title",
    "is_changelog",
]
