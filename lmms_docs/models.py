"""Shared dataclasses used by the documentation sync pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FILE_TYPE = "file"
DIR_TYPE = "dir"


@dc.dataclass(slots=True, frozen=True)
class RemoteEntry:
    """One row of a GitHub contents listing.

    Attributes
    ----------
    name : str
        Basename of the entry (``quickstart.md``).
    path : str
        Repository-relative path (``docs/quickstart.md``).
    type : str
        ``"file"`` or ``"dir"`` as reported by the contents API.
    download_url : str | None
        Raw download URL for files; ``None`` for directories.
    """

    name: str
    path: str
    type: str
    download_url: str | None = None

    @property
    def is_file(self) -> bool:
        return self.type == FILE_TYPE

    @property
    def is_dir(self) -> bool:
        return self.type == DIR_TYPE

    @classmethod
    def from_payload(cls, payload: cabc.Mapping[str, typ.Any]) -> RemoteEntry:
        """Build an entry from a contents API JSON object."""
        download_url = payload.get("download_url")
        return cls(
            name=str(payload.get("name", "")),
            path=str(payload.get("path", "")),
            type=str(payload.get("type", FILE_TYPE)),
            download_url=str(download_url) if download_url else None,
        )


@dc.dataclass(slots=True, frozen=True)
class DocMetadata:
    """Frontmatter values and slug derived for one synced page."""

    title: str
    slug: str
    description: str = ""


@dc.dataclass(slots=True, frozen=True)
class VersionEntry:
    """A resolved sync target for the versioned pipeline.

    Attributes
    ----------
    slug : str
        On-disk directory name (``latest`` or the tag).
    ref : str
        Git ref fetched from the remote (default branch or the tag).
    label : str
        Display name used by the version switcher.
    """

    slug: str
    ref: str
    label: str

    def as_dict(self) -> dict[str, str]:
        return {"slug": self.slug, "ref": self.ref, "label": self.label}


@dc.dataclass(slots=True)
class FolderSection:
    """Sidebar section auto-detected from an upstream subdirectory."""

    name: str
    pages: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class SyncReport:
    """Outcome of one pipeline run.

    Attributes
    ----------
    pipeline : str
        Pipeline key from the sync configuration.
    written : list[Path]
        Every file written during the run, in write order.
    skipped : list[str]
        Version slugs left untouched because they already existed.
    versions : list[VersionEntry]
        Versions known to the run (empty for unversioned pipelines).
    """

    pipeline: str
    written: list[Path] = dc.field(default_factory=list)
    skipped: list[str] = dc.field(default_factory=list)
    versions: list[VersionEntry] = dc.field(default_factory=list)


__all__ = [
    "DIR_TYPE",
    "FILE_TYPE",
    "DocMetadata",
    "FolderSection",
    "RemoteEntry",
    "SyncReport",
    "VersionEntry",
]
