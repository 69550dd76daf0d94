"""Typed dataclasses describing the documentation sync configuration."""

from __future__ import annotations

import dataclasses as dc
import os
import re  # noqa: TC003 - used for runtime type metadata
from pathlib import Path

from lmms_docs._constants import DEFAULT_BRANCH, DEFAULT_LINK_BASE

VERSIONED = "versioned"
TREE = "tree"
PIPELINE_KINDS = frozenset({VERSIONED, TREE})


class SyncConfigError(ValueError):
    """Raised when the sync configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class SectionConfig:
    """Hand-authored sidebar section: a display name and ordered page slugs."""

    name: str
    pages: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class PipelineConfig:
    """Describe one upstream documentation set and where it lands on disk.

    Attributes
    ----------
    key : str
        Identifier used on the command line (``lmms-eval``).
    kind : str
        ``"versioned"`` (one directory per release tag) or ``"tree"``
        (recursive walk of the default branch).
    repo : str
        Upstream repository in ``owner/name`` form.
    content_dir : Path
        Directory receiving the converted pages.
    docs_path : str
        Directory inside the repository holding the sources.
    branch : str
        Default branch synced as ``latest`` (or as the tree).
    title : str
        Manifest title for tree pipelines.
    description : str
        Manifest description.
    latest_label : str
        Display label of the ``latest`` version.
    link_base : str
        URL prefix for links generated from RST toctrees.
    excluded_folders : frozenset[str]
        Upstream subfolders that are never synced.
    sections : list[SectionConfig]
        Static sidebar sections, in display order.
    changelog_pattern : re.Pattern[str] | None
        Slugs matching this pattern are grouped under ``changelogs``.
    versions_manifest : Path | None
        Where the version switcher manifest is written.
    latest_patch_only : bool
        Keep only the newest patch per minor release when selecting tags.
    escape_math : bool
        Fence ``$$`` math and convert inline ``$...$`` to code spans.
    revalidate_path : str | None
        Site path to re-render after a successful sync.
    """

    key: str
    kind: str
    repo: str
    content_dir: Path
    docs_path: str = "docs"
    branch: str = DEFAULT_BRANCH
    title: str = ""
    description: str = ""
    latest_label: str = "Latest"
    link_base: str = DEFAULT_LINK_BASE
    excluded_folders: frozenset[str] = frozenset()
    sections: list[SectionConfig] = dc.field(default_factory=list)
    changelog_pattern: re.Pattern[str] | None = None
    versions_manifest: Path | None = None
    latest_patch_only: bool = False
    escape_math: bool = True
    revalidate_path: str | None = None

    @property
    def is_versioned(self) -> bool:
        return self.kind == VERSIONED


@dc.dataclass(slots=True)
class SyncConfig:
    """Aggregate configuration for every documentation pipeline."""

    pipelines: dict[str, PipelineConfig]
    api_base: str
    raw_base: str

    def get_pipeline(self, key: str) -> PipelineConfig:
        """Return the pipeline registered under ``key``.

        Raises
        ------
        SyncConfigError
            If no pipeline with that key is configured.
        """
        try:
            return self.pipelines[key]
        except KeyError as exc:
            known = ", ".join(sorted(self.pipelines)) or "none"
            msg = f"Unknown pipeline '{key}' (configured: {known})."
            raise SyncConfigError(msg) from exc


@dc.dataclass(slots=True, frozen=True)
class RuntimeSettings:
    """Secrets and switches read from the process environment.

    Attributes
    ----------
    github_token : str | None
        Token for authenticated GitHub access; anonymous access is used when
        absent.
    webhook_secret : str | None
        Shared secret for verifying ``X-Hub-Signature-256`` webhook headers.
    sync_api_key : str | None
        Bearer key guarding manual sync triggers.
    """

    github_token: str | None = None
    webhook_secret: str | None = None
    sync_api_key: str | None = None

    @classmethod
    def from_env(cls) -> RuntimeSettings:
        """Build settings from ``GITHUB_TOKEN``/``GH_TOKEN``, ``WEBHOOK_SECRET``
        and ``SYNC_API_KEY``; empty values count as unset."""
        token = os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
        return cls(
            github_token=token or None,
            webhook_secret=os.getenv("WEBHOOK_SECRET") or None,
            sync_api_key=os.getenv("SYNC_API_KEY") or None,
        )


__all__ = [
    "PIPELINE_KINDS",
    "TREE",
    "VERSIONED",
    "PipelineConfig",
    "RuntimeSettings",
    "SectionConfig",
    "SyncConfig",
    "SyncConfigError",
]
