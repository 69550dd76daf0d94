"""Versioned documentation sync (one content directory per release tag).

The pipeline lists the upstream tags, picks the release versions, and mirrors
``docs/`` at each ref into ``<content_dir>/<slug>/``. ``latest`` tracks the
default branch and is rewritten on every run; tagged directories are frozen
once written so manual fixes survive, unless a forced re-sync is requested.
Top-level Markdown pages are written flat, each upstream subfolder becomes a
sidebar section (its pages also written flat), and a ``changelogs`` folder is
kept as a nested directory with its own manifest.

Example
-------
>>> from pathlib import Path
>>> from lmms_docs.config import load_sync_config
>>> from lmms_docs.github import GitHubContentsClient
>>> from lmms_docs.sync.versioned import VersionedDocsSync
>>> config = load_sync_config(Path("config/sync.yaml"))  # doctest: +SKIP
>>> pipeline = config.get_pipeline("lmms-eval")  # doctest: +SKIP
>>> sync = VersionedDocsSync(pipeline, GitHubContentsClient(pipeline.repo))  # doctest: +SKIP
>>> report = sync.run()  # doctest: +SKIP
>>> [v.slug for v in report.versions][:2]  # doctest: +SKIP
['latest', 'v0.6.1']
"""

from __future__ import annotations

import shutil
import typing as typ

from lmms_docs._constants import CHANGELOGS_DIR, LATEST_SLUG, META_FILENAME
from lmms_docs.log import get_logger
from lmms_docs.models import DocMetadata, FolderSection, SyncReport
from lmms_docs.navigation import (
    build_changelog_manifest,
    build_manifest,
    folder_title,
    is_changelog,
)
from lmms_docs.versions import (
    build_version_entries,
    latest_patch_per_minor,
    select_versions,
)

from .pages import (
    is_markdown,
    page_path,
    render_page,
    slug_for,
    title_for,
    write_json,
    write_text,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    from lmms_docs.config import PipelineConfig
    from lmms_docs.github import GitHubContentsClient
    from lmms_docs.models import RemoteEntry, VersionEntry

logger = get_logger(__name__)


class VersionedDocsSync:
    """Mirror a repository's docs for ``latest`` and every selected release."""

    def __init__(self, pipeline: PipelineConfig, client: GitHubContentsClient) -> None:
        self.pipeline = pipeline
        self.client = client

    def run(self, *, force: bool = False) -> SyncReport:
        """Sync every version and write the versions manifest.

        Parameters
        ----------
        force : bool, optional
            Re-sync tagged versions whose directories already exist.

        Returns
        -------
        SyncReport
            Written files, skipped version slugs and the resolved versions.

        Raises
        ------
        GitHubApiError
            When a listing or download fails. Versions completed before the
            failure stay on disk and the versions manifest is not rewritten.
        """
        content_dir = self.pipeline.content_dir
        content_dir.mkdir(parents=True, exist_ok=True)

        versions = self.resolve_versions()
        logger.info(
            "Selected %d versions for %s: %s",
            len(versions) - 1,
            self.pipeline.key,
            ", ".join(version.slug for version in versions[1:]) or "none",
        )
        report = SyncReport(pipeline=self.pipeline.key, versions=versions)
        for version in versions:
            target_dir = content_dir / version.slug
            if not force and version.slug != LATEST_SLUG and target_dir.exists():
                logger.info(
                    "Skipping %s (already exists at %s/)", version.label, version.slug
                )
                report.skipped.append(version.slug)
                continue
            report.written.extend(self.sync_version(version))

        manifest_path = self.pipeline.versions_manifest
        if manifest_path is not None:
            payload = [version.as_dict() for version in versions]
            report.written.append(write_json(manifest_path, payload))
            logger.info("Wrote versions manifest to %s", manifest_path)
        return report

    def resolve_versions(self) -> list[VersionEntry]:
        """Return ``latest`` followed by the release tags to sync, newest first."""
        tags = self.client.list_tags()
        logger.info("Found %d tags for %s", len(tags), self.pipeline.repo)
        selected = select_versions(tags)
        if self.pipeline.latest_patch_only:
            selected = latest_patch_per_minor(selected)
        return build_version_entries(
            selected,
            default_branch=self.pipeline.branch,
            latest_label=self.pipeline.latest_label,
        )

    def sync_version(self, version: VersionEntry) -> list[Path]:
        """Fetch, convert and write one version, returning the written paths.

        A tagged version directory created by this call is removed again if
        the sync fails, so a later run does not mistake it for a finished one.
        """
        target_dir = self.pipeline.content_dir / version.slug
        created = not target_dir.exists()
        logger.info(
            "Syncing %s (ref: %s) -> %s/", version.label, version.ref, version.slug
        )
        target_dir.mkdir(parents=True, exist_ok=True)
        try:
            return self._sync_into(version, target_dir)
        except Exception:
            if created and version.slug != LATEST_SLUG:
                shutil.rmtree(target_dir, ignore_errors=True)
            raise

    def _sync_into(self, version: VersionEntry, target_dir: Path) -> list[Path]:
        docs_path = self.pipeline.docs_path
        entries = self.client.list_directory(docs_path, version.ref)
        files = [
            entry for entry in entries if entry.is_file and is_markdown(entry.name)
        ]
        folders = [
            entry
            for entry in entries
            if entry.is_dir and entry.name not in self.pipeline.excluded_folders
        ]
        logger.info(
            "Found %d markdown files, %d subfolders", len(files), len(folders)
        )

        written: list[Path] = []
        docs: list[DocMetadata] = []
        changelogs: list[str] = []
        folder_sections: list[FolderSection] = []

        for entry in files:
            metadata, path, in_changelogs = self._sync_file(entry, version, target_dir)
            written.append(path)
            docs.append(metadata)
            if in_changelogs:
                changelogs.append(metadata.slug)

        for folder in folders:
            is_changelogs_folder = folder.name.lower() == CHANGELOGS_DIR
            section = FolderSection(name=folder_title(folder.name))
            logger.info('Processing folder: %s/ -> "%s"', folder.name, section.name)
            listing = self.client.list_directory(
                f"{docs_path}/{folder.name}", version.ref
            )
            for entry in listing:
                if not (entry.is_file and is_markdown(entry.name)):
                    continue
                metadata, path, in_changelogs = self._sync_file(
                    entry, version, target_dir, changelog=is_changelogs_folder
                )
                written.append(path)
                docs.append(metadata)
                if in_changelogs:
                    changelogs.append(metadata.slug)
                else:
                    section.pages.append(metadata.slug)
            if section.pages:
                folder_sections.append(section)

        manifest = build_manifest(
            version.label,
            docs,
            folder_sections,
            sections=self.pipeline.sections,
            changelog_pattern=self.pipeline.changelog_pattern,
            changelog_slugs=changelogs,
            description=self.pipeline.description,
        )
        written.append(write_json(target_dir / META_FILENAME, manifest.to_json()))

        if changelogs:
            changelog_manifest = build_changelog_manifest(changelogs)
            written.append(
                write_json(
                    target_dir / CHANGELOGS_DIR / META_FILENAME,
                    changelog_manifest.to_json(),
                )
            )
        return written

    def _sync_file(
        self,
        entry: RemoteEntry,
        version: VersionEntry,
        target_dir: Path,
        *,
        changelog: bool = False,
    ) -> tuple[DocMetadata, Path, bool]:
        logger.debug("Processing: %s", entry.path)
        source = self.client.download(self.client.raw_url(version.ref, entry.path))
        slug = slug_for(entry.name)
        metadata = DocMetadata(
            title=title_for(entry.name, root_index_title="Index"), slug=slug
        )
        content = render_page(source, metadata, math=self.pipeline.escape_math)
        in_changelogs = changelog or is_changelog(slug, self.pipeline.changelog_pattern)
        root = target_dir / CHANGELOGS_DIR if in_changelogs else target_dir
        return metadata, write_text(page_path(root, slug), content), in_changelogs


__all__ = ["VersionedDocsSync"]
