"""Recursive documentation sync for unversioned Markdown/RST trees.

The whole ``docs/`` directory of the default branch is walked to any depth.
RST pages are converted to Markdown with toctree links resolved against the
page's own directory; the resulting MDX pages keep the upstream directory
layout. The tree is rewritten on every run.
"""

from __future__ import annotations

import posixpath
import typing as typ

from lmms_docs._constants import META_FILENAME
from lmms_docs.log import get_logger
from lmms_docs.models import DocMetadata, SyncReport
from lmms_docs.navigation import build_tree_manifest

from .pages import (
    is_doc_source,
    is_rst,
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
    from lmms_docs.models import RemoteEntry

logger = get_logger(__name__)


class TreeDocsSync:
    """Mirror a docs directory tree from the default branch."""

    def __init__(self, pipeline: PipelineConfig, client: GitHubContentsClient) -> None:
        self.pipeline = pipeline
        self.client = client

    def run(self, *, force: bool = False) -> SyncReport:
        """Walk the upstream tree and write every page plus the root manifest.

        ``force`` is accepted for interface parity; the tree has no frozen
        history and is always overwritten.
        """
        del force
        root = self.pipeline.content_dir
        root.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Syncing %s docs from %s (ref: %s)",
            self.pipeline.key,
            self.pipeline.repo,
            self.pipeline.branch,
        )

        report = SyncReport(pipeline=self.pipeline.key)
        docs = self._walk(self.pipeline.docs_path, "", report.written)
        logger.info("Processed %d files", len(docs))

        manifest = build_tree_manifest(
            self.pipeline.title, docs, description=self.pipeline.description
        )
        report.written.append(write_json(root / META_FILENAME, manifest.to_json()))
        return report

    def _walk(
        self, remote_path: str, relative_dir: str, written: list[Path]
    ) -> list[DocMetadata]:
        docs: list[DocMetadata] = []
        for entry in self.client.list_directory(remote_path, self.pipeline.branch):
            relative = posixpath.join(relative_dir, entry.name)
            if entry.is_dir:
                if entry.name in self.pipeline.excluded_folders:
                    continue
                docs.extend(self._walk(entry.path, relative, written))
            elif entry.is_file and is_doc_source(entry.name):
                result = self._sync_file(entry, relative)
                if result is not None:
                    metadata, path = result
                    docs.append(metadata)
                    written.append(path)
        return docs

    def _sync_file(
        self, entry: RemoteEntry, relative: str
    ) -> tuple[DocMetadata, Path] | None:
        if not entry.download_url:
            return None
        logger.debug("Processing: %s", entry.path)
        source = self.client.download(entry.download_url)

        current_dir = posixpath.dirname(relative)
        parent_name = posixpath.basename(current_dir) if current_dir else None
        slug = slug_for(relative)
        metadata = DocMetadata(title=title_for(entry.name, parent_name), slug=slug)
        content = render_page(
            source,
            metadata,
            rst=is_rst(entry.name),
            current_dir=current_dir,
            link_base=self.pipeline.link_base,
            math=self.pipeline.escape_math,
        )
        path = write_text(page_path(self.pipeline.content_dir, slug), content)
        return metadata, path


__all__ = ["TreeDocsSync"]
