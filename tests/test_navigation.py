"""Unit tests for sidebar manifest building."""

from __future__ import annotations

import re

from lmms_docs.config import SectionConfig
from lmms_docs.models import DocMetadata, FolderSection
from lmms_docs.navigation import (
    build_changelog_manifest,
    build_manifest,
    build_tree_manifest,
    changelog_version,
    folder_title,
)

CHANGELOG_PATTERN = re.compile(r"^lmms-eval-[\d.]+$")


def _docs(*slugs: str) -> list[DocMetadata]:
    return [DocMetadata(title=folder_title(slug), slug=slug) for slug in slugs]


def test_static_sections_then_others_each_page_once() -> None:
    manifest = build_manifest(
        "Latest",
        _docs("index", "quickstart", "extra"),
        [],
        sections=[SectionConfig("Getting Started", ["index", "quickstart"])],
    )
    assert manifest.pages == [
        "---Getting Started---",
        "index",
        "quickstart",
        "---Others---",
        "extra",
    ], f"unexpected manifest pages {manifest.pages!r}"


def test_static_section_pages_missing_upstream_are_skipped() -> None:
    manifest = build_manifest(
        "v0.1.0",
        _docs("index"),
        [],
        sections=[
            SectionConfig("Getting Started", ["index", "quickstart"]),
            SectionConfig("Guides", ["model_guide"]),
        ],
    )
    assert manifest.pages == ["---Getting Started---", "index"]


def test_folder_sections_follow_static_sections() -> None:
    manifest = build_manifest(
        "Latest",
        _docs("index", "extra", "advanced_usage", "tips"),
        [FolderSection("Guides", ["tips", "advanced_usage"])],
        sections=[SectionConfig("Getting Started", ["index", "tips"])],
    )
    assert manifest.pages == [
        "---Getting Started---",
        "index",
        "tips",
        "---Guides---",
        "advanced_usage",
        "---Others---",
        "extra",
    ], "the first section to list a page keeps it"


def test_folder_sharing_static_name_emits_one_separator() -> None:
    manifest = build_manifest(
        "Latest",
        _docs("index", "quickstart"),
        [FolderSection("Getting Started", ["quickstart"])],
        sections=[SectionConfig("Getting Started", ["index", "quickstart"])],
    )
    assert manifest.pages == [
        "---Getting Started---",
        "index",
        "quickstart",
    ], f"unexpected manifest pages {manifest.pages!r}"


def test_folder_section_reuses_matching_static_order() -> None:
    manifest = build_manifest(
        "Latest",
        _docs("b", "a", "c"),
        [FolderSection("Guides", ["b", "a", "c"])],
        sections=[SectionConfig("Guides", ["a", "b"])],
    )
    assert manifest.pages == ["---Guides---", "a", "b", "c"]


def test_changelogs_collapse_into_single_entry() -> None:
    manifest = build_manifest(
        "Latest",
        _docs("index", "lmms-eval-0.4", "lmms-eval-0.3"),
        [],
        changelog_pattern=CHANGELOG_PATTERN,
        description="Evaluation docs",
    )
    assert manifest.pages == ["---Others---", "index", "changelogs"]
    assert manifest.to_json() == {
        "title": "Latest",
        "description": "Evaluation docs",
        "root": True,
        "pages": ["---Others---", "index", "changelogs"],
    }


def test_changelog_folder_without_pattern_still_referenced() -> None:
    manifest = build_manifest(
        "Latest", _docs("index", "release-notes"), [], changelog_slugs=["release-notes"]
    )
    assert manifest.pages == ["---Others---", "index", "changelogs"]


def test_changelog_version_parses_trailing_number() -> None:
    assert changelog_version("lmms-eval-0.4") == 0.4
    assert changelog_version("lmms-eval-0.3.1") == 0.3
    assert changelog_version("release-notes") is None


def test_changelog_manifest_sorted_newest_first() -> None:
    manifest = build_changelog_manifest(
        ["lmms-eval-0.3", "notes", "lmms-eval-0.5", "lmms-eval-0.4"]
    )
    assert manifest.to_json() == {
        "title": "Changelogs",
        "defaultOpen": False,
        "pages": ["lmms-eval-0.5", "lmms-eval-0.4", "lmms-eval-0.3", "notes"],
    }


def test_tree_manifest_lists_index_then_top_level_folders() -> None:
    manifest = build_tree_manifest(
        "lmms-engine",
        _docs("getting_started/install", "api/reference/models", "index", "faq"),
    )
    assert manifest.pages == ["index", "getting_started", "api"]


def test_folder_title_humanizes_names() -> None:
    assert folder_title("getting_started") == "Getting Started"
    assert folder_title("model-guide") == "Model Guide"
