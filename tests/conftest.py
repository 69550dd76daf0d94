"""Shared fixtures for the sync pipeline tests.

The sync orchestrators only need ``list_directory``, ``list_tags``,
``download`` and ``raw_url`` from the GitHub client, so the tests drive them
with an in-memory repository instead of HTTP doubles.
"""

from __future__ import annotations

import typing as typ

import pytest

from lmms_docs.github import GitHubApiError
from lmms_docs.models import DIR_TYPE, FILE_TYPE, RemoteEntry

if typ.TYPE_CHECKING:
    import collections.abc as cabc

RAW_BASE = "https://raw.example.invalid"


class FakeContentsClient:
    """In-memory stand-in for :class:`GitHubContentsClient`.

    ``trees`` maps a git ref to ``{repository path: file text}``. Directory
    listings are derived from the file paths and sorted by name, like the
    contents API.
    """

    def __init__(
        self,
        trees: cabc.Mapping[str, cabc.Mapping[str, str]],
        tags: cabc.Sequence[str] = (),
        *,
        default_branch: str = "main",
        failing_refs: cabc.Collection[str] = (),
    ) -> None:
        self.trees = {ref: dict(files) for ref, files in trees.items()}
        self.tags = list(tags)
        self.default_branch = default_branch
        self.failing_refs = set(failing_refs)
        self.listed: list[tuple[str, str]] = []
        self.downloaded: list[str] = []

    def raw_url(self, ref: str, path: str) -> str:
        return f"{RAW_BASE}/{ref}/{path.lstrip('/')}"

    def list_tags(self) -> list[str]:
        return list(self.tags)

    def list_directory(self, path: str, ref: str | None = None) -> list[RemoteEntry]:
        ref = ref or self.default_branch
        self.listed.append((ref, path))
        url = f"https://api.example.invalid/contents/{path}?ref={ref}"
        if ref in self.failing_refs:
            msg = f"listing '{path}' at '{ref}' failed with status 500"
            raise GitHubApiError(msg, url=url, status=500)

        prefix = f"{path.strip('/')}/"
        entries: dict[str, RemoteEntry] = {}
        for file_path in self.trees.get(ref, {}):
            if not file_path.startswith(prefix):
                continue
            name, sep, _ = file_path[len(prefix) :].partition("/")
            child = f"{prefix}{name}"
            if sep:
                entries.setdefault(
                    name, RemoteEntry(name=name, path=child, type=DIR_TYPE)
                )
            else:
                entries[name] = RemoteEntry(
                    name=name,
                    path=child,
                    type=FILE_TYPE,
                    download_url=self.raw_url(ref, child),
                )
        if not entries:
            msg = f"listing '{path}' at '{ref}' failed with status 404"
            raise GitHubApiError(msg, url=url, status=404)
        return [entries[name] for name in sorted(entries)]

    def download(self, url: str) -> str:
        self.downloaded.append(url)
        for ref, files in self.trees.items():
            for file_path, text in files.items():
                if self.raw_url(ref, file_path) == url:
                    return text
        msg = f"downloading '{url}' failed with status 404"
        raise GitHubApiError(msg, url=url, status=404)


@pytest.fixture
def make_client() -> cabc.Callable[..., FakeContentsClient]:
    """Return a factory building :class:`FakeContentsClient` instances."""

    def _make(
        trees: cabc.Mapping[str, cabc.Mapping[str, str]],
        tags: cabc.Sequence[str] = (),
        **kwargs: typ.Any,
    ) -> FakeContentsClient:
        return FakeContentsClient(trees, tags, **kwargs)

    return _make
