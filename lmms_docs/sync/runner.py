"""Entry points that run one or every configured sync pipeline.

Pipelines run one after another, each request awaited before the next, to
stay under GitHub's rate limits. Two overlapping runs are not serialized here;
callers that can be triggered concurrently must serialize invocations.
"""

from __future__ import annotations

import typing as typ

from lmms_docs.github import GitHubContentsClient
from lmms_docs.log import get_logger

from .tree import TreeDocsSync
from .versioned import VersionedDocsSync

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import requests

    from lmms_docs.config import PipelineConfig, SyncConfig
    from lmms_docs.models import SyncReport

logger = get_logger(__name__)

ClientFactory = typ.Callable[["PipelineConfig"], GitHubContentsClient]


def _warn_if_anonymous(token: str | None) -> None:
    if not token:
        logger.warning(
            "GITHUB_TOKEN not set; GitHub API rate limits may apply. "
            "Set GITHUB_TOKEN in .env.local for higher limits."
        )


def default_client_factory(
    config: SyncConfig,
    *,
    token: str | None = None,
    session: requests.Session | None = None,
) -> ClientFactory:
    """Return a factory building a GitHub client per pipeline repository."""

    def _factory(pipeline: PipelineConfig) -> GitHubContentsClient:
        return GitHubContentsClient(
            pipeline.repo,
            token=token,
            api_base=config.api_base,
            raw_base=config.raw_base,
            session=session,
        )

    return _factory


def create_sync(
    pipeline: PipelineConfig, client: GitHubContentsClient
) -> VersionedDocsSync | TreeDocsSync:
    """Return the synchronizer matching the pipeline kind."""
    if pipeline.is_versioned:
        return VersionedDocsSync(pipeline, client)
    return TreeDocsSync(pipeline, client)


def sync_pipeline(
    config: SyncConfig,
    name: str,
    *,
    token: str | None = None,
    force: bool = False,
    client_factory: ClientFactory | None = None,
) -> SyncReport:
    """Run the pipeline registered as ``name``.

    Raises
    ------
    SyncConfigError
        If ``name`` is not a configured pipeline.
    GitHubApiError
        If any remote request fails.
    """
    pipeline = config.get_pipeline(name)
    _warn_if_anonymous(token)
    factory = client_factory or default_client_factory(config, token=token)
    return _run(pipeline, factory, force=force)


def sync_all(
    config: SyncConfig,
    *,
    token: str | None = None,
    force: bool = False,
    client_factory: ClientFactory | None = None,
    names: cabc.Iterable[str] | None = None,
) -> list[SyncReport]:
    """Run every configured pipeline (or ``names``) in configuration order.

    The first failure propagates; pipelines already completed keep their
    output.
    """
    _warn_if_anonymous(token)
    factory = client_factory or default_client_factory(config, token=token)
    selected = list(names) if names is not None else list(config.pipelines)
    return [
        _run(config.get_pipeline(name), factory, force=force) for name in selected
    ]


def _run(
    pipeline: PipelineConfig, factory: ClientFactory, *, force: bool
) -> SyncReport:
    sync = create_sync(pipeline, factory(pipeline))
    report = sync.run(force=force)
    logger.info(
        "Sync of %s completed: %d files written, %d versions skipped",
        pipeline.key,
        len(report.written),
        len(report.skipped),
    )
    return report


__all__ = [
    "ClientFactory",
    "create_sync",
    "default_client_factory",
    "sync_all",
    "sync_pipeline",
]
