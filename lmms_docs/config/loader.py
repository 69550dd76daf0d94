"""Load sync configuration YAML into typed dataclasses."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from lmms_docs._constants import DEFAULT_BRANCH, DEFAULT_LINK_BASE
from lmms_docs.github import DEFAULT_API_BASE, DEFAULT_RAW_BASE

from .helpers import (
    DEFAULT_EXCLUDED_FOLDERS,
    _build_sections,
    _coerce_bool,
    _compile_pattern,
    _normalize_names,
    _optional_str,
)
from .models import PIPELINE_KINDS, PipelineConfig, SyncConfig, SyncConfigError


def load_sync_config(path: Path) -> SyncConfig:
    """Load the YAML configuration describing every documentation pipeline.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/sync.yaml``).

    Returns
    -------
    SyncConfig
        Parsed configuration with one :class:`PipelineConfig` per entry under
        ``pipelines``, defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SyncConfigError
        If no pipelines are defined or a pipeline is missing required fields.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from lmms_docs.config import load_sync_config
    >>> config = load_sync_config(Path("config/sync.yaml"))  # doctest: +SKIP
    >>> sorted(config.pipelines)  # doctest: +SKIP
    ['lmms-engine', 'lmms-eval']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = raw.get("defaults", {}) or {}

    pipeline_defaults = _PipelineDefaults(
        branch=defaults.get("branch", DEFAULT_BRANCH),
        docs_path=defaults.get("docs_path", "docs"),
        link_base=defaults.get("link_base", DEFAULT_LINK_BASE),
        excluded_folders=tuple(
            _normalize_names(defaults.get("excluded_folders"))
            or DEFAULT_EXCLUDED_FOLDERS
        ),
    )

    pipelines_raw = raw.get("pipelines") or {}
    if not pipelines_raw:
        msg = "No pipelines defined in sync configuration."
        raise SyncConfigError(msg)

    pipelines: dict[str, PipelineConfig] = {}
    for key, payload in pipelines_raw.items():
        match payload:
            case dict():
                pipelines[str(key)] = _build_pipeline_config(
                    key=str(key), payload=payload, defaults=pipeline_defaults
                )
            case _:
                continue

    return SyncConfig(
        pipelines=pipelines,
        api_base=defaults.get("api_base", DEFAULT_API_BASE),
        raw_base=defaults.get("raw_base", DEFAULT_RAW_BASE),
    )


@dc.dataclass(slots=True)
class _PipelineDefaults:
    """Internal container for pipeline default configuration values."""

    branch: str
    docs_path: str
    link_base: str
    excluded_folders: tuple[str, ...]


def _build_pipeline_config(
    *,
    key: str,
    payload: typ.Mapping[str, typ.Any],
    defaults: _PipelineDefaults,
) -> PipelineConfig:
    """Build a PipelineConfig for a single entry using defaults and overrides."""
    kind = _optional_str(payload.get("kind"))
    if kind not in PIPELINE_KINDS:
        allowed = ", ".join(sorted(PIPELINE_KINDS))
        msg = f"Pipeline '{key}' must set kind to one of: {allowed}."
        raise SyncConfigError(msg)
    repo = _optional_str(payload.get("repo"))
    if not repo:
        msg = f"Pipeline '{key}' is missing 'repo'."
        raise SyncConfigError(msg)
    content_dir = _optional_str(payload.get("content_dir"))
    if not content_dir:
        msg = f"Pipeline '{key}' is missing 'content_dir'."
        raise SyncConfigError(msg)

    excluded = payload.get("excluded_folders")
    if excluded is None:
        excluded_folders = list(defaults.excluded_folders)
    else:
        excluded_folders = _normalize_names(excluded)
    versions_manifest = _optional_str(payload.get("versions_manifest"))

    return PipelineConfig(
        key=key,
        kind=kind,
        repo=repo,
        content_dir=Path(content_dir),
        docs_path=str(payload.get("docs_path", defaults.docs_path)).strip("/"),
        branch=str(payload.get("branch", defaults.branch)),
        title=_optional_str(payload.get("title")) or key,
        description=_optional_str(payload.get("description")) or "",
        latest_label=_optional_str(payload.get("latest_label")) or "Latest",
        link_base=str(payload.get("link_base", defaults.link_base)),
        excluded_folders=frozenset(excluded_folders),
        sections=_build_sections(payload.get("sections"), key=key),
        changelog_pattern=_compile_pattern(payload.get("changelog_pattern"), key=key),
        versions_manifest=Path(versions_manifest) if versions_manifest else None,
        latest_patch_only=_coerce_bool(
            payload.get("latest_patch_only"), default=False
        ),
        escape_math=_coerce_bool(payload.get("escape_math"), default=True),
        revalidate_path=_optional_str(payload.get("revalidate_path")),
    )


__all__ = ["load_sync_config"]
