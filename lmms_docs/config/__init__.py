"""Load and validate the documentation sync configuration.

This subpackage parses the project's ``sync.yaml`` file, merges global defaults
with per-pipeline overrides, compiles changelog patterns, and produces typed
dataclasses (:class:`SyncConfig`, :class:`PipelineConfig`,
:class:`SectionConfig`) that the sync pipelines consume. Secrets stay out of
the YAML: :class:`RuntimeSettings` reads them from the environment.

Examples
--------
>>> from pathlib import Path
>>> from lmms_docs.config import load_sync_config
>>> config = load_sync_config(Path("config/sync.yaml"))  # doctest: +SKIP
>>> config.get_pipeline("lmms-eval").repo  # doctest: +SKIP
'EvolvingLMMs-Lab/lmms-eval'
"""

from .loader import load_sync_config
from .models import (
    TREE,
    VERSIONED,
    PipelineConfig,
    RuntimeSettings,
    SectionConfig,
    SyncConfig,
    SyncConfigError,
)

__all__ = [
    "TREE",
    "VERSIONED",
    "PipelineConfig",
    "RuntimeSettings",
    "SectionConfig",
    "SyncConfig",
    "SyncConfigError",
    "load_sync_config",
]
