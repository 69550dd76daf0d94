"""Fetch upstream documentation, convert it to MDX and write the content tree."""

from .runner import create_sync, default_client_factory, sync_all, sync_pipeline
from .tree import TreeDocsSync
from .versioned import VersionedDocsSync

__all__ = [
    "TreeDocsSync",
    "VersionedDocsSync",
    "create_sync",
    "default_client_factory",
    "sync_all",
    "sync_pipeline",
]
