"""Sync LMMs-Lab documentation from GitHub into the website's content tree.

This package exposes the CLI entry points used by ``uv run docs-sync`` and the
site's sync endpoints to mirror versioned and unversioned docs as MDX pages.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from lmms_docs import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
