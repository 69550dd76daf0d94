"""Cyclopts CLI entrypoint for syncing LMMs-Lab documentation into the site.

The ``docs-sync`` console script defined here fetches Markdown and RST
sources from the configured GitHub repositories, converts them to MDX and
writes the pages, sidebar manifests and version switcher data into the site's
content tree. ``docs-sync sync`` is what CI and local developers run;
``docs-sync webhook`` replays a webhook delivery (payload file plus signature)
through the same trigger used by the site's HTTP handlers.

Examples
--------
Sync every configured pipeline:

>>> from lmms_docs.cli import main
>>> main()  # doctest: +SKIP

Re-sync a single pipeline, overwriting frozen release directories:

>>> from lmms_docs.cli import app
>>> app(["sync", "--pipeline", "lmms-eval", "--force"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import json
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from dotenv import load_dotenv

from .config import RuntimeSettings, load_sync_config
from .log import configure_logging, get_logger
from .trigger import SyncTrigger, WebhookSignatureError

if typ.TYPE_CHECKING:
    from .models import SyncReport

DEFAULT_CONFIG = Path("config/sync.yaml")

app = App(name="docs-sync", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

logger = get_logger(__name__)


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _load_environment() -> None:
    # Existing variables win over both files; .env.local wins over .env.
    load_dotenv(".env.local", override=False)
    load_dotenv(".env", override=False)


def _settings(github_token: str | None) -> RuntimeSettings:
    settings = RuntimeSettings.from_env()
    if github_token:
        settings = dc.replace(settings, github_token=github_token)
    return settings


def _print_reports(reports: list[SyncReport]) -> None:
    for report in reports:
        for path in report.written:
            print(f"wrote {_format_path(path)}")
        for slug in report.skipped:
            print(f"skipped {report.pipeline}/{slug}")


@app.command(help="Sync documentation from GitHub into the content tree.")
def sync(
    *,
    pipeline: typ.Annotated[
        str | None,
        Parameter(help="Pipeline to sync (default: all)", env_var="INPUT_PIPELINE"),
    ] = None,
    force: typ.Annotated[
        bool,
        Parameter(
            help="Re-sync release versions that already exist",
            env_var="INPUT_FORCE",
        ),
    ] = False,
    config: typ.Annotated[
        Path, Parameter(help="Path to sync config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    github_token: typ.Annotated[
        str | None,
        Parameter(
            help="Optional GitHub token (falls back to GITHUB_TOKEN)",
            env_var="INPUT_GITHUB_TOKEN",
        ),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log every processed file", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Fetch, convert and write documentation for one or all pipelines.

    Parameters
    ----------
    pipeline : str or None, optional
        Pipeline key from the config; when ``None`` (default) every pipeline
        runs in configuration order.
    force : bool, optional
        Overwrite release directories that were synced before.
    config : Path, optional
        Path to the ``sync.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    github_token : str or None, optional
        GitHub token for authenticated requests. If ``None``, ``GITHUB_TOKEN``
        or ``GH_TOKEN`` from the environment (or ``.env.local``) is used.
    verbose : bool, optional
        Enable debug logging.

    Returns
    -------
    None
        Writes the content tree and prints every written path.

    Raises
    ------
    SystemExit
        With status 1 when the sync fails.
    """
    _load_environment()
    configure_logging(verbose=verbose)
    trigger = SyncTrigger(load_sync_config(config), _settings(github_token))

    if pipeline:
        result = trigger.sync_pipeline(pipeline, force=force)
    else:
        result = trigger.sync_now(force=force)

    if not result.success:
        print(f"sync failed: {result.error}")
        raise SystemExit(1)
    _print_reports(result.reports)


@app.command(help="Verify a webhook delivery and run the sync it requests.")
def webhook(
    payload: typ.Annotated[
        Path, Parameter(help="File holding the raw request body")
    ],
    *,
    signature: typ.Annotated[
        str | None,
        Parameter(
            help="Value of the X-Hub-Signature-256 header",
            env_var="INPUT_SIGNATURE",
        ),
    ] = None,
    pipeline: typ.Annotated[
        str | None,
        Parameter(help="Pipeline to sync (default: all)", env_var="INPUT_PIPELINE"),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to sync config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Replay a webhook delivery through :class:`SyncTrigger`.

    The JSON result (``{"success": ..., ...}``) is printed to stdout, the
    same body an HTTP handler would return.

    Raises
    ------
    SystemExit
        With status 1 when the signature is rejected or the sync fails.
    """
    _load_environment()
    configure_logging()
    trigger = SyncTrigger(load_sync_config(config), RuntimeSettings.from_env())
    body = payload.read_bytes()

    try:
        result = trigger.handle_webhook(body, signature, pipeline=pipeline)
    except WebhookSignatureError as exc:
        logger.warning("Rejected webhook delivery: %s", exc)
        print(json.dumps({"success": False, "error": str(exc)}))
        raise SystemExit(1) from exc

    print(json.dumps(result.to_dict()))
    if not result.success:
        raise SystemExit(1)


def main() -> None:
    """Invoke the Cyclopts application behind the ``docs-sync`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
