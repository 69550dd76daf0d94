"""Trigger-facing entry points for documentation syncs.

HTTP handlers (webhooks or manual endpoints) call into :class:`SyncTrigger`
and map its :class:`SyncResult` to a response. Signature and API-key checks
happen before any sync work and raise instead of producing a failed result,
so callers can answer ``401`` without confusing auth problems with sync
errors.

Example
-------
>>> from pathlib import Path
>>> from lmms_docs.config import RuntimeSettings, load_sync_config
>>> from lmms_docs.trigger import SyncTrigger
>>> trigger = SyncTrigger(
...     load_sync_config(Path("config/sync.yaml")), RuntimeSettings.from_env()
... )  # doctest: +SKIP
>>> trigger.handle_webhook(b"{}", "sha256=...").to_dict()  # doctest: +SKIP
{'success': True, 'message': 'Docs synced successfully', 'timestamp': '...'}
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import hashlib
import hmac
import typing as typ

from .log import get_logger
from .sync import sync_all

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import RuntimeSettings, SyncConfig
    from .models import SyncReport
    from .sync.runner import ClientFactory

logger = get_logger(__name__)

SIGNATURE_PREFIX = "sha256="
SIGNATURE_HEADER = "X-Hub-Signature-256"


class WebhookSignatureError(PermissionError):
    """Raised when a webhook delivery is missing or fails signature checks."""


class TriggerAuthError(PermissionError):
    """Raised when a manual trigger presents the wrong API key."""


def compute_signature(payload: bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` HMAC GitHub sends for ``payload``."""
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Return True when ``signature`` matches the HMAC of the raw ``payload``."""
    if not signature:
        return False
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(signature.strip().encode(), expected.encode())


@dc.dataclass(slots=True)
class SyncResult:
    """Structured outcome reported back to the trigger caller.

    Attributes
    ----------
    success : bool
        Whether every requested pipeline finished.
    message : str
        Human-readable summary.
    timestamp : str | None
        ISO-8601 completion time for successful runs.
    error : str | None
        Error message for failed runs.
    reports : list[SyncReport]
        Per-pipeline reports of a successful run.
    """

    success: bool
    message: str
    timestamp: str | None = None
    error: str | None = None
    reports: list[SyncReport] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, typ.Any]:
        if self.success:
            return {
                "success": True,
                "message": self.message,
                "timestamp": self.timestamp,
            }
        return {"success": False, "error": self.error or self.message}


class SyncTrigger:
    """Run syncs on behalf of webhook or manual triggers."""

    def __init__(
        self,
        config: SyncConfig,
        settings: RuntimeSettings,
        *,
        revalidate: cabc.Callable[[str], None] | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """Bind the trigger to a configuration and runtime settings.

        Parameters
        ----------
        config : SyncConfig
            Pipelines available to the trigger.
        settings : RuntimeSettings
            Token, webhook secret and API key.
        revalidate : Callable[[str], None], optional
            Called with each synced pipeline's ``revalidate_path`` after a
            successful run, to ask the site to re-render those pages.
        client_factory : ClientFactory, optional
            Override for building GitHub clients (used by tests).
        """
        self.config = config
        self.settings = settings
        self.revalidate = revalidate
        self.client_factory = client_factory

    def authorize(self, auth_header: str | None) -> None:
        """Reject manual triggers whose ``Authorization`` header is wrong.

        Only enforced when ``SYNC_API_KEY`` is configured.
        """
        key = self.settings.sync_api_key
        if not key:
            return
        expected = f"Bearer {key}"
        if not auth_header or not hmac.compare_digest(
            auth_header.encode(), expected.encode()
        ):
            msg = "Unauthorized"
            raise TriggerAuthError(msg)

    def handle_webhook(
        self,
        body: bytes,
        signature: str | None,
        *,
        pipeline: str | None = None,
        force: bool = False,
    ) -> SyncResult:
        """Verify a webhook delivery, then run the sync.

        Raises
        ------
        WebhookSignatureError
            If a webhook secret is configured and ``signature`` does not match
            the HMAC of ``body``. No sync work happens in that case.
        """
        secret = self.settings.webhook_secret
        if secret and not verify_signature(body, signature, secret):
            msg = "Invalid signature"
            raise WebhookSignatureError(msg)
        if pipeline:
            return self.sync_pipeline(pipeline, force=force)
        return self.sync_now(force=force)

    def sync_now(self, *, force: bool = False) -> SyncResult:
        """Sync every configured pipeline."""
        return self._execute(list(self.config.pipelines), force=force)

    def sync_pipeline(self, name: str, *, force: bool = False) -> SyncResult:
        """Sync only the pipeline registered as ``name``."""
        return self._execute([name], force=force)

    def _execute(self, names: list[str], *, force: bool) -> SyncResult:
        try:
            reports = sync_all(
                self.config,
                token=self.settings.github_token,
                force=force,
                client_factory=self.client_factory,
                names=names,
            )
        except Exception as exc:  # noqa: BLE001 - every failure becomes a result
            logger.exception("Sync error")
            return SyncResult(success=False, message="Sync failed", error=str(exc))

        if self.revalidate is not None:
            for name in names:
                path = self.config.get_pipeline(name).revalidate_path
                if path:
                    self.revalidate(path)
        return SyncResult(
            success=True,
            message="Docs synced successfully",
            timestamp=dt.datetime.now(dt.UTC).isoformat(),
            reports=reports,
        )


__all__ = [
    "SIGNATURE_HEADER",
    "SyncResult",
    "SyncTrigger",
    "TriggerAuthError",
    "WebhookSignatureError",
    "compute_signature",
    "verify_signature",
]
