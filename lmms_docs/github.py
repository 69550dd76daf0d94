r"""Client for the GitHub contents and tags endpoints.

This module wraps the portions of the GitHub REST API the sync pipelines need:
directory listings at a given ref, the paginated tag list, and raw file
downloads. Non-success responses surface as :class:`GitHubApiError` so a failed
listing aborts the version being synced instead of producing a partial tree.

Example
-------
>>> from lmms_docs.github import GitHubContentsClient
>>> client = GitHubContentsClient("EvolvingLMMs-Lab/lmms-eval")  # doctest: +SKIP
>>> [entry.name for entry in client.list_directory("docs")][:2]  # doctest: +SKIP
['README.md', 'caching.md']
>>> client.list_tags()[:1]  # doctest: +SKIP
['v0.6.1']
"""

from __future__ import annotations

import json
import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .log import get_logger
from .models import RemoteEntry

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_RAW_BASE = "https://raw.githubusercontent.com"
DEFAULT_PAGE_SIZE = 100
_ACCEPT_HEADER = "application/vnd.github.v3+json"
_USER_AGENT = "lmms-docs/0.1"

logger = get_logger(__name__)


class GitHubApiError(RuntimeError):
    """Raised when GitHub responds with a non-success status or is unreachable.

    Attributes
    ----------
    status : int | None
        HTTP status code, or ``None`` for transport failures.
    url : str
        Requested URL.
    """

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


def _build_session() -> requests.Session:
    # Only connection failures are retried; HTTP error statuses surface as-is.
    retry = Retry(total=3, connect=3, read=0, status=0, backoff_factor=0.5)
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class GitHubContentsClient:
    """Thin wrapper around GitHub contents, tags and raw download endpoints.

    The client is bound to one ``owner/name`` repository. Requests are issued
    sequentially and never retried on error statuses, which keeps anonymous
    usage within the API rate limits.
    """

    default_api_base = DEFAULT_API_BASE

    def __init__(
        self,
        repo: str,
        *,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        raw_base: str = DEFAULT_RAW_BASE,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """Initialise the client for ``repo`` with optional authentication.

        Parameters
        ----------
        repo : str
            Repository identifier in ``owner/name`` form.
        token : str | None, optional
            Personal access token; when provided an ``Authorization: Bearer``
            header is attached to every request. Anonymous access is allowed.
        api_base : str, optional
            Base URL for the GitHub API; override for GitHub Enterprise.
        raw_base : str, optional
            Base URL serving raw file contents.
        session : requests.Session, optional
            Preconfigured session to reuse connections. Defaults to a new
            session that retries connection failures only.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``30.0``.
        page_size : int, optional
            Page size used when paginating tags. Defaults to ``100``.
        """
        normalized = repo.strip().strip("/")
        if not normalized or "/" not in normalized:
            msg = f"Repository must be in 'owner/name' form, got {repo!r}"
            raise ValueError(msg)
        self.repo = normalized
        self._token = token
        self._api_base = api_base.rstrip("/") or DEFAULT_API_BASE
        self._raw_base = raw_base.rstrip("/") or DEFAULT_RAW_BASE
        self._session = session or _build_session()
        self.timeout = timeout
        self.page_size = page_size

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self, *, api: bool) -> dict[str, str]:
        headers = {"User-Agent": _USER_AGENT}
        if api:
            headers["Accept"] = _ACCEPT_HEADER
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(
        self,
        url: str,
        *,
        api: bool,
        params: dict[str, typ.Any] | None = None,
        action: str,
    ) -> requests.Response:
        try:
            response = self._session.get(
                url,
                headers=self._headers(api=api),
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach GitHub while {action}: {exc}"
            raise GitHubApiError(msg, url=url) from exc

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = (response.text or "")[:200]
            msg = (
                f"GitHub request while {action} failed with status "
                f"{response.status_code}: {snippet}"
            )
            raise GitHubApiError(msg, url=url, status=response.status_code)
        return response

    def _json(self, response: requests.Response, *, action: str, url: str) -> object:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            msg = f"GitHub response while {action} was not valid JSON"
            raise GitHubApiError(msg, url=url, status=response.status_code) from exc

    def list_directory(self, path: str, ref: str | None = None) -> list[RemoteEntry]:
        """Return the entries of ``path`` at ``ref`` (default branch when None).

        Parameters
        ----------
        path : str
            Repository-relative directory path, e.g. ``docs/getting_started``.
        ref : str | None, optional
            Branch or tag to list; the repository default branch when omitted.

        Returns
        -------
        list[RemoteEntry]
            Entries in the order GitHub returns them.

        Raises
        ------
        GitHubApiError
            If GitHub responds with an error status or the payload is not a
            directory listing.
        """
        normalized = path.strip("/")
        url = f"{self._api_base}/repos/{self.repo}/contents/{normalized}"
        params = {"ref": ref} if ref else None
        action = f"listing '{normalized}'" + (f" at '{ref}'" if ref else "")
        logger.debug("GET %s (ref=%s)", url, ref)
        response = self._get(url, api=True, params=params, action=action)
        payload = self._json(response, action=action, url=url)
        if not isinstance(payload, list):
            msg = f"Expected a directory listing while {action}"
            raise GitHubApiError(msg, url=url, status=response.status_code)
        return [
            RemoteEntry.from_payload(item) for item in payload if isinstance(item, dict)
        ]

    def list_tags(self) -> list[str]:
        """Return every tag name, following pagination until a short page."""
        url = f"{self._api_base}/repos/{self.repo}/tags"
        tags: list[str] = []
        page = 1
        while True:
            action = f"fetching tags (page {page})"
            params = {"per_page": self.page_size, "page": page}
            response = self._get(url, api=True, params=params, action=action)
            batch = self._json(response, action=action, url=url)
            if not isinstance(batch, list) or not batch:
                break
            tags.extend(
                str(item["name"])
                for item in batch
                if isinstance(item, dict) and item.get("name")
            )
            if len(batch) < self.page_size:
                break
            page += 1
        return tags

    def download(self, url: str) -> str:
        """Return the text body served at ``url``."""
        response = self._get(url, api=False, action=f"downloading '{url}'")
        return response.text

    def raw_url(self, ref: str, path: str) -> str:
        """Return the raw content URL of ``path`` at ``ref``."""
        return f"{self._raw_base}/{self.repo}/{quote(ref, safe='')}/{path.lstrip('/')}"


__all__ = [
    "DEFAULT_API_BASE",
    "DEFAULT_RAW_BASE",
    "GitHubApiError",
    "GitHubContentsClient",
]
