"""Unit tests for the GitHub contents client."""

from __future__ import annotations

import typing as typ

import pytest
import requests

from lmms_docs.github import GitHubApiError, GitHubContentsClient

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _response(
    mocker: MockerFixture,
    *,
    status: int = 200,
    payload: object = None,
    text: str = "",
) -> typ.Any:
    response = mocker.Mock()
    response.status_code = status
    response.json.return_value = payload
    response.text = text
    return response


def test_list_directory_requests_ref_and_parses_entries(
    mocker: MockerFixture,
) -> None:
    """Listings hit the contents endpoint with the ref and auth headers."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(
        mocker,
        payload=[
            {
                "name": "quickstart.md",
                "path": "docs/quickstart.md",
                "type": "file",
                "download_url": "https://raw.example.invalid/quickstart.md",
            },
            {"name": "guides", "path": "docs/guides", "type": "dir"},
        ],
    )

    client = GitHubContentsClient(
        "owner/repo",
        token="secret-token",
        api_base="https://example.invalid",
        session=session,
    )
    entries = client.list_directory("docs", "v0.1.0")

    assert [entry.name for entry in entries] == ["quickstart.md", "guides"]
    assert entries[0].is_file, "expected the Markdown entry to be a file"
    assert entries[1].is_dir, "expected the guides entry to be a directory"
    assert entries[1].download_url is None

    called_url = session.get.call_args.args[0]
    assert called_url == "https://example.invalid/repos/owner/repo/contents/docs", (
        f"expected contents endpoint to be requested, got {called_url!r}"
    )
    kwargs = session.get.call_args.kwargs
    assert kwargs["params"] == {"ref": "v0.1.0"}
    assert kwargs["headers"]["Authorization"] == "Bearer secret-token", (
        "expected Authorization header to include Bearer token"
    )
    assert kwargs["headers"]["Accept"] == "application/vnd.github.v3+json"


def test_anonymous_client_sends_no_authorization(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, payload=[])

    client = GitHubContentsClient("owner/repo", session=session)
    client.list_directory("docs")

    kwargs = session.get.call_args.kwargs
    assert "Authorization" not in kwargs["headers"], "anonymous access expected"
    assert kwargs["params"] is None, "default branch listing must not send a ref"
    assert not client.authenticated


def test_list_directory_error_status_raises(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, status=404, text="Not Found")

    client = GitHubContentsClient("owner/repo", session=session)
    with pytest.raises(GitHubApiError) as excinfo:
        client.list_directory("docs", "v9.9.9")

    assert excinfo.value.status == 404, "expected the HTTP status on the error"
    assert "v9.9.9" in str(excinfo.value)


def test_list_directory_rejects_file_payload(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(
        mocker, payload={"name": "README.md", "type": "file"}
    )

    client = GitHubContentsClient("owner/repo", session=session)
    with pytest.raises(GitHubApiError, match="directory listing"):
        client.list_directory("docs/README.md")


def test_transport_failures_become_api_errors(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("offline")

    client = GitHubContentsClient("owner/repo", session=session)
    with pytest.raises(GitHubApiError) as excinfo:
        client.list_tags()

    assert excinfo.value.status is None


def test_list_tags_follows_pagination(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = [
        _response(mocker, payload=[{"name": "v0.3.0"}, {"name": "v0.2.0"}]),
        _response(mocker, payload=[{"name": "v0.1.0"}]),
    ]

    client = GitHubContentsClient("owner/repo", session=session, page_size=2)
    tags = client.list_tags()

    assert tags == ["v0.3.0", "v0.2.0", "v0.1.0"], f"unexpected tags {tags!r}"
    pages = [call.kwargs["params"]["page"] for call in session.get.call_args_list]
    assert pages == [1, 2], "expected pagination to stop after a short page"


def test_list_tags_stops_on_empty_page(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = [
        _response(mocker, payload=[{"name": "v0.2.0"}, {"name": "v0.1.0"}]),
        _response(mocker, payload=[]),
    ]

    client = GitHubContentsClient("owner/repo", session=session, page_size=2)
    assert client.list_tags() == ["v0.2.0", "v0.1.0"]
    assert session.get.call_count == 2


def test_download_returns_text_without_api_accept_header(
    mocker: MockerFixture,
) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, text="# Title\n")

    client = GitHubContentsClient("owner/repo", session=session)
    url = client.raw_url("v0.1.0", "docs/README.md")

    assert url == "https://raw.githubusercontent.com/owner/repo/v0.1.0/docs/README.md"
    assert client.download(url) == "# Title\n"
    assert "Accept" not in session.get.call_args.kwargs["headers"]


def test_raw_url_quotes_branch_names() -> None:
    client = GitHubContentsClient(
        "owner/repo",
        raw_base="https://raw.example.invalid/",
        session=requests.Session(),
    )
    assert client.raw_url("feature/docs", "/docs/a.md") == (
        "https://raw.example.invalid/owner/repo/feature%2Fdocs/docs/a.md"
    )


@pytest.mark.parametrize("repo", ["", "lmms-eval", "/"])
def test_repo_must_be_owner_and_name(repo: str) -> None:
    with pytest.raises(ValueError, match="owner/name"):
        GitHubContentsClient(repo, session=requests.Session())
