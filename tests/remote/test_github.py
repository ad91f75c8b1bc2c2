"""Tests for the GitHub REST client."""

from __future__ import annotations

import base64
from typing import Any, Dict, List

import pytest

from repoast.errors import RemoteFetchError
from repoast.remote.github import GitHubClient, RemoteFile


class _Transport:
    def __init__(self, responses: Dict[str, Any]) -> None:
        self.responses = responses
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, *, headers: Dict[str, str], timeout: float) -> Any:
        self.calls.append({"url": url, "headers": dict(headers), "timeout": timeout})
        return self.responses[url]


def test_metadata_prefers_homepage_link() -> None:
    transport = _Transport(
        {
            "https://api.github.com/repos/acme/site": {
                "name": "site",
                "description": "Landing page",
                "homepage": "https://acme.example",
                "html_url": "https://github.com/acme/site",
            }
        }
    )

    metadata = GitHubClient(transport=transport).fetch_metadata("acme", "site")

    assert metadata.name == "site"
    assert metadata.description == "Landing page"
    assert metadata.link == "https://acme.example"


def test_metadata_falls_back_to_html_url_and_repo_name() -> None:
    transport = _Transport(
        {
            "https://api.github.com/repos/acme/site": {
                "description": None,
                "homepage": "",
                "html_url": "https://github.com/acme/site",
            }
        }
    )

    metadata = GitHubClient(transport=transport).fetch_metadata("acme", "site")

    assert metadata.name == "site"
    assert metadata.description is None
    assert metadata.link == "https://github.com/acme/site"


def test_token_and_timeout_are_forwarded() -> None:
    transport = _Transport({"https://ghe.example/api/v3/repos/acme/site": {"name": "site"}})
    client = GitHubClient(
        token="secret",
        base_url="https://ghe.example/api/v3/",
        request_timeout=5.0,
        transport=transport,
    )

    client.fetch_metadata("acme", "site")

    (call,) = transport.calls
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["headers"]["Accept"] == "application/vnd.github+json"
    assert call["timeout"] == 5.0


def test_listing_keeps_blobs_only() -> None:
    transport = _Transport(
        {
            "https://api.github.com/repos/acme/site/git/trees/HEAD?recursive=1": {
                "truncated": True,
                "tree": [
                    {"path": "src", "type": "tree", "sha": "t"},
                    {"path": "src/index.js", "type": "blob", "sha": "a", "size": 12},
                    {"path": "vendor", "type": "commit", "sha": "c"},
                    {"path": "README.md", "type": "blob", "sha": "b"},
                ],
            }
        }
    )

    files = GitHubClient(transport=transport).list_files("acme", "site")

    assert files == [
        RemoteFile(path="src/index.js", sha="a", size=12),
        RemoteFile(path="README.md", sha="b", size=None),
    ]


def test_listing_without_tree_raises() -> None:
    transport = _Transport(
        {"https://api.github.com/repos/acme/site/git/trees/HEAD?recursive=1": {"message": "nope"}}
    )

    with pytest.raises(RemoteFetchError):
        GitHubClient(transport=transport).list_files("acme", "site")


def test_blob_content_is_base64_decoded() -> None:
    encoded = base64.b64encode("body { margin: 0 }\n".encode("utf-8")).decode("ascii")
    # Blob payloads arrive with embedded line breaks.
    wrapped = "\n".join(encoded[i : i + 8] for i in range(0, len(encoded), 8))
    transport = _Transport(
        {
            "https://api.github.com/repos/acme/site/git/blobs/abc": {
                "content": wrapped,
                "encoding": "base64",
            }
        }
    )

    content = GitHubClient(transport=transport).fetch_content(
        "acme", "site", RemoteFile(path="main.css", sha="abc")
    )

    assert content == b"body { margin: 0 }\n"


def test_blob_without_content_raises() -> None:
    transport = _Transport({"https://api.github.com/repos/acme/site/git/blobs/abc": {}})

    with pytest.raises(RemoteFetchError):
        GitHubClient(transport=transport).fetch_content(
            "acme", "site", RemoteFile(path="main.css", sha="abc")
        )


def test_path_segments_are_quoted() -> None:
    transport = _Transport({"https://api.github.com/repos/a%20b/c%2Fd": {"name": "c/d"}})

    assert GitHubClient(transport=transport).fetch_metadata("a b", "c/d").name == "c/d"
