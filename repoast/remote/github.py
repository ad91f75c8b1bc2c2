"""GitHub REST client resolving repositories into metadata, listings and blobs."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import quote

from ..errors import RemoteFetchError
from ..logging import get_logger
from ..models import RepositoryMetadata
from .http import request_json

Transport = Callable[..., Any]


@dataclass(frozen=True)
class RemoteFile:
    """One blob entry of a repository tree."""

    path: str
    sha: str
    size: Optional[int] = None


class GitHubClient:
    """Reads repository metadata, the recursive file tree and raw blobs."""

    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        request_timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport or request_json
        self.logger = get_logger("github")

    def fetch_metadata(self, owner: str, repo: str) -> RepositoryMetadata:
        payload = self._get(f"/repos/{_segment(owner)}/{_segment(repo)}")
        if not isinstance(payload, dict):
            raise RemoteFetchError("Repository response was not an object")
        name = payload.get("name")
        homepage = payload.get("homepage")
        html_url = payload.get("html_url")
        description = payload.get("description")
        return RepositoryMetadata(
            name=name if isinstance(name, str) else repo,
            description=description if isinstance(description, str) else None,
            link=homepage if isinstance(homepage, str) and homepage else html_url,
        )

    def list_files(self, owner: str, repo: str, *, ref: str = "HEAD") -> List[RemoteFile]:
        payload = self._get(
            f"/repos/{_segment(owner)}/{_segment(repo)}/git/trees/{_segment(ref)}?recursive=1"
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("tree"), list):
            raise RemoteFetchError("Tree response did not contain a file listing")
        if payload.get("truncated"):
            self.logger.warning("Tree listing for %s/%s was truncated by the API", owner, repo)

        files: List[RemoteFile] = []
        for entry in payload["tree"]:
            if not isinstance(entry, dict) or entry.get("type") != "blob":
                continue
            path, sha = entry.get("path"), entry.get("sha")
            if not isinstance(path, str) or not isinstance(sha, str):
                continue
            size = entry.get("size")
            files.append(RemoteFile(path=path, sha=sha, size=size if isinstance(size, int) else None))
        return files

    def fetch_content(self, owner: str, repo: str, entry: RemoteFile) -> bytes:
        payload = self._get(f"/repos/{_segment(owner)}/{_segment(repo)}/git/blobs/{entry.sha}")
        if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
            raise RemoteFetchError(f"Blob response for {entry.path} had no content")
        content = payload["content"]
        if payload.get("encoding") == "base64":
            try:
                return base64.b64decode(content)
            except (binascii.Error, ValueError) as exc:
                raise RemoteFetchError(f"Blob for {entry.path} is not valid base64") from exc
        return content.encode("utf-8")

    def _get(self, path: str) -> Any:
        return self._transport(
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.request_timeout,
        )

    def _headers(self) -> Mapping[str, str]:
        headers: Dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "repoast",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


def _segment(value: str) -> str:
    return quote(value, safe="")


__all__ = ["GitHubClient", "RemoteFile"]
