"""Minimal JSON-over-HTTP helper shared by the remote collaborators."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import RemoteFetchError


def request_json(
    url: str,
    *,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    payload: Optional[Any] = None,
    timeout: float = 30.0,
) -> Any:
    """Send a request and decode the JSON response body."""
    request_headers: Dict[str, str] = {"Accept": "application/json"}
    request_headers.update(headers or {})
    data = None
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        request_headers["Content-Type"] = "application/json"

    http_request = Request(url, data=data, headers=request_headers, method=method)
    try:
        with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
        message = detail.strip() or exc.reason
        raise RemoteFetchError(
            f"{method} {url} failed with status {exc.code}: {message}", status=exc.code
        ) from exc
    except URLError as exc:
        raise RemoteFetchError(f"{method} {url} failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise RemoteFetchError(f"{method} {url} timed out") from exc

    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RemoteFetchError(f"{method} {url} returned invalid JSON") from exc


__all__ = ["request_json"]
