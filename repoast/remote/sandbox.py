"""Publishes a generated React component to a sandbox and returns its preview URL."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict

from ..errors import PublishError, RemoteFetchError
from ..logging import get_logger
from .http import request_json

_PACKAGE_JSON = {
    "name": "repoast-preview",
    "version": "1.0.0",
    "main": "src/index.js",
    "dependencies": {
        "react": "^18.2.0",
        "react-dom": "^18.2.0",
        "react-icons": "^4.12.0",
        "react-scripts": "5.0.1",
    },
}

_INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <script src="https://cdn.tailwindcss.com"></script>
    <title>Preview</title>
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>
"""

_INDEX_JS = """import React from "react";
import { createRoot } from "react-dom/client";
import App from "./App";

createRoot(document.getElementById("root")).render(<App />);
"""


@dataclass(frozen=True)
class SandboxPreview:
    """Identifiers of a published sandbox."""

    sandbox_id: str
    preview_url: str
    editor_url: str


class SandboxPublisher:
    """Creates a sandbox via the CodeSandbox define API."""

    def __init__(
        self,
        *,
        base_url: str = "https://codesandbox.io",
        request_timeout: float = 30.0,
        transport: Callable[..., Any] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport or request_json
        self.logger = get_logger("sandbox")

    @staticmethod
    def build_files(code: str) -> Dict[str, Dict[str, str]]:
        return {
            "package.json": {"content": json.dumps(_PACKAGE_JSON, indent=2)},
            "public/index.html": {"content": _INDEX_HTML},
            "src/index.js": {"content": _INDEX_JS},
            "src/App.js": {"content": code},
        }

    def publish(self, code: str) -> SandboxPreview:
        if not code or not code.strip():
            raise ValueError("Application code must not be empty")
        try:
            payload = self._transport(
                f"{self.base_url}/api/v1/sandboxes/define?json=1",
                method="POST",
                payload={"files": self.build_files(code)},
                timeout=self.request_timeout,
            )
        except RemoteFetchError as exc:
            raise PublishError(f"Sandbox creation failed: {exc}") from exc

        sandbox_id = payload.get("sandbox_id") if isinstance(payload, dict) else None
        if not isinstance(sandbox_id, str) or not sandbox_id:
            raise PublishError("Sandbox API response did not include a sandbox_id")
        self.logger.info("Published sandbox %s", sandbox_id)
        return SandboxPreview(
            sandbox_id=sandbox_id,
            preview_url=f"https://{sandbox_id}.csb.app/",
            editor_url=f"{self.base_url}/s/{sandbox_id}",
        )


__all__ = ["SandboxPreview", "SandboxPublisher"]
