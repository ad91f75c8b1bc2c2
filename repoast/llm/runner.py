"""HTTP adapter for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import SummarizationError
from ..logging import get_logger

_logger = get_logger("llm")


@dataclass
class CompletionRequest:
    """Everything needed to issue one chat completion call."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def payload(self) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if self.system:
            messages.append({"role": "system", "content": self.system})
        messages.append({"role": "user", "content": self.prompt})
        body: Dict[str, Any] = {"model": self.model, "messages": messages}
        if self.temperature is not None:
            body["temperature"] = self.temperature
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body


class LLMRunner:
    """Sends summary prompts to a chat completion API and returns the reply text."""

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 60.0,
        runner: Callable[[CompletionRequest], str] | None = None,
    ) -> None:
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner or _post_completion

    def run(self, prompt: str, *, system: str | None = None) -> str:
        request = CompletionRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)


def _post_completion(request: CompletionRequest) -> str:
    headers = {"Content-Type": "application/json"}
    if request.api_key:
        headers["Authorization"] = f"Bearer {request.api_key}"
    http_request = Request(
        request.endpoint,
        data=json.dumps(request.payload()).encode("utf-8"),
        headers=headers,
        method="POST",
    )

    try:
        with urlopen(http_request, timeout=request.request_timeout or 60.0) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if exc.fp is not None else ""
        raise SummarizationError(
            f"Completion request failed with status {exc.code}: {detail.strip() or exc.reason}"
        ) from exc
    except URLError as exc:
        raise SummarizationError(f"Completion request failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise SummarizationError("Completion request timed out") from exc

    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SummarizationError("Completion API returned invalid JSON") from exc

    text = _reply_text(body)
    if not text.strip():
        raise SummarizationError("Completion API returned an empty response")
    usage = body.get("usage") if isinstance(body, dict) else None
    if isinstance(usage, dict):
        _logger.debug(
            "Completion used %s prompt and %s completion tokens",
            usage.get("prompt_tokens"),
            usage.get("completion_tokens"),
        )
    return text.strip()


def _reply_text(body: Any) -> str:
    """Pull the first choice's text out of a chat or legacy completion body."""
    if not isinstance(body, dict):
        return ""
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    choice = choices[0]
    message = choice.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content
        # Some gateways return a list of typed content parts.
        if isinstance(content, list):
            return "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            )
    text = choice.get("text")
    return text if isinstance(text, str) else ""


__all__ = ["CompletionRequest", "LLMRunner"]
