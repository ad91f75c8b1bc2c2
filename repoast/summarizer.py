"""Natural-language file summaries obtained through the rate-limited gate."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional, Protocol

from .logging import get_logger
from .ratelimit import RateLimiter

DEFAULT_SYSTEM_PROMPT = (
    "You are a senior engineer documenting a code repository. "
    "Answer in two or three sentences of plain prose."
)
FALLBACK_PREFIX = "Error generating summary"


class CompletionRunner(Protocol):
    def run(self, prompt: str, *, system: str | None = None) -> str:
        ...


class Summarizer:
    """Asks the completion service what a file is for.

    Every call passes through the shared RateLimiter first. Failures are never
    raised; they come back as a fallback string carrying the error detail.
    """

    def __init__(
        self,
        runner: CompletionRunner,
        limiter: RateLimiter,
        *,
        max_chars: int = 12000,
        system: Optional[str] = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self.runner = runner
        self.limiter = limiter
        self.max_chars = max_chars
        self.system = system
        self.logger = get_logger("summarizer")

    def build_prompt(self, path: str, content: str) -> str:
        name = PurePosixPath(path).name or path
        body = content
        truncated = self.max_chars > 0 and len(body) > self.max_chars
        if truncated:
            body = body[: self.max_chars]
        lines = [
            f"Please provide a brief summary of the purpose of the file `{name}` ({path}).",
            "",
            "```",
            body,
            "```",
        ]
        if truncated:
            lines.append(f"(content truncated to the first {self.max_chars} characters)")
        return "\n".join(lines)

    def summarize(self, path: str, content: str) -> str:
        prompt = self.build_prompt(path, content)
        self.limiter.acquire()
        try:
            summary = self.runner.run(prompt, system=self.system).strip()
        except Exception as exc:
            self.logger.warning("Summary failed for %s: %s", path, exc)
            return f"{FALLBACK_PREFIX}: {exc}"
        return summary


__all__ = ["CompletionRunner", "DEFAULT_SYSTEM_PROMPT", "FALLBACK_PREFIX", "Summarizer"]
