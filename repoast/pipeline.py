"""Pipeline orchestration for local and remote ingestion runs."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .classifier import classify
from .config import RepoastConfig
from .errors import ParseError, RemoteFetchError
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import Aggregate, ContentCategory, FileRecord, RecordStatus
from .parsers import SKIPPED_CATEGORIES, parse_content
from .ratelimit import RateLimiter
from .remote.github import GitHubClient, RemoteFile
from .serializer import dump
from .summarizer import CompletionRunner, Summarizer
from .walker import TreeWalker, is_ignored

LOCAL_ARTIFACT_NAME = "asts.json"

_SKIP_REASONS = {
    ContentCategory.MEDIA: "Binary or media file",
    ContentCategory.UNSUPPORTED: "Unsupported file type",
}

_Task = Tuple[str, Callable[[], FileRecord]]


class Pipeline:
    """Classifies, parses and summarizes every file of a tree into an Aggregate.

    One instance corresponds to one run context: it owns the RateLimiter that
    every summary request of its runs goes through.
    """

    def __init__(
        self,
        config: RepoastConfig | None = None,
        *,
        walker: TreeWalker | None = None,
        summarizer: Summarizer | None = None,
        llm_runner: CompletionRunner | None = None,
        github: GitHubClient | None = None,
    ) -> None:
        self.config = config or RepoastConfig(root=Path.cwd())
        self.walker = walker or TreeWalker(self.config.ignore_dirs)
        self.logger = get_logger("pipeline")
        self.summarizer = summarizer or self._build_summarizer(llm_runner)
        self._github = github

    @property
    def github(self) -> GitHubClient:
        if self._github is None:
            settings = self.config.github
            self._github = GitHubClient(
                token=settings.token,
                base_url=settings.base_url,
                request_timeout=settings.request_timeout,
            )
        return self._github

    def run_local(self, root: str | Path) -> Aggregate:
        """Process every file under ``root``; TraversalError aborts the run."""
        root_path = Path(root).expanduser().resolve()
        self.logger.info("Starting local run for %s", root_path)
        paths = self.walker.walk(root_path)
        self.logger.debug("Walker discovered %d files", len(paths))

        tasks: List[_Task] = [
            (rel_path, lambda rel_path=rel_path: self._load_local(root_path, rel_path))
            for rel_path in paths
        ]
        records = self._process_all(tasks)
        self._log_totals(records)
        return Aggregate(metadata=None, files=tuple(records))

    def run_remote(self, owner: str, repo: str) -> Aggregate:
        """Process every file of ``owner/repo`` fetched through the GitHub client."""
        self.logger.info("Starting remote run for %s/%s", owner, repo)
        try:
            metadata = self.github.fetch_metadata(owner, repo)
        except RemoteFetchError as exc:
            self.logger.warning("Repository metadata unavailable for %s/%s: %s", owner, repo, exc)
            metadata = None

        try:
            entries = self.github.list_files(owner, repo)
        except RemoteFetchError as exc:
            self.logger.error("File listing unavailable for %s/%s: %s", owner, repo, exc)
            entries = []

        kept = [entry for entry in entries if not is_ignored(entry.path, self.walker.ignore_dirs)]
        if len(kept) != len(entries):
            self.logger.debug("Dropped %d files under ignored directories", len(entries) - len(kept))

        tasks: List[_Task] = [
            (entry.path, lambda entry=entry: self._load_remote(owner, repo, entry))
            for entry in kept
        ]
        records = self._process_all(tasks)
        self._log_totals(records)
        return Aggregate(metadata=metadata, files=tuple(records))

    def process_file(self, path: str, content: bytes) -> FileRecord:
        """Run one file through classify, parse and summarize."""
        category = classify(path)
        if category in SKIPPED_CATEGORIES:
            return self._skipped_record(path, category, len(content))

        size = len(content)
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            self.logger.warning("Cannot decode %s as UTF-8: %s", path, exc.reason)
            return self._error_record(path, category, size, f"File is not valid UTF-8: {exc.reason}")
        source = text if self.config.include_source else None

        try:
            representation = parse_content(category, text, path=path)
        except ParseError as exc:
            self.logger.warning("Error parsing %s file %s: %s", category.value, path, exc)
            return self._error_record(path, category, size, str(exc), source=source)
        except Exception as exc:
            self._log_exception(f"Unexpected failure parsing {path}", exc)
            message = str(exc) or exc.__class__.__name__
            return self._error_record(path, category, size, message, source=source)

        summary = self.summarizer.summarize(path, text) if self.summarizer is not None else None
        return FileRecord(
            path=path,
            category=category,
            status=RecordStatus.PARSED,
            source_size=size,
            representation=representation,
            summary=summary,
            source=source,
        )

    def artifact_name(self, repo: str | None = None) -> str:
        if self.config.output:
            return self.config.output
        if repo:
            return f"{repo}.json"
        return LOCAL_ARTIFACT_NAME

    @staticmethod
    def write(aggregate: Aggregate, destination: str | Path, *, indent: int | None = None) -> Path:
        """Serialize ``aggregate`` to ``destination``, tolerating shared references."""
        return dump(aggregate.to_document(), destination, indent=indent)

    # ------------------------------------------------------------------
    # Internal helpers

    def _build_summarizer(self, llm_runner: CompletionRunner | None) -> Summarizer | None:
        settings = self.config.summarizer
        if not settings.enabled:
            self.logger.debug("Summaries disabled by configuration")
            return None
        if llm_runner is None:
            if not settings.api_key:
                self.logger.debug("No completion API key configured; summaries disabled")
                return None
            llm_runner = LLMRunner(
                settings.model,
                base_url=settings.base_url,
                api_key=settings.api_key,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
                request_timeout=settings.request_timeout,
            )
        limiter = RateLimiter(settings.min_interval_ms)
        return Summarizer(llm_runner, limiter, max_chars=settings.max_chars)

    def _load_local(self, root: Path, rel_path: str) -> FileRecord:
        path = root / rel_path
        category = classify(rel_path)
        if category in SKIPPED_CATEGORIES:
            return self._skipped_record(rel_path, category, path.stat().st_size)
        return self.process_file(rel_path, path.read_bytes())

    def _load_remote(self, owner: str, repo: str, entry: RemoteFile) -> FileRecord:
        category = classify(entry.path)
        if category in SKIPPED_CATEGORIES:
            return self._skipped_record(entry.path, category, entry.size or 0)
        return self.process_file(entry.path, self.github.fetch_content(owner, repo, entry))

    def _process_all(self, tasks: Sequence[_Task]) -> List[FileRecord]:
        # Slots are indexed by traversal position so output order never depends on timing.
        results: List[Optional[FileRecord]] = [None] * len(tasks)
        workers = max(1, self.config.workers)
        if workers == 1 or len(tasks) <= 1:
            for index, (path, task) in enumerate(tasks):
                results[index] = self._run_isolated(path, task)
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repoast") as executor:
                futures = [
                    executor.submit(self._run_isolated, path, task) for path, task in tasks
                ]
                for index, future in enumerate(futures):
                    results[index] = future.result()
        return [record for record in results if record is not None]

    def _run_isolated(self, path: str, task: Callable[[], FileRecord]) -> FileRecord:
        try:
            return task()
        except (OSError, RemoteFetchError) as exc:
            self.logger.warning("Unable to read %s: %s", path, exc)
            return self._error_record(path, classify(path), 0, f"Unable to read file: {exc}")
        except Exception as exc:
            self._log_exception(f"Unexpected failure processing {path}", exc)
            return self._error_record(path, classify(path), 0, str(exc) or exc.__class__.__name__)

    def _skipped_record(self, path: str, category: ContentCategory, size: int) -> FileRecord:
        reason = _SKIP_REASONS[category]
        self.logger.info("Skipping %s: %s", path, reason.lower())
        return FileRecord(
            path=path,
            category=category,
            status=RecordStatus.SKIPPED,
            source_size=size,
            reason=reason,
        )

    @staticmethod
    def _error_record(
        path: str,
        category: ContentCategory,
        size: int,
        message: str,
        *,
        source: str | None = None,
    ) -> FileRecord:
        return FileRecord(
            path=path,
            category=category,
            status=RecordStatus.ERROR,
            source_size=size,
            error=message,
            source=source,
        )

    def _log_totals(self, records: Sequence[FileRecord]) -> None:
        counts = {status: 0 for status in RecordStatus}
        for record in records:
            counts[record.status] += 1
        self.logger.info(
            "Processed %d files (%d parsed, %d errors, %d skipped)",
            len(records),
            counts[RecordStatus.PARSED],
            counts[RecordStatus.ERROR],
            counts[RecordStatus.SKIPPED],
        )

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["LOCAL_ARTIFACT_NAME", "Pipeline"]
