"""Configuration loading for repoast (.repoast.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".repoast.yml"
DEFAULT_IGNORE_DIRS = frozenset({"node_modules"})


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SummarizerConfig:
    """Completion-service settings used to annotate files with summaries."""

    enabled: bool = True
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = 0.2
    max_tokens: Optional[int] = 256
    request_timeout: Optional[float] = 60.0
    min_interval_ms: int = 1000
    max_chars: int = 12000


@dataclass
class GitHubConfig:
    """Source-hosting API settings for remote mode."""

    token: Optional[str] = None
    base_url: str = "https://api.github.com"
    request_timeout: float = 30.0


@dataclass
class SandboxConfig:
    """Sandbox-preview API settings for publishing generated applications."""

    base_url: str = "https://codesandbox.io"
    request_timeout: float = 30.0


@dataclass
class RepoastConfig:
    """Represents the settings defined in .repoast.yml."""

    root: Path
    ignore_dirs: frozenset = DEFAULT_IGNORE_DIRS
    workers: int = 4
    include_source: bool = False
    output: Optional[str] = None
    summarizer: SummarizerConfig = field(default_factory=SummarizerConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)


_ENV_SUMMARIZER_KEYS = {
    "api_key": ("REPOAST_LLM_API_KEY", "OPENAI_API_KEY"),
    "model": ("REPOAST_LLM_MODEL", "OPENAI_MODEL"),
    "base_url": ("REPOAST_LLM_BASE_URL", "OPENAI_BASE_URL"),
}
_ENV_GITHUB_TOKEN_KEYS = ("REPOAST_GITHUB_TOKEN", "GITHUB_TOKEN")


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> RepoastConfig:
    """Load configuration from disk, filling unset secrets from the environment."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        loaded = _read_config(config_file)
        if not isinstance(loaded, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
        data = loaded

    config = RepoastConfig(root=root)
    config.ignore_dirs = DEFAULT_IGNORE_DIRS | frozenset(_as_str_list(data.get("ignore_dirs")))

    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError("workers must be a positive integer")
        config.workers = workers
    config.include_source = _as_bool(data.get("include_source")) or False
    config.output = _as_str(data.get("output"))

    config.summarizer = _build_summarizer_config(_as_dict(data.get("summarizer")), env)
    config.github = _build_github_config(_as_dict(data.get("github")), env)

    sandbox_data = _as_dict(data.get("sandbox"))
    sandbox = SandboxConfig()
    if sandbox_data:
        sandbox.base_url = _as_str(sandbox_data.get("base_url")) or sandbox.base_url
        timeout = _as_float(sandbox_data.get("request_timeout"))
        if timeout is not None:
            sandbox.request_timeout = timeout
    config.sandbox = sandbox

    return config


def _build_summarizer_config(
    data: Dict[str, Any], env: Mapping[str, str]
) -> SummarizerConfig:
    summarizer = SummarizerConfig()
    enabled = _as_bool(data.get("enabled"))
    if enabled is not None:
        summarizer.enabled = enabled
    summarizer.model = _as_str(data.get("model"))
    summarizer.base_url = _as_str(data.get("base_url"))
    summarizer.api_key = _as_str(data.get("api_key"))
    for attr in ("temperature", "request_timeout"):
        value = _as_float(data.get(attr))
        if value is not None:
            setattr(summarizer, attr, value)
    max_tokens = _as_int(data.get("max_tokens"))
    if max_tokens is not None:
        summarizer.max_tokens = max_tokens
    interval = _as_int(data.get("min_interval_ms"))
    if interval is not None:
        if interval < 0:
            raise ConfigError("summarizer.min_interval_ms must not be negative")
        summarizer.min_interval_ms = interval
    max_chars = _as_int(data.get("max_chars"))
    if max_chars is not None:
        summarizer.max_chars = max_chars

    for attr, keys in _ENV_SUMMARIZER_KEYS.items():
        if getattr(summarizer, attr) is None:
            setattr(summarizer, attr, _first_env_value(env, keys))
    return summarizer


def _build_github_config(data: Dict[str, Any], env: Mapping[str, str]) -> GitHubConfig:
    github = GitHubConfig()
    github.token = _as_str(data.get("token")) or _first_env_value(env, _ENV_GITHUB_TOKEN_KEYS)
    github.base_url = _as_str(data.get("base_url")) or github.base_url
    timeout = _as_float(data.get("request_timeout"))
    if timeout is not None:
        github.request_timeout = timeout
    return github


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _first_env_value(env: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = env.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_IGNORE_DIRS",
    "GitHubConfig",
    "RepoastConfig",
    "SandboxConfig",
    "SummarizerConfig",
    "load_config",
]
