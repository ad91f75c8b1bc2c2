"""Clients for the source-hosting and sandbox-preview services."""

from .github import GitHubClient, RemoteFile
from .sandbox import SandboxPreview, SandboxPublisher

__all__ = ["GitHubClient", "RemoteFile", "SandboxPreview", "SandboxPublisher"]
