"""Tests for the FastAPI service mode."""

from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

from repoast.errors import PublishError, RemoteFetchError
from repoast.models import (
    Aggregate,
    ContentCategory,
    DomNode,
    FileRecord,
    RecordStatus,
    RepositoryMetadata,
)
from repoast.remote.sandbox import SandboxPreview
from repoast.service import create_app


class _StubPipeline:
    def __init__(self) -> None:
        self.calls: List[tuple[str, str]] = []

    def run_remote(self, owner: str, repo: str) -> Aggregate:
        self.calls.append((owner, repo))
        root = DomNode(type="root")
        heading = DomNode(type="tag", name="h1", parent=root)
        root.children.append(heading)
        return Aggregate(
            metadata=RepositoryMetadata(name=repo, description="Demo", link="https://demo.example"),
            files=(
                FileRecord(
                    path="README.md",
                    category=ContentCategory.PROSE,
                    status=RecordStatus.PARSED,
                    source_size=7,
                    representation=root,
                    summary="Project readme.",
                ),
                FileRecord(
                    path="logo.png",
                    category=ContentCategory.MEDIA,
                    status=RecordStatus.SKIPPED,
                    source_size=100,
                    reason="Binary or media file",
                ),
            ),
        )


class _StubPublisher:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.published: List[str] = []

    def publish(self, code: str) -> SandboxPreview:
        if self.error is not None:
            raise self.error
        if not code.strip():
            raise ValueError("Application code must not be empty")
        self.published.append(code)
        return SandboxPreview("abc", "https://abc.csb.app/", "https://codesandbox.io/s/abc")


@pytest.fixture
def pipeline() -> _StubPipeline:
    return _StubPipeline()


@pytest.fixture
def publisher() -> _StubPublisher:
    return _StubPublisher()


@pytest.fixture
def client(pipeline: _StubPipeline, publisher: _StubPublisher) -> TestClient:
    app = create_app(lambda: pipeline, lambda: publisher)  # type: ignore[arg-type,return-value]
    return TestClient(app)


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_returns_document(client: TestClient, pipeline: _StubPipeline) -> None:
    response = client.post("/analyze", json={"owner": "acme", "repo": "site"})

    assert response.status_code == 200
    body = response.json()
    assert pipeline.calls == [("acme", "site")]
    assert body["metadata"] == {
        "name": "site",
        "description": "Demo",
        "demoLink": "https://demo.example",
    }
    readme, logo = body["files"]
    assert readme["type"] == "Prose"
    assert readme["summary"] == "Project readme."
    assert readme["dom"]["children"][0]["parent"] == "[Circular]"
    assert logo == {
        "file": "logo.png",
        "type": "Media",
        "size": 100,
        "skipped": True,
        "reason": "Binary or media file",
    }


def test_analyze_validates_payload(client: TestClient) -> None:
    response = client.post("/analyze", json={"owner": "acme"})
    assert response.status_code == 422


def test_analyze_maps_remote_errors(pipeline: _StubPipeline, publisher: _StubPublisher) -> None:
    class _FailingPipeline:
        def run_remote(self, owner: str, repo: str) -> Aggregate:
            raise RemoteFetchError("rate limit exceeded", status=403)

    client = TestClient(create_app(lambda: _FailingPipeline(), lambda: publisher))  # type: ignore[arg-type,return-value]

    response = client.post("/analyze", json={"owner": "acme", "repo": "site"})

    assert response.status_code == 502
    assert response.json() == {"detail": "rate limit exceeded"}


def test_create_sandbox_returns_preview(client: TestClient, publisher: _StubPublisher) -> None:
    response = client.post("/create-sandbox", json={"code": "export default () => null;"})

    assert response.status_code == 200
    assert response.json() == {
        "sandbox_id": "abc",
        "preview_url": "https://abc.csb.app/",
        "editor_url": "https://codesandbox.io/s/abc",
    }
    assert publisher.published == ["export default () => null;"]


def test_create_sandbox_rejects_empty_code(client: TestClient) -> None:
    response = client.post("/create-sandbox", json={"code": "  "})
    assert response.status_code == 400


def test_create_sandbox_maps_publish_errors(pipeline: _StubPipeline) -> None:
    publisher = _StubPublisher(error=PublishError("Sandbox creation failed"))
    client = TestClient(create_app(lambda: pipeline, lambda: publisher))  # type: ignore[arg-type,return-value]

    response = client.post("/create-sandbox", json={"code": "x"})

    assert response.status_code == 502
    assert response.json() == {"detail": "Sandbox creation failed"}
