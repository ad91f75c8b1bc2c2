"""FastAPI application exposing repository analysis and sandbox publishing."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..errors import PublishError, RemoteFetchError
from ..pipeline import Pipeline
from ..remote.sandbox import SandboxPublisher
from ..serializer import make_safe


class AnalyzeRequest(BaseModel):
    owner: str
    repo: str


class SandboxRequest(BaseModel):
    code: str


class SandboxResponse(BaseModel):
    sandbox_id: str
    preview_url: str
    editor_url: str


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> Pipeline:
    return Pipeline(load_config(Path.cwd()))


def _default_publisher() -> SandboxPublisher:
    settings = load_config(Path.cwd()).sandbox
    return SandboxPublisher(base_url=settings.base_url, request_timeout=settings.request_timeout)


def create_app(
    pipeline_factory: Callable[[], Pipeline] = _default_pipeline,
    publisher_factory: Callable[[], SandboxPublisher] = _default_publisher,
) -> FastAPI:
    """Create the FastAPI application exposing repoast operations."""

    app = FastAPI(title="repoast service", version="1.0.0")

    async def get_pipeline() -> Pipeline:
        # A fresh pipeline per request keeps rate-limiter state scoped to one run.
        return pipeline_factory()

    async def get_publisher() -> SandboxPublisher:
        return publisher_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        pipeline: Pipeline = Depends(get_pipeline),
    ) -> JSONResponse:
        def _run_analysis() -> Dict[str, Any]:
            aggregate = pipeline.run_remote(payload.owner, payload.repo)
            return make_safe(aggregate.to_document())

        loop = asyncio.get_running_loop()
        document = await loop.run_in_executor(None, _run_analysis)
        return JSONResponse(content=document)

    @app.post("/create-sandbox", response_model=SandboxResponse)
    async def create_sandbox(
        payload: SandboxRequest,
        publisher: SandboxPublisher = Depends(get_publisher),
    ) -> SandboxResponse:
        loop = asyncio.get_running_loop()
        preview = await loop.run_in_executor(None, publisher.publish, payload.code)
        return SandboxResponse(
            sandbox_id=preview.sandbox_id,
            preview_url=preview.preview_url,
            editor_url=preview.editor_url,
        )

    @app.exception_handler(RemoteFetchError)
    async def remote_error_handler(_: Any, exc: RemoteFetchError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(PublishError)
    async def publish_error_handler(_: Any, exc: PublishError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 5000) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)
