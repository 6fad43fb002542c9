"""FastAPI application entrypoint for mdsh service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..config import GatherConfig, load_config
from ..diagnostics import CollectingDiagnostics, DiagnosticSink, LoggingDiagnostics
from ..errors import DirectoryNotFoundError
from ..gatherer import Gatherer
from ..logging import get_logger
from ..plan import plan_payload

GathererFactory = Callable[[GatherConfig, DiagnosticSink], Gatherer]


class PlanRequest(BaseModel):
    path: str
    strict_frontmatter: Optional[bool] = None
    heredoc_verbatim: Optional[bool] = None


class PlanResponse(BaseModel):
    plan: Optional[Dict[str, Any]] = None
    scripts: int = 0
    warnings: List[str] = []


class HealthResponse(BaseModel):
    status: str


def _default_gatherer(config: GatherConfig, diagnostics: DiagnosticSink) -> Gatherer:
    return Gatherer.from_config(config, diagnostics=diagnostics)


def _require_fastapi() -> None:
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install markdown-sh[service]`."
        )


def create_app(gatherer_factory: GathererFactory = _default_gatherer) -> FastAPI:
    """Create the FastAPI application exposing plan gathering over HTTP."""
    _require_fastapi()

    app = FastAPI(title="mdsh Service", version="0.1.0")
    logger = get_logger("service")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/plan", response_model=PlanResponse)
    async def plan(payload: PlanRequest) -> PlanResponse:
        def _run_plan() -> Dict[str, Any]:
            directory = Path(payload.path)
            config = load_config(directory)
            if payload.strict_frontmatter is not None:
                config.frontmatter.strict = payload.strict_frontmatter
            if payload.heredoc_verbatim is not None:
                config.directives.heredoc_verbatim = payload.heredoc_verbatim
            diagnostics = CollectingDiagnostics(forward=LoggingDiagnostics())
            category = gatherer_factory(config, diagnostics).gather(directory)
            return plan_payload(category, diagnostics.messages())

        logger.debug("Plan requested for %s", payload.path)
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_plan)
        return PlanResponse(**result)

    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    # DirectoryNotFoundError is also a RuntimeError; map it to 404 explicitly.
    app.add_exception_handler(DirectoryNotFoundError, file_not_found_handler)
    app.add_exception_handler(FileNotFoundError, file_not_found_handler)

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(
        _: Any, exc: NotADirectoryError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    _require_fastapi()

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install markdown-sh[service]`."
        ) from exc

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["PlanRequest", "PlanResponse", "create_app", "run_service"]
