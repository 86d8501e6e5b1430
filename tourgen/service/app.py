"""FastAPI application entrypoint for tourgen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..models import ProjectStructure
from ..orchestrator import Orchestrator, TourOptions, TourResult


class AnalyzeRequest(BaseModel):
    path: str
    max_files: Optional[int] = None


class AnalyzeResponse(BaseModel):
    root: str
    file_count: int
    languages: List[str]
    entry_points: List[str]
    dependencies: Dict[str, List[str]]
    files: List[Dict[str, Any]]


class GenerateRequest(BaseModel):
    path: str
    title: Optional[str] = None
    description: Optional[str] = None
    focus_areas: List[str] = Field(default_factory=list)
    max_steps: Optional[int] = None
    max_files: Optional[int] = None
    write: bool = True


class GenerateResponse(BaseModel):
    title: str
    step_count: int
    failed_batches: List[int]
    tour_path: Optional[str] = None
    steps: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing tourgen operations."""

    app = FastAPI(title="TourGen Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze_repo(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AnalyzeResponse:
        def _run_analyze() -> ProjectStructure:
            return orchestrator.run_analyze(payload.path, max_files=payload.max_files)

        loop = asyncio.get_running_loop()
        structure = await loop.run_in_executor(None, _run_analyze)
        return AnalyzeResponse(
            root=structure.root,
            file_count=len(structure.files),
            languages=structure.languages(),
            entry_points=list(structure.entry_points),
            dependencies={key: list(value) for key, value in structure.dependencies.items()},
            files=[analysis.to_dict() for analysis in structure.files],
        )

    @app.post("/generate", response_model=GenerateResponse)
    async def generate_tour(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        options = TourOptions(
            title=payload.title,
            description=payload.description,
            focus_areas=list(payload.focus_areas),
            max_steps=payload.max_steps,
            max_files=payload.max_files,
            write=payload.write,
        )
        result: TourResult = await orchestrator.generate_tour(payload.path, options)
        return GenerateResponse(
            title=result.tour.title,
            step_count=result.step_count,
            failed_batches=list(result.failed_batches),
            tour_path=str(result.tour_path) if result.tour_path else None,
            steps=[step.to_dict() for step in result.tour.steps],
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
