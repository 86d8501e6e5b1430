"""Pipeline orchestration for analyze and generate runs."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import List, Optional

from .analyzers import GrammarRegistry, ProjectAnalyzer, StructuralAnalyzer, load_grammar_registry
from .config import TourGenConfig, load_config
from .errors import LLMNotConfiguredError, TourCancelledError
from .generation.batches import BatchTourGenerator, ProgressSink
from .generation.welcome import WelcomeSynthesizer, read_project_docs
from .llm.client import GenerationService, LLMClient
from .logging import get_logger
from .models import CodeTour, ProjectStructure
from .prompting.builder import PromptBuilder, TourFocus, build_project_context
from .report import AnalysisReport
from .tour_file import build_tour, write_tour
from .validators.steps import validate_steps
from .workspace import LocalWorkspace


class CancellationToken:
    """Cooperative cancellation flag checked at pipeline checkpoints."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TourCancelledError()


@dataclass
class TourOptions:
    """Per-run settings layered over .tourgen.yml."""

    title: Optional[str] = None
    description: Optional[str] = None
    focus_areas: List[str] = field(default_factory=list)
    max_steps: Optional[int] = None
    max_files: Optional[int] = None
    write: bool = True


@dataclass
class TourResult:
    """Outcome of a generate run."""

    tour: CodeTour
    failed_batches: List[int] = field(default_factory=list)
    tour_path: Optional[Path] = None

    @property
    def step_count(self) -> int:
        return len(self.tour.steps)


class Orchestrator:
    """Coordinates discovery, analysis, generation and validation."""

    def __init__(
        self,
        service: GenerationService | None = None,
        grammars: GrammarRegistry | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._service = service
        self._grammars = grammars
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("orchestrator")

    def run_analyze(self, path: str, *, max_files: Optional[int] = None) -> ProjectStructure:
        """Discover and analyze a workspace without calling the generation service."""
        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Starting analysis of %s", repo_path)
        config = load_config(repo_path)
        workspace = LocalWorkspace(repo_path)
        return self._analyze(workspace, config, max_files)

    def run_generate(
        self,
        path: str,
        options: TourOptions | None = None,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressSink | None = None,
    ) -> TourResult:
        return asyncio.run(self.generate_tour(path, options, cancel_token=cancel_token, progress=progress))

    async def generate_tour(
        self,
        path: str,
        options: TourOptions | None = None,
        *,
        cancel_token: CancellationToken | None = None,
        progress: ProgressSink | None = None,
    ) -> TourResult:
        """Generate, validate and (optionally) persist a tour for ``path``.

        Raises LLMNotConfiguredError before any work when no credential is
        available, and TourCancelledError at a checkpoint after cancellation.
        """
        options = options or TourOptions()
        token = cancel_token or CancellationToken()
        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Starting tour generation for %s", repo_path)

        config = load_config(repo_path)
        service = self._resolve_service(config)
        workspace = LocalWorkspace(repo_path)

        _report(progress, "Initializing analyzer", 10)
        self._grammar_registry()
        token.raise_if_cancelled()

        _report(progress, "Scanning files", 15)
        loop = asyncio.get_running_loop()
        structure = await loop.run_in_executor(None, partial(self._analyze, workspace, config, options.max_files))
        token.raise_if_cancelled()

        _report(progress, "Building context", 5)
        focus = TourFocus(title=options.title, description=options.description, focus_areas=list(options.focus_areas))
        context = build_project_context(structure, workspace.name, focus)
        token.raise_if_cancelled()

        _report(progress, "Generating welcome step", 5)
        docs = read_project_docs(workspace, structure)
        welcome = await WelcomeSynthesizer(service, self.prompt_builder).synthesize(
            structure, context, workspace.name, docs
        )

        settings = config.generate
        batches = BatchTourGenerator(
            service,
            self.prompt_builder,
            batch_size=settings.batch_size,
            concurrency=settings.concurrency,
            timeout=settings.batch_timeout,
            target_steps=settings.target_steps,
        )
        outcome = await batches.generate(structure, context, progress)
        steps = [welcome, *outcome.steps]
        self.logger.info("Generated %d steps (%d failed batches)", len(steps), len(outcome.failed))
        token.raise_if_cancelled()

        _report(progress, "Validating steps", 5)
        max_steps = options.max_steps if options.max_steps and options.max_steps > 0 else settings.max_steps
        validated = validate_steps(
            steps,
            structure,
            max_steps,
            check_line_bounds=settings.validate_line_bounds,
        )
        if not validated:
            self.logger.error("All steps were filtered out during validation")

        tour = build_tour(
            validated,
            repo_path,
            tours_dir=config.tours_dir,
            title=options.title,
            description=options.description,
        )
        tour_path: Optional[Path] = None
        if options.write:
            self._write_report(structure, repo_path)
            tour_path = write_tour(tour, repo_path, config.tours_dir)
            self.logger.info("Wrote tour to %s", tour_path)
        _report(progress, "Complete", 0)
        self.logger.info("Tour '%s' ready with %d steps", tour.title, len(tour.steps))
        return TourResult(tour=tour, failed_batches=list(outcome.failed), tour_path=tour_path)

    def _analyze(self, workspace: LocalWorkspace, config: TourGenConfig, max_files: Optional[int]) -> ProjectStructure:
        settings = config.generate
        limit = settings.max_files if max_files is None else max(0, max_files)
        analyzer = ProjectAnalyzer(workspace, StructuralAnalyzer(self._grammar_registry()))
        return analyzer.analyze_project(settings.include_file_types, config.exclude_paths, limit)

    def _grammar_registry(self) -> GrammarRegistry:
        if self._grammars is None:
            self._grammars = load_grammar_registry()
        return self._grammars

    def _resolve_service(self, config: TourGenConfig) -> GenerationService:
        if self._service is not None:
            return self._service
        client = LLMClient.from_config(config.llm)
        if not client.is_configured():
            raise LLMNotConfiguredError()
        self.logger.debug("Using %s provider with model %s", client.provider, client.model)
        return client

    def _write_report(self, structure: ProjectStructure, repo_path: Path) -> None:
        try:
            report_path = AnalysisReport.from_structure(structure).write(repo_path)
        except OSError as exc:
            self.logger.warning("Could not write analysis report: %s", exc)
            return
        self.logger.debug("Analysis report written to %s", report_path)


def _report(progress: ProgressSink | None, message: str, increment: float) -> None:
    if progress is not None:
        progress(message, increment)


__all__ = ["CancellationToken", "Orchestrator", "TourOptions", "TourResult"]
