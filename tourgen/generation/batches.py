"""Bounded-concurrency batch generation of tour steps."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..discovery import is_noise_path
from ..llm.client import GenerationService
from ..logging import get_logger
from ..models import FileAnalysis, GeneratedTourStep, ProjectStructure
from ..prompting.builder import PromptBuilder, steps_per_batch
from .parsing import decode_steps

ProgressSink = Callable[[str, float], None]

_logger = get_logger("generation.batches")


@dataclass
class BatchOutcome:
    """Per-batch step lists in submission order plus the batch numbers that failed."""

    batches: List[List[GeneratedTourStep]] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def steps(self) -> List[GeneratedTourStep]:
        return [step for batch in self.batches for step in batch]


def file_importance(analysis: FileAnalysis) -> int:
    lowered = analysis.file.lower()
    score = 0
    if "index" in lowered or "main" in lowered or "app" in lowered:
        score += 100
    if "src/" in lowered or "lib/" in lowered:
        score += 50
    score += 5 * len(analysis.elements)
    if "test" in lowered or "spec" in lowered:
        score -= 50
    return score


def select_files(files: Sequence[FileAnalysis]) -> List[FileAnalysis]:
    """Drop files without elements and anything that looks like noise."""
    return [analysis for analysis in files if analysis.elements and not is_noise_path(analysis.file)]


def create_batches(files: Sequence[FileAnalysis], batch_size: int) -> List[List[FileAnalysis]]:
    ordered = sorted(files, key=lambda analysis: -file_importance(analysis))
    return [ordered[index : index + batch_size] for index in range(0, len(ordered), batch_size)]


class BatchTourGenerator:
    """Runs one generation request per batch, ``concurrency`` batches at a time.

    A batch that fails or exceeds ``timeout`` seconds contributes an empty
    step list; the remaining batches are unaffected.
    """

    def __init__(
        self,
        service: GenerationService,
        prompts: PromptBuilder | None = None,
        *,
        batch_size: int = 4,
        concurrency: int = 3,
        timeout: float = 45.0,
        target_steps: int = 25,
    ) -> None:
        self.service = service
        self.prompts = prompts or PromptBuilder()
        self.batch_size = max(1, batch_size)
        self.concurrency = max(1, concurrency)
        self.timeout = timeout
        self.target_steps = target_steps

    async def generate(
        self,
        structure: ProjectStructure,
        context: str,
        progress: ProgressSink | None = None,
    ) -> BatchOutcome:
        important = select_files(structure.files)
        _logger.info("Filtered %d files to %d with structural elements", len(structure.files), len(important))

        batches = create_batches(important, self.batch_size)
        outcome = BatchOutcome()
        if not batches:
            return outcome

        step_count = steps_per_batch(self.target_steps, len(structure.files), self.batch_size)
        increment = 80.0 / len(batches)
        total_groups = -(-len(batches) // self.concurrency)
        _logger.info(
            "Split %d files into %d batches of up to %d (%d concurrent)",
            len(important),
            len(batches),
            self.batch_size,
            self.concurrency,
        )

        for group_start in range(0, len(batches), self.concurrency):
            group = batches[group_start : group_start + self.concurrency]
            group_number = group_start // self.concurrency + 1
            _logger.debug("Processing group %d/%d (%d batches)", group_number, total_groups, len(group))

            results = await asyncio.gather(
                *(
                    self._run_batch(batch, group_start + offset + 1, len(batches), context, step_count, progress)
                    for offset, batch in enumerate(group)
                )
            )

            added = 0
            for offset, result in enumerate(results):
                if result is None:
                    outcome.failed.append(group_start + offset + 1)
                    outcome.batches.append([])
                    continue
                outcome.batches.append(result)
                added += len(result)
            if progress is not None:
                progress(f"Group {group_number}/{total_groups} complete", increment * len(group))
            _logger.info("Group %d/%d complete: %d steps added", group_number, total_groups, added)

        if outcome.failed:
            _logger.warning(
                "%d of %d batches failed: %s",
                len(outcome.failed),
                len(batches),
                ", ".join(str(number) for number in outcome.failed),
            )
        return outcome

    async def _run_batch(
        self,
        batch: Sequence[FileAnalysis],
        batch_number: int,
        total: int,
        context: str,
        step_count: int,
        progress: ProgressSink | None,
    ) -> Optional[List[GeneratedTourStep]]:
        names = ", ".join(analysis.file.rsplit("/", 1)[-1] for analysis in batch)
        _logger.debug("[batch-%d] Starting: %s", batch_number, names)
        if progress is not None:
            progress(f"Batch {batch_number}/{total}: {names}", 0.0)
        try:
            steps = await asyncio.wait_for(
                self._request_steps(batch, batch_number, context, step_count),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            _logger.warning("[batch-%d] Timed out after %.0fs", batch_number, self.timeout)
            return None
        except Exception as exc:
            _logger.warning("[batch-%d] Failed: %s", batch_number, exc)
            return None
        _logger.debug("[batch-%d] Generated %d steps", batch_number, len(steps))
        return steps

    async def _request_steps(
        self,
        batch: Sequence[FileAnalysis],
        batch_number: int,
        context: str,
        step_count: int,
    ) -> List[GeneratedTourStep]:
        messages = self.prompts.batch_messages(context, batch_number, batch, step_count)
        response = await self.service.complete(messages)
        return decode_steps(response.content)


__all__ = [
    "BatchOutcome",
    "BatchTourGenerator",
    "ProgressSink",
    "create_batches",
    "file_importance",
    "select_files",
]
