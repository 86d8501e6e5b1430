"""Tests for bounded-concurrency batch generation."""

from __future__ import annotations

import asyncio
import json
from typing import List, Sequence, Tuple

import pytest

from tests._fixtures.services import FailingService, ScriptedService, batch_number
from tourgen.errors import LLMRateLimitError
from tourgen.generation.batches import BatchTourGenerator, create_batches, file_importance, select_files
from tourgen.llm.client import LLMMessage, LLMResponse
from tourgen.models import CodeElement, ElementKind, FileAnalysis, ProjectStructure


def _file(path: str, element_count: int = 1) -> FileAnalysis:
    elements = tuple(
        CodeElement(ElementKind.FUNCTION, f"fn{index}", path, index + 1, index + 1) for index in range(element_count)
    )
    return FileAnalysis(path, "typescript", elements, (), ())


def _structure(count: int) -> ProjectStructure:
    return ProjectStructure(root="/work/demo", files=tuple(_file(f"src/mod{index}.ts") for index in range(count)))


def _steps_for(messages: Sequence[LLMMessage]) -> str:
    number = batch_number(messages)
    return json.dumps([{"title": f"Batch {number}", "file": f"src/mod{number}.ts", "line": number}])


class HangingService:
    """Never answers for the batches in ``stuck``."""

    def __init__(self, stuck: Sequence[int]) -> None:
        self.stuck = set(stuck)

    async def complete(self, messages: Sequence[LLMMessage]) -> LLMResponse:
        number = batch_number(messages)
        if number in self.stuck:
            await asyncio.Event().wait()
        return LLMResponse(content=_steps_for(messages))


class CountingService:
    def __init__(self) -> None:
        self.active = 0
        self.peak = 0

    async def complete(self, messages: Sequence[LLMMessage]) -> LLMResponse:
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return LLMResponse(content="[]")


@pytest.mark.asyncio
async def test_results_merge_in_submission_order() -> None:
    service = ScriptedService(_steps_for)
    generator = BatchTourGenerator(service, batch_size=2, concurrency=2)

    outcome = await generator.generate(_structure(5), "ctx")

    assert outcome.failed == []
    assert [step.title for step in outcome.steps] == ["Batch 1", "Batch 2", "Batch 3"]
    assert len(service.calls) == 3


@pytest.mark.asyncio
async def test_hanging_batch_times_out_without_blocking_others() -> None:
    generator = BatchTourGenerator(HangingService([2]), batch_size=1, concurrency=3, timeout=0.05)

    outcome = await asyncio.wait_for(generator.generate(_structure(4), "ctx"), timeout=5)

    assert outcome.failed == [2]
    assert outcome.batches[1] == []
    assert [step.title for step in outcome.steps] == ["Batch 1", "Batch 3", "Batch 4"]


@pytest.mark.asyncio
async def test_failed_and_malformed_batches_are_reported() -> None:
    def _respond(messages: Sequence[LLMMessage]) -> str:
        if batch_number(messages) == 1:
            return "Sorry, I cannot help with that."
        return _steps_for(messages)

    outcome = await BatchTourGenerator(ScriptedService(_respond), batch_size=1).generate(_structure(2), "ctx")

    assert outcome.failed == [1]
    assert [step.title for step in outcome.steps] == ["Batch 2"]

    failing = FailingService(LLMRateLimitError("Rate limit exceeded."))
    outcome = await BatchTourGenerator(failing, batch_size=2).generate(_structure(3), "ctx")

    assert outcome.failed == [1, 2]
    assert outcome.steps == []
    assert failing.calls == 2


@pytest.mark.asyncio
async def test_concurrency_is_bounded() -> None:
    service = CountingService()

    await BatchTourGenerator(service, batch_size=1, concurrency=3).generate(_structure(7), "ctx")

    assert service.peak == 3


@pytest.mark.asyncio
async def test_progress_reports_sum_to_eighty() -> None:
    reports: List[Tuple[str, float]] = []

    await BatchTourGenerator(ScriptedService(_steps_for), batch_size=1, concurrency=2).generate(
        _structure(3), "ctx", progress=lambda message, increment: reports.append((message, increment))
    )

    assert sum(increment for _, increment in reports) == pytest.approx(80.0)
    assert ("Group 2/2 complete", pytest.approx(80.0 / 3)) in reports
    assert any(message.startswith("Batch 1/3: mod0.ts") for message, _ in reports)


@pytest.mark.asyncio
async def test_no_eligible_files_makes_no_requests() -> None:
    service = ScriptedService(_steps_for)
    structure = ProjectStructure(root="/work/demo", files=(_file("src/empty.ts", 0),))

    outcome = await BatchTourGenerator(service).generate(structure, "ctx")

    assert outcome.batches == []
    assert service.calls == []


@pytest.mark.asyncio
async def test_prompt_requests_proportional_step_count() -> None:
    service = ScriptedService(lambda messages: "[]")

    await BatchTourGenerator(service, batch_size=4, target_steps=25).generate(_structure(8), "ctx")

    assert "Create ~13 tour steps" in service.calls[0][1].content


def test_select_files_drops_empty_and_noise() -> None:
    files = [_file("src/a.ts"), _file("src/b.ts", 0), _file("src/a.test.ts"), _file("dist/out.js")]

    assert [analysis.file for analysis in select_files(files)] == ["src/a.ts"]


def test_batches_are_ordered_by_importance() -> None:
    files = [_file("tools/x.ts"), _file("src/util.ts", 3), _file("src/index.ts"), _file("lib/spec_helpers.ts")]

    batches = create_batches(files, 3)

    assert [[analysis.file for analysis in batch] for batch in batches] == [
        ["src/index.ts", "src/util.ts", "tools/x.ts"],
        ["lib/spec_helpers.ts"],
    ]
    assert file_importance(files[2]) == 155
    assert file_importance(files[3]) == 5
