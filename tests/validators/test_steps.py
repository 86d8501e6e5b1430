"""Tests for step validation against the analyzed file set."""

from __future__ import annotations

from typing import Optional

from tourgen.models import FileAnalysis, GeneratedTourStep, ProjectStructure, TourStep
from tourgen.validators.steps import StepValidator, find_similar_file, is_welcome_step, validate_steps


def _structure() -> ProjectStructure:
    return ProjectStructure(
        root="/work/demo",
        files=(
            FileAnalysis("src/index.ts", "typescript", (), (), (), line_count=30),
            FileAnalysis("src/services/Store.ts", "typescript", (), (), (), line_count=12),
            FileAnalysis("lib/store.ts", "typescript", (), (), (), line_count=8),
        ),
    )


def _step(title: str, file: str, line: Optional[int] = None) -> GeneratedTourStep:
    return GeneratedTourStep(title=title, file=file, description=f"About {title}", line=line)


def test_unknown_file_without_match_is_dropped() -> None:
    assert validate_steps([_step("Ghost", "missing.ts", 3)], _structure()) == []


def test_welcome_step_at_index_zero_skips_file_check() -> None:
    steps = [_step("Welcome to demo", ""), _step("Entry", "src/index.ts", 4)]

    validated = validate_steps(steps, _structure())

    assert validated == [
        TourStep(title="Welcome to demo", file="", description="About Welcome to demo"),
        TourStep(title="Entry", file="src/index.ts", description="About Entry", line=4),
    ]


def test_welcome_marker_only_counts_at_index_zero() -> None:
    steps = [_step("Entry", "src/index.ts", 1), _step("Welcome back", "nowhere.md", 1)]

    assert [step.title for step in validate_steps(steps, _structure())] == ["Entry"]
    assert is_welcome_step(0, _step("Welcome", "x"))
    assert not is_welcome_step(1, _step("Welcome", "x"))
    assert not is_welcome_step(0, _step("welcome", "x"))


def test_wrong_directory_is_remapped_by_basename() -> None:
    validated = validate_steps([_step("Store", "app/store.TS", 2)], _structure())

    assert [(step.file, step.line) for step in validated] == [("src/services/Store.ts", 2)]


def test_lines_below_one_are_clamped() -> None:
    validated = validate_steps([_step("Zero", "src/index.ts", 0), _step("Neg", "lib/store.ts", -4)], _structure())

    assert [step.line for step in validated] == [1, 1]


def test_lines_past_end_are_kept_unless_bounds_checked() -> None:
    steps = [_step("Far", "lib/store.ts", 99)]

    assert validate_steps(steps, _structure())[0].line == 99
    assert validate_steps(steps, _structure(), check_line_bounds=True)[0].line == 8


def test_max_steps_truncates_before_validation() -> None:
    steps = [_step(f"Step {index}", "src/index.ts", index + 1) for index in range(5)]

    validated = StepValidator(max_steps=3).validate(steps, _structure())

    assert [step.title for step in validated] == ["Step 0", "Step 1", "Step 2"]
    assert StepValidator(max_steps=0).validate(steps, _structure()) == []


def test_dropped_steps_do_not_pull_in_later_steps() -> None:
    steps = [_step("Gone", "missing.ts"), _step("A", "src/index.ts"), _step("B", "lib/store.ts")]

    assert [step.title for step in validate_steps(steps, _structure(), max_steps=2)] == ["A"]


def test_find_similar_file() -> None:
    known = ["src/services/Store.ts", "lib/store.ts"]

    assert find_similar_file("other/STORE.ts", known) == "src/services/Store.ts"
    assert find_similar_file("other/", known) is None
    assert find_similar_file("", known) is None
    assert find_similar_file("index.ts", known) is None
