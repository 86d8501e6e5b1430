"""Reconciles generated steps against the analyzed file set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..logging import get_logger
from ..models import GeneratedTourStep, ProjectStructure, TourStep
from ..prompting.constants import WELCOME_MARKER

_logger = get_logger("validators.steps")


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1].lower()


def find_similar_file(target: str, known: Sequence[str]) -> Optional[str]:
    """Return the first known path whose basename matches ``target``'s, ignoring case."""
    name = _basename(target)
    if not name:
        return None
    for candidate in known:
        if _basename(candidate) == name:
            return candidate
    return None


def is_welcome_step(index: int, step: GeneratedTourStep) -> bool:
    return index == 0 and WELCOME_MARKER in (step.title or "")


@dataclass
class StepValidator:
    """Turns untrusted steps into TourSteps.

    At most ``max_steps`` input steps are considered, in order. Unresolvable
    file references drop their step. With ``check_line_bounds`` lines past the
    end of an analyzed file are clamped to its last line.
    """

    max_steps: int = 20
    check_line_bounds: bool = False

    def validate(self, steps: Sequence[GeneratedTourStep], structure: ProjectStructure) -> List[TourStep]:
        known = structure.file_paths()
        known_set = set(known)
        line_counts: Dict[str, Optional[int]] = {analysis.file: analysis.line_count for analysis in structure.files}

        validated: List[TourStep] = []
        for index, step in enumerate(steps[: max(0, self.max_steps)]):
            file = step.file
            if is_welcome_step(index, step):
                _logger.debug("Welcome step detected; skipping file check for %r", file)
            elif file not in known_set:
                similar = find_similar_file(file, known)
                if similar is None:
                    _logger.warning("File not found: %r; dropping step %r", file, step.title)
                    continue
                _logger.info("Mapped %s -> %s", file, similar)
                file = similar

            validated.append(
                TourStep(
                    title=step.title,
                    file=file,
                    description=step.description,
                    line=self._line(step.line, line_counts.get(file)),
                    selection=step.selection,
                )
            )
        return validated

    def _line(self, line: Optional[int], line_count: Optional[int]) -> Optional[int]:
        if line is None:
            return None
        if line < 1:
            return 1
        if self.check_line_bounds and line_count and line > line_count:
            return line_count
        return line


def validate_steps(
    steps: Sequence[GeneratedTourStep],
    structure: ProjectStructure,
    max_steps: int = 20,
    *,
    check_line_bounds: bool = False,
) -> List[TourStep]:
    return StepValidator(max_steps=max_steps, check_line_bounds=check_line_bounds).validate(steps, structure)


__all__ = ["StepValidator", "find_similar_file", "is_welcome_step", "validate_steps"]
