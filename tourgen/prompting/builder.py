"""Builds generation-service prompts from project structure."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..llm.client import LLMMessage, build_messages
from ..models import ElementKind, FileAnalysis, ProjectStructure
from .constants import (
    BATCH_SYSTEM_PROMPT,
    INTERCONNECTION_NOTE,
    PROJECT_GOAL,
    WELCOME_SYSTEM_PROMPT,
)

_FUNCTION_KINDS = (ElementKind.FUNCTION, ElementKind.ASYNC_FUNCTION)
_TYPE_KINDS = (ElementKind.INTERFACE, ElementKind.ENUM)


@dataclass
class TourFocus:
    """Optional user direction folded into every prompt."""

    title: Optional[str] = None
    description: Optional[str] = None
    focus_areas: List[str] = field(default_factory=list)


def key_directories(files: Sequence[FileAnalysis], limit: int = 6) -> List[str]:
    """Distinct top-level directories of nested files, in analysis order."""
    directories: List[str] = []
    for analysis in files:
        parts = analysis.file.split("/")
        if len(parts) > 1 and parts[0] not in directories:
            directories.append(parts[0])
    return directories[:limit]


def steps_per_batch(target_steps: int, total_files: int, batch_size: int) -> int:
    batch_count = max(1, math.ceil(total_files / max(1, batch_size)))
    return max(1, math.ceil(target_steps / batch_count))


def build_project_context(
    structure: ProjectStructure,
    project_name: str,
    focus: TourFocus | None = None,
) -> str:
    """Summarise the project for the generation service."""
    focus = focus or TourFocus()
    lines = [
        f"Project: {project_name}",
        f"Goal: {PROJECT_GOAL}",
        "",
        f"Files analyzed: {len(structure.files)}",
        f"Languages: {', '.join(structure.languages())}",
    ]
    if structure.entry_points:
        lines.append(f"Entry points (Start Here): {', '.join(structure.entry_points)}")

    modules: List[str] = []
    for analysis in structure.files:
        top = analysis.file.split("/")[0] if "/" in analysis.file else "root"
        if top not in modules:
            modules.append(top)
    lines.append(f"Main modules/directories: {', '.join(modules)}")
    lines.append("")

    if focus.title:
        lines.append(f"Tour focus: {focus.title}")
    if focus.description:
        lines.append(f"Tour description: {focus.description}")
    if focus.focus_areas:
        lines.append(f"Focus areas: {', '.join(focus.focus_areas)}")

    lines.append("")
    lines.append(INTERCONNECTION_NOTE)
    return "\n".join(lines) + "\n"


def format_batch_digest(files: Sequence[FileAnalysis]) -> str:
    """Compact per-file listing of element names and start lines."""
    chunks: List[str] = []
    for analysis in files:
        chunk = f"\n## {analysis.file}\n"
        classes = [element for element in analysis.elements if element.kind is ElementKind.CLASS]
        functions = [element for element in analysis.elements if element.kind in _FUNCTION_KINDS]
        types = [element for element in analysis.elements if element.kind in _TYPE_KINDS]

        if classes:
            summary = ", ".join(f"{cls.name}@{cls.start_line}[{len(cls.methods)}m]" for cls in classes)
            chunk += f"Classes: {summary}\n"
            for cls in classes:
                if cls.methods:
                    methods = ", ".join(f"{method.name}@{method.start_line}" for method in cls.methods)
                    chunk += f"  {cls.name} methods: {methods}\n"
        if functions:
            chunk += f"Functions: {', '.join(f'{fn.name}@{fn.start_line}' for fn in functions)}\n"
        if types:
            chunk += f"Types: {', '.join(f'{item.name}@{item.start_line}' for item in types)}\n"
        chunks.append(chunk)
    return "".join(chunks)


class PromptBuilder:
    """Renders the welcome and batch prompts from Jinja2 templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)

    def batch_messages(
        self,
        context: str,
        batch_number: int,
        files: Sequence[FileAnalysis],
        step_count: int,
    ) -> List[LLMMessage]:
        template = self._env.get_template("batch.j2")
        prompt = template.render(
            context=context.rstrip(),
            batch_number=batch_number,
            digest=format_batch_digest(files),
            steps_per_batch=step_count,
            example_file=files[0].file if files else "src/path/file.ts",
        )
        return build_messages(BATCH_SYSTEM_PROMPT, prompt)

    def welcome_messages(
        self,
        context: str,
        structure: ProjectStructure,
        project_name: str,
        welcome_file: str,
        *,
        readme: str | None = None,
        package_description: str | None = None,
    ) -> List[LLMMessage]:
        template = self._env.get_template("welcome.j2")
        prompt = template.render(
            context=context.rstrip(),
            project_name=project_name,
            welcome_file=welcome_file,
            readme=readme,
            package_description=package_description,
            file_count=len(structure.files),
            languages=structure.languages(),
            entry_points=list(structure.entry_points[:3]),
            directories=key_directories(structure.files),
        )
        return build_messages(WELCOME_SYSTEM_PROMPT, prompt)

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = [
    "PromptBuilder",
    "TourFocus",
    "build_project_context",
    "format_batch_digest",
    "key_directories",
    "steps_per_batch",
]
