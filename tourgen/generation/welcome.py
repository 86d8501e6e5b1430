"""Synthesis of the mandatory first ("welcome") tour step."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ..errors import LLMNotConfiguredError, StepParseError
from ..llm.client import GenerationService
from ..logging import get_logger
from ..models import GeneratedTourStep, ProjectStructure
from ..postproc.readme import clean_readme
from ..prompting.builder import PromptBuilder, key_directories
from ..prompting.constants import WELCOME_MARKER
from ..workspace import LocalWorkspace
from .parsing import decode_steps

README_CANDIDATES: Tuple[str, ...] = ("README.md", "readme.md", "Readme.md", "README")
DEFAULT_WELCOME_FILE = "README.md"
FALLBACK_README_LINES = 40

_logger = get_logger("generation.welcome")


@dataclass(frozen=True)
class ProjectDocs:
    """Project documentation read from the workspace root."""

    welcome_file: str
    readme: Optional[str] = None
    package_description: Optional[str] = None


@dataclass(frozen=True)
class WelcomeRequest:
    structure: ProjectStructure
    context: str
    project_name: str
    docs: ProjectDocs


WelcomeStrategy = Callable[[WelcomeRequest], Awaitable[GeneratedTourStep]]


def read_project_docs(workspace: LocalWorkspace, structure: ProjectStructure) -> ProjectDocs:
    """Read and clean the README and find a manifest description.

    The welcome file is the README when one exists, else the first analyzed file.
    """
    readme: Optional[str] = None
    welcome_file = structure.files[0].file if structure.files else DEFAULT_WELCOME_FILE
    for candidate in README_CANDIDATES:
        text = workspace.read_joined(candidate)
        if text is not None:
            readme = clean_readme(text)
            welcome_file = candidate
            _logger.info("Read %s (cleaned: %d chars)", candidate, len(readme))
            break
    else:
        _logger.info("No README found; welcome step will use %s", welcome_file)

    return ProjectDocs(
        welcome_file=welcome_file,
        readme=readme,
        package_description=_manifest_description(workspace),
    )


def _manifest_description(workspace: LocalWorkspace) -> Optional[str]:
    package_json = workspace.read_joined("package.json")
    if package_json is not None:
        try:
            data = json.loads(package_json)
        except ValueError:
            data = None
        if isinstance(data, dict):
            description = data.get("description")
            if isinstance(description, str) and description.strip():
                return description.strip()

    pyproject = workspace.read_joined("pyproject.toml")
    if pyproject is not None:
        try:
            data = tomllib.loads(pyproject)
        except tomllib.TOMLDecodeError:
            return None
        project = data.get("project")
        if isinstance(project, dict):
            description = project.get("description")
            if isinstance(description, str) and description.strip():
                return description.strip()
    return None


def build_fallback_step(request: WelcomeRequest) -> GeneratedTourStep:
    """Deterministic welcome step built only from local facts."""
    name = request.project_name
    structure = request.structure
    docs = request.docs
    languages = ", ".join(structure.languages())
    entry_points = ", ".join(structure.entry_points[:3]) or "Not detected"

    parts: List[str] = [f"# Welcome to {name}\n"]
    if docs.package_description:
        parts.append(f"## Purpose\n{docs.package_description}\n")

    if docs.readme and len(docs.readme) > 100:
        parts.append("\n".join(docs.readme.split("\n")[:FALLBACK_README_LINES]) + "\n")
        parts.append(
            "## Codebase Overview\n"
            f"- **Files**: {len(structure.files)} analyzed\n"
            f"- **Languages**: {languages}\n"
            f"- **Entry Points**: {entry_points}\n"
        )
        parts.append(
            "## Tour Coverage\n"
            "This tour explores the key components, architecture, and implementation details of this codebase."
        )
    else:
        parts.append(
            "## Project Overview\n"
            f"- **Files Analyzed**: {len(structure.files)}\n"
            f"- **Languages**: {languages}\n"
            f"- **Entry Points**: {entry_points}\n"
        )
        directories = "\n".join(f"- `{directory}/`" for directory in key_directories(structure.files))
        if directories:
            parts.append(f"## Key Directories\n{directories}\n")
        parts.append(
            "## What You'll Learn\n"
            "This tour walks through the codebase structure, key components, and how the parts work together."
        )

    return GeneratedTourStep(
        title=f"Welcome to {name}",
        file=docs.welcome_file,
        line=1,
        description="\n".join(parts).strip() + "\n",
    )


class WelcomeSynthesizer:
    """Produces exactly one welcome step, trying the service before the fallback."""

    def __init__(
        self,
        service: GenerationService | None,
        prompts: PromptBuilder | None = None,
        strategies: Sequence[Tuple[str, WelcomeStrategy]] | None = None,
    ) -> None:
        self.service = service
        self.prompts = prompts or PromptBuilder()
        self.strategies: Tuple[Tuple[str, WelcomeStrategy], ...] = tuple(
            strategies
            if strategies is not None
            else (("service", self.from_service), ("fallback", self.from_fallback))
        )

    async def synthesize(
        self,
        structure: ProjectStructure,
        context: str,
        project_name: str,
        docs: ProjectDocs,
    ) -> GeneratedTourStep:
        request = WelcomeRequest(structure=structure, context=context, project_name=project_name, docs=docs)
        for name, strategy in self.strategies:
            try:
                step = await strategy(request)
            except Exception as exc:
                _logger.warning("Welcome step via %s failed: %s", name, exc)
                continue
            _logger.info("Welcome step created via %s: %r (%s)", name, step.title, step.file)
            return step
        # Reached only when a caller supplies strategies without a fallback.
        return build_fallback_step(request)

    async def from_service(self, request: WelcomeRequest) -> GeneratedTourStep:
        if self.service is None:
            raise LLMNotConfiguredError()
        docs = request.docs
        messages = self.prompts.welcome_messages(
            request.context,
            request.structure,
            request.project_name,
            docs.welcome_file,
            readme=docs.readme,
            package_description=docs.package_description,
        )
        response = await self.service.complete(messages)
        steps = decode_steps(response.content)
        if not steps:
            raise StepParseError("No welcome step in response")

        step = steps[0]
        if not step.file or step.file == DEFAULT_WELCOME_FILE:
            step.file = docs.welcome_file
        if WELCOME_MARKER not in step.title:
            prefix = f"Welcome to {request.project_name}"
            step.title = f"{prefix}: {step.title}" if step.title else prefix
        if step.line is None:
            step.line = 1
        return step

    async def from_fallback(self, request: WelcomeRequest) -> GeneratedTourStep:
        return build_fallback_step(request)


__all__ = [
    "ProjectDocs",
    "WelcomeRequest",
    "WelcomeStrategy",
    "WelcomeSynthesizer",
    "build_fallback_step",
    "read_project_docs",
]
