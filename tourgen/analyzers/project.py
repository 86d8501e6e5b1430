"""Project-level analysis: discovery plus per-file structural analysis."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from ..discovery import discover
from ..logging import get_logger
from ..models import FileAnalysis, ProjectStructure
from ..workspace import LocalWorkspace
from .structure import StructuralAnalyzer

_ENTRY_POINT_TOKENS = ("index", "main", "app")

_MODULE_PATTERNS = (
    re.compile(r"""from\s+['"](.+?)['"]"""),
    re.compile(r"""require\(\s*['"](.+?)['"]\s*\)"""),
    re.compile(r"""^import\s+['"](.+?)['"]"""),
    re.compile(r"^from\s+(\.*[\w.]*)\s+import\b"),
    re.compile(r"^import\s+([\w.]+(?:\s*,\s*[\w.]+)*)\s*$"),
)

_logger = get_logger("analyzers.project")


def is_entry_point(path: str) -> bool:
    lowered = path.lower()
    return any(token in lowered for token in _ENTRY_POINT_TOKENS)


def module_specifiers(statements: Iterable[str]) -> List[str]:
    """Extract imported module specifiers from raw import statements.

    Specifiers are reported as written; they are not resolved against the
    file system.
    """
    found: List[str] = []
    for statement in statements:
        for pattern in _MODULE_PATTERNS:
            match = pattern.search(statement)
            if not match:
                continue
            for specifier in match.group(1).split(","):
                specifier = specifier.strip()
                if specifier and specifier not in found:
                    found.append(specifier)
            break
    return found


class ProjectAnalyzer:
    """Builds a ProjectStructure for one workspace."""

    def __init__(self, workspace: LocalWorkspace, analyzer: StructuralAnalyzer) -> None:
        self.workspace = workspace
        self.analyzer = analyzer

    def analyze_project(
        self,
        include_extensions: Sequence[str],
        exclude_patterns: Sequence[str] = (),
        max_files: int = 0,
    ) -> ProjectStructure:
        paths = discover(self.workspace, include_extensions, exclude_patterns, max_files)

        analyses: List[FileAnalysis] = []
        for rel_path in paths:
            analysis = self.analyze_file(rel_path)
            if analysis is not None:
                analyses.append(analysis)

        entry_points = tuple(analysis.file for analysis in analyses if is_entry_point(analysis.file))
        dependencies: Dict[str, List[str]] = {}
        for analysis in analyses:
            specifiers = module_specifiers(analysis.imports)
            if specifiers:
                dependencies[analysis.file] = specifiers

        grammar_count = sum(1 for analysis in analyses if analysis.method == "grammar")
        _logger.info(
            "Analyzed %d of %d files (%d with tree-sitter, %d with patterns); %d entry point(s)",
            len(analyses),
            len(paths),
            grammar_count,
            len(analyses) - grammar_count,
            len(entry_points),
        )

        return ProjectStructure(
            root=str(self.workspace.root),
            files=tuple(analyses),
            entry_points=entry_points,
            dependencies=dependencies,
        )

    def analyze_file(self, rel_path: str) -> Optional[FileAnalysis]:
        """Read and analyze one file; a read failure skips the file."""
        try:
            content, language = self.workspace.read_file(rel_path)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            _logger.warning("Skipping %s: %s", rel_path, exc)
            return None
        return self.analyzer.analyze(rel_path, content, language)


__all__ = ["ProjectAnalyzer", "is_entry_point", "module_specifiers"]
