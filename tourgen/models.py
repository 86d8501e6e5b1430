"""Core data models shared across tourgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ElementKind(str, Enum):
    """Kinds of structural elements extracted from a source file."""

    CLASS = "class"
    FUNCTION = "function"
    ASYNC_FUNCTION = "async function"
    METHOD = "method"
    INTERFACE = "interface"
    ENUM = "enum"
    VARIABLE = "variable"
    IMPORT = "import"


ANONYMOUS = "anonymous"


@dataclass
class CodeElement:
    """A named, positioned unit of code found in a file."""

    kind: ElementKind
    name: str
    file: str
    start_line: int
    end_line: int
    children: List["CodeElement"] = field(default_factory=list)

    @property
    def methods(self) -> List["CodeElement"]:
        return [child for child in self.children if child.kind is ElementKind.METHOD]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
            "file": self.file,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }
        if self.children:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


@dataclass(frozen=True)
class FileAnalysis:
    """Structural summary of a single file."""

    file: str
    language: str
    elements: Tuple[CodeElement, ...]
    imports: Tuple[str, ...]
    exports: Tuple[str, ...]
    method: str = "grammar"
    line_count: Optional[int] = None

    def element_count(self) -> int:
        return len(self.elements)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "language": self.language,
            "method": self.method,
            "elements": [element.to_dict() for element in self.elements],
            "imports": list(self.imports),
            "exports": list(self.exports),
        }


@dataclass(frozen=True)
class ProjectStructure:
    """Aggregate analysis for one generation run."""

    root: str
    files: Tuple[FileAnalysis, ...]
    entry_points: Tuple[str, ...] = ()
    dependencies: Dict[str, List[str]] = field(default_factory=dict)

    def file_paths(self) -> List[str]:
        return [analysis.file for analysis in self.files]

    def languages(self) -> List[str]:
        """Return distinct languages in analysis order."""
        return list(dict.fromkeys(analysis.language for analysis in self.files))

    def find(self, path: str) -> Optional[FileAnalysis]:
        for analysis in self.files:
            if analysis.file == path:
                return analysis
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "files": [analysis.to_dict() for analysis in self.files],
            "entry_points": list(self.entry_points),
            "dependencies": {key: list(value) for key, value in self.dependencies.items()},
        }


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Selection:
    start: Position
    end: Position

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }


@dataclass
class GeneratedTourStep:
    """Untrusted step produced by the generation service."""

    title: str
    file: str
    description: str
    line: Optional[int] = None
    selection: Optional[Selection] = None


@dataclass(frozen=True)
class TourStep:
    """Validated step whose file reference and line are known to be sound."""

    title: str
    file: str
    description: str
    line: Optional[int] = None
    selection: Optional[Selection] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "file": self.file,
            "title": self.title,
            "description": self.description,
        }
        if self.line is not None:
            payload["line"] = self.line
        if self.selection is not None:
            payload["selection"] = self.selection.to_dict()
        return payload


@dataclass
class CodeTour:
    """Persistable tour made of validated steps."""

    id: str
    title: str
    description: str
    steps: List[TourStep]
