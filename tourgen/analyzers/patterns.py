"""Line-pattern structural analysis used when no grammar can parse a file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from ..models import CodeElement, ElementKind, FileAnalysis

_CLASS = re.compile(
    r"^(?:export\s+)?(?:default\s+)?"
    r"(?:(?:public|private|protected|abstract|final|static|sealed|internal|data)\s+)*"
    r"class\s+(\w+)"
)
_PY_CLASS = re.compile(r"^class\s+(\w+)")
_PY_FUNCTION = re.compile(r"^(async\s+)?def\s+(\w+)\s*\(")
_JS_FUNCTION = re.compile(r"^(?:export\s+)?(?:default\s+)?(async\s+)?function\s*\*?\s*(\w+)\s*\(")
_JS_METHOD = re.compile(
    r"^((?:(?:public|private|protected|static|readonly|override|abstract|async)\s+)*)"
    r"(\w+)\s*\([^)]*\)\s*[:=>{]"
)

_NOT_CALLABLE_NAMES = frozenset(
    {"if", "for", "while", "switch", "catch", "return", "function", "with", "else", "do", "new", "typeof"}
)
_COMMENT_PREFIXES = ("//", "*", "/*", "#")


@dataclass
class _Match:
    name: str
    is_async: bool


@dataclass
class _ClassContext:
    element: CodeElement
    indent: int


def _match_callable(language: str, trimmed: str) -> Optional[_Match]:
    if language == "python":
        match = _PY_FUNCTION.match(trimmed)
        if match:
            return _Match(name=match.group(2), is_async=bool(match.group(1)))
        return None

    match = _JS_FUNCTION.match(trimmed)
    if match:
        return _Match(name=match.group(2), is_async=bool(match.group(1)))
    method = _JS_METHOD.match(trimmed)
    if method and method.group(2) not in _NOT_CALLABLE_NAMES:
        return _Match(name=method.group(2), is_async="async" in method.group(1))
    return None


def _class_pattern(language: str) -> Pattern[str]:
    return _PY_CLASS if language == "python" else _CLASS


def analyze_with_patterns(file_path: str, content: str, language: str) -> FileAnalysis:
    """Scan lines for class and function declarations.

    Elements found this way have ``end_line == start_line``; there is no
    end-of-block detection without a real parse.
    """
    elements: List[CodeElement] = []
    imports: List[str] = []
    exports: List[str] = []
    lines = content.splitlines()
    class_pattern = _class_pattern(language)
    current: Optional[_ClassContext] = None

    for index, line in enumerate(lines):
        trimmed = line.strip()
        if not trimmed:
            continue
        line_number = index + 1
        indent = len(line) - len(line.lstrip())

        if "import " in trimmed:
            imports.append(trimmed)
        if "export " in trimmed:
            exports.append(trimmed)
        if trimmed.startswith(_COMMENT_PREFIXES):
            continue

        class_match = class_pattern.match(trimmed)
        if class_match:
            element = CodeElement(
                kind=ElementKind.CLASS,
                name=class_match.group(1),
                file=file_path,
                start_line=line_number,
                end_line=line_number,
            )
            elements.append(element)
            current = _ClassContext(element=element, indent=indent)
            continue

        found = _match_callable(language, trimmed)
        if found is None:
            continue
        if current is not None and indent > current.indent:
            current.element.children.append(
                CodeElement(
                    kind=ElementKind.METHOD,
                    name=found.name,
                    file=file_path,
                    start_line=line_number,
                    end_line=line_number,
                )
            )
            continue
        elements.append(
            CodeElement(
                kind=ElementKind.ASYNC_FUNCTION if found.is_async else ElementKind.FUNCTION,
                name=found.name,
                file=file_path,
                start_line=line_number,
                end_line=line_number,
            )
        )
        current = None

    return FileAnalysis(
        file=file_path,
        language=language,
        elements=tuple(elements),
        imports=tuple(imports),
        exports=tuple(exports),
        method="patterns",
        line_count=len(lines),
    )


__all__ = ["analyze_with_patterns"]
