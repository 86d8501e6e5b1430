"""Structural analysis of a single file: tree-sitter first, line patterns second."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import ANONYMOUS, CodeElement, ElementKind, FileAnalysis
from .grammars import GrammarRegistry
from .node_kinds import FUNCTION_LITERAL_KINDS, NodeKind, classify, element_kind_for
from .patterns import analyze_with_patterns

AnalysisStrategy = Callable[[str, str, str], Optional[FileAnalysis]]

_MEMBER_KINDS = frozenset({NodeKind.FUNCTION_DECL, NodeKind.METHOD_DECL})

_logger = get_logger("analyzers.structure")


def _node_text(node, source: bytes) -> str:  # type: ignore[no-untyped-def]
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _is_async(node) -> bool:  # type: ignore[no-untyped-def]
    return any(child.type == "async" for child in node.children)


class _ElementCollector:
    """Walks a syntax tree and builds the top-level element list."""

    def __init__(self, file_path: str, source: bytes) -> None:
        self.file_path = file_path
        self.source = source

    def collect(self, root) -> List[CodeElement]:  # type: ignore[no-untyped-def]
        elements: List[CodeElement] = []
        self._visit(root, None, elements)
        return elements

    def _visit(self, node, owner: Optional[CodeElement], out: List[CodeElement]) -> None:  # type: ignore[no-untyped-def]
        kind = classify(node.type, node.is_named)
        element = None if kind is NodeKind.EXPORT_WRAPPER else self._to_element(node, kind)
        if element is None:
            for child in node.children:
                self._visit(child, owner, out)
            return

        if owner is not None and kind in _MEMBER_KINDS:
            element.kind = ElementKind.METHOD
            owner.children.append(element)
        elif owner is not None and element.kind is ElementKind.CLASS:
            owner.children.append(element)
        else:
            out.append(element)

        # Only class bodies are descended; function bodies hold no reported elements.
        # A nested class owns the members declared in its own body.
        if element.kind is ElementKind.CLASS:
            for child in node.children:
                self._visit(child, element, out)

    def _to_element(self, node, kind: NodeKind) -> Optional[CodeElement]:  # type: ignore[no-untyped-def]
        if kind is NodeKind.VARIABLE_DECL:
            return self._variable_element(node)

        element_kind = element_kind_for(kind)
        if element_kind is None:
            return None
        if element_kind is ElementKind.FUNCTION and _is_async(node):
            element_kind = ElementKind.ASYNC_FUNCTION
        name_node = node.child_by_field_name("name")
        return self._element(node, element_kind, _node_text(name_node, self.source) if name_node else ANONYMOUS)

    def _variable_element(self, node) -> Optional[CodeElement]:  # type: ignore[no-untyped-def]
        for child in node.children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            if name_node is None or value_node is None:
                continue
            name = _node_text(name_node, self.source)
            if value_node.type in FUNCTION_LITERAL_KINDS:
                element_kind = ElementKind.ASYNC_FUNCTION if _is_async(value_node) else ElementKind.FUNCTION
            else:
                element_kind = ElementKind.VARIABLE
            return self._element(node, element_kind, name)
        return None

    def _element(self, node, kind: ElementKind, name: str) -> CodeElement:  # type: ignore[no-untyped-def]
        return CodeElement(
            kind=kind,
            name=name,
            file=self.file_path,
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
        )


def _collect_statements(root, source: bytes, marker: str) -> List[str]:  # type: ignore[no-untyped-def]
    """Return the text of the outermost named nodes whose type contains ``marker``."""
    statements: List[str] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node is not root and node.is_named and marker in node.type:
            text = _node_text(node, source).strip()
            if text:
                statements.append(text)
            continue
        stack.extend(reversed(node.children))
    return statements


def analyze_with_grammar(
    file_path: str, content: str, language: str, grammars: GrammarRegistry
) -> Optional[FileAnalysis]:
    """Parse ``content`` with the registered grammar; None when there is none."""
    parser = grammars.new_parser(language)
    if parser is None:
        return None
    source = content.encode("utf-8")
    tree = parser.parse(source)
    root = tree.root_node
    elements = _ElementCollector(file_path, source).collect(root)
    return FileAnalysis(
        file=file_path,
        language=language,
        elements=tuple(elements),
        imports=tuple(_collect_statements(root, source, "import")),
        exports=tuple(_collect_statements(root, source, "export")),
        method="grammar",
        line_count=len(content.splitlines()),
    )


class StructuralAnalyzer:
    """Turns file text into a FileAnalysis through an ordered list of strategies.

    The first strategy that returns a result without raising wins. ``analyze``
    never raises; if every strategy fails the file yields an empty analysis.
    """

    def __init__(
        self,
        grammars: GrammarRegistry,
        strategies: Sequence[Tuple[str, AnalysisStrategy]] | None = None,
    ) -> None:
        self.grammars = grammars
        self.strategies: Tuple[Tuple[str, AnalysisStrategy], ...] = tuple(
            strategies
            if strategies is not None
            else (("grammar", self._grammar_strategy), ("patterns", analyze_with_patterns))
        )

    def analyze(self, file_path: str, content: str, language: str) -> FileAnalysis:
        for name, strategy in self.strategies:
            try:
                result = strategy(file_path, content, language)
            except Exception as exc:
                _logger.warning("%s analysis failed for %s: %s", name, file_path, exc)
                continue
            if result is not None:
                _logger.debug(
                    "%s: %d elements via %s (%d imports, %d exports)",
                    file_path,
                    len(result.elements),
                    name,
                    len(result.imports),
                    len(result.exports),
                )
                return result
            _logger.debug("No %s analysis available for %s (%s)", name, file_path, language)

        return FileAnalysis(
            file=file_path,
            language=language,
            elements=(),
            imports=(),
            exports=(),
            method="none",
            line_count=len(content.splitlines()),
        )

    def _grammar_strategy(self, file_path: str, content: str, language: str) -> Optional[FileAnalysis]:
        return analyze_with_grammar(file_path, content, language, self.grammars)


__all__ = ["AnalysisStrategy", "StructuralAnalyzer", "analyze_with_grammar"]
