"""Structural analysis of workspace source files."""

from __future__ import annotations

from .grammars import GrammarRegistry, load_grammar_registry
from .project import ProjectAnalyzer
from .structure import StructuralAnalyzer

__all__ = [
    "GrammarRegistry",
    "ProjectAnalyzer",
    "StructuralAnalyzer",
    "load_grammar_registry",
]
