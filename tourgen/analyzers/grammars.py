"""Tree-sitter grammar registry passed explicitly into structural analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from tree_sitter import Parser
from tree_sitter_language_pack import get_language

from ..logging import get_logger

# Editor language id -> grammar name in the language pack.
LANGUAGE_GRAMMARS: Mapping[str, str] = MappingProxyType(
    {
        "typescript": "typescript",
        "typescriptreact": "tsx",
        "javascript": "javascript",
        "javascriptreact": "javascript",
        "python": "python",
    }
)

_logger = get_logger("analyzers.grammars")


@dataclass(frozen=True)
class GrammarRegistry:
    """Immutable map from language id to a loaded tree-sitter language."""

    languages: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.languages, MappingProxyType):
            object.__setattr__(self, "languages", MappingProxyType(dict(self.languages)))

    def get(self, language_id: str) -> Optional[Any]:
        return self.languages.get(language_id)

    def supports(self, language_id: str) -> bool:
        return language_id in self.languages

    def tags(self) -> Sequence[str]:
        return tuple(self.languages)

    def new_parser(self, language_id: str) -> Optional[Any]:
        """Return a fresh parser bound to the grammar for ``language_id``."""
        language = self.get(language_id)
        if language is None:
            return None
        return Parser(language)

    @classmethod
    def empty(cls) -> "GrammarRegistry":
        return cls()


def load_grammar_registry(language_ids: Iterable[str] | None = None) -> GrammarRegistry:
    """Load grammars once for the given language ids (all known ids by default).

    Grammars that fail to load are skipped; files in those languages use the
    line-pattern fallback.
    """
    wanted = list(language_ids) if language_ids is not None else list(LANGUAGE_GRAMMARS)
    loaded_by_grammar: Dict[str, Any] = {}
    languages: Dict[str, Any] = {}
    for language_id in wanted:
        grammar = LANGUAGE_GRAMMARS.get(language_id)
        if grammar is None:
            _logger.debug("No grammar known for language '%s'", language_id)
            continue
        if grammar not in loaded_by_grammar:
            try:
                loaded_by_grammar[grammar] = get_language(grammar)
            except Exception as exc:
                _logger.warning("Grammar '%s' is not available: %s", grammar, exc)
                continue
        languages[language_id] = loaded_by_grammar[grammar]

    registry = GrammarRegistry(languages)
    _logger.info(
        "Tree-sitter initialised with %d language(s): %s",
        len(languages),
        ", ".join(registry.tags()) or "none",
    )
    return registry


__all__ = [
    "GrammarRegistry",
    "LANGUAGE_GRAMMARS",
    "load_grammar_registry",
]
