"""File discovery and importance-based prioritisation."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .logging import get_logger
from .workspace import LocalWorkspace, build_ignore_rules

# Build outputs, dependency folders, tests, generated and IDE/VCS noise (gitignore syntax).
NOISE_PATTERNS: tuple[str, ...] = (
    "node_modules/",
    "dist/",
    "build/",
    "out/",
    ".next/",
    "coverage/",
    "__tests__/",
    "__mocks__/",
    "*.test.*",
    "*.spec.*",
    "*.min.*",
    "*.d.ts",
    ".git/",
    ".vscode/",
    ".idea/",
    ".venv/",
    "venv/",
    ".tours/",
)

# Substrings that mark a path as noise even when glob exclusion let it through.
NOISE_SUBSTRINGS: tuple[str, ...] = (
    ".test.",
    ".spec.",
    "/test/",
    "/tests/",
    "__test__",
    "__tests__",
    ".config.",
    "/config/",
    ".generated.",
    ".min.",
    "/node_modules/",
    "/dist/",
    "/build/",
    ".d.ts",
)

_logger = get_logger("discovery")


def is_noise_path(rel_path: str) -> bool:
    """Return True when the path matches one of the noise substrings."""
    lowered = f"/{rel_path.lower()}"
    return any(token in lowered for token in NOISE_SUBSTRINGS)


def score_path(rel_path: str) -> int:
    """Estimate how early a file should appear in the tour (higher is earlier)."""
    lowered = rel_path.lower()
    score = 0
    if "index" in lowered or "main" in lowered or "app" in lowered:
        score += 100
    if "src/" in lowered or "lib/" in lowered:
        score += 50
    if "test" in lowered or "spec" in lowered:
        score -= 50
    score -= 2 * len(lowered.split("/"))
    if "config" in lowered or "webpack" in lowered:
        score -= 30
    if "type" in lowered or "interface" in lowered:
        score += 10
    return score


def prioritize(paths: Sequence[str]) -> List[str]:
    """Order paths by descending score, keeping enumeration order for ties."""
    return sorted(paths, key=lambda path: -score_path(path))


def discover(
    workspace: LocalWorkspace,
    include_extensions: Sequence[str],
    exclude_patterns: Sequence[str] = (),
    limit: int = 0,
) -> List[str]:
    """Return prioritised workspace-relative file paths.

    ``limit == 0`` discovers every non-excluded match. A positive limit searches
    ``3 * limit`` candidates so scoring has a pool to choose from, then truncates.
    """
    rules = build_ignore_rules([*NOISE_PATTERNS, *exclude_patterns])
    search_limit: Optional[int] = limit * 3 if limit > 0 else None
    if search_limit is None:
        _logger.info("Discovering all matching files (unbounded)")
    else:
        _logger.info("Discovering up to %d candidates for a limit of %d files", search_limit, limit)

    found = workspace.find_files(include_extensions, rules, search_limit)
    _logger.info("Found %d candidate files", len(found))

    cleaned = [path for path in found if not is_noise_path(path)]
    if len(cleaned) != len(found):
        _logger.debug("Dropped %d near-miss noise files", len(found) - len(cleaned))

    ordered = prioritize(cleaned)
    if limit > 0:
        ordered = ordered[:limit]
    _logger.info("Selected %d files for analysis", len(ordered))
    return ordered


__all__ = [
    "NOISE_PATTERNS",
    "NOISE_SUBSTRINGS",
    "discover",
    "is_noise_path",
    "prioritize",
    "score_path",
]
