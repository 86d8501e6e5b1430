"""Workspace file provider backed by the local file system."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

_ALWAYS_SKIPPED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".tourgen",
}

_LANGUAGE_BY_SUFFIX = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".py": "python",
    ".pyi": "python",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".kt": "kotlin",
    ".swift": "swift",
    ".md": "markdown",
    ".json": "json",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
}


@dataclass(frozen=True)
class IgnoreRule:
    """One gitignore-style exclusion line, parsed.

    Unscoped patterns (no slash) match any single path segment; scoped ones
    match the workspace-relative path or one of its ancestor directories.
    """

    pattern: str
    negate: bool = False
    directory_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        """Parse one line; blank lines and ``#`` comments yield None."""
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        negate = text.startswith("!")
        if negate:
            text = text[1:]
        directory_only = text.endswith("/")
        anchored = text.startswith("/")
        pattern = text.strip("/")
        if not pattern:
            return None
        return cls(pattern=pattern, negate=negate, directory_only=directory_only, anchored=anchored)

    @property
    def scoped(self) -> bool:
        return self.anchored or "/" in self.pattern

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        parts = rel_path.split("/")
        if not self.scoped:
            # A directory-only name may still match an ancestor of a file.
            candidates = parts if is_dir or not self.directory_only else parts[:-1]
            return any(fnmatchcase(part, self.pattern) for part in candidates)

        prefixes = ["/".join(parts[:end]) for end in range(1, len(parts) + 1)]
        if self.directory_only and not is_dir:
            prefixes = prefixes[:-1]
        return any(fnmatchcase(prefix, self.pattern) for prefix in prefixes)


def build_ignore_rules(lines: Sequence[str]) -> List[IgnoreRule]:
    """Parse exclusion lines in order, dropping blanks and comments."""
    return [rule for rule in map(IgnoreRule.parse, lines) if rule is not None]


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.is_file():
        return []
    return build_ignore_rules(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    """Apply ``rules`` in order; the last matching rule decides."""
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def detect_language(path: str) -> str:
    """Return the editor-style language id for ``path`` (``plaintext`` if unknown)."""
    suffix = Path(path).suffix.lower()
    return _LANGUAGE_BY_SUFFIX.get(suffix, "plaintext")


class LocalWorkspace:
    """Reads workspace files relative to a root directory.

    Paths handed out and accepted are workspace-relative POSIX strings.
    The provider never writes source files.
    """

    def __init__(self, root: str | Path, *, respect_gitignore: bool = True) -> None:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Workspace path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Workspace path is not a directory: {root}")
        self.root = root_path
        self._gitignore = parse_gitignore(root_path / ".gitignore") if respect_gitignore else []

    @property
    def name(self) -> str:
        return self.root.name or "Workspace"

    def find_files(
        self,
        include_suffixes: Sequence[str],
        exclude: Sequence[IgnoreRule],
        limit: Optional[int] = None,
    ) -> List[str]:
        """Enumerate files ending in one of ``include_suffixes``, skipping excluded paths.

        Enumeration order is deterministic (sorted walk) and stops after ``limit`` matches.
        """
        suffixes = tuple(suffix.lower() for suffix in include_suffixes)
        rules = list(self._gitignore) + list(exclude)
        found: List[str] = []
        for rel_path in self._iter_files(rules):
            if suffixes and not rel_path.lower().endswith(suffixes):
                continue
            found.append(rel_path)
            if limit is not None and len(found) >= limit:
                break
        return found

    def read_file(self, rel_path: str) -> Tuple[str, str]:
        """Return ``(text, language_id)`` for a workspace file."""
        path = self._resolve(rel_path)
        text = path.read_text(encoding="utf-8")
        return text, detect_language(rel_path)

    def read_joined(self, *parts: str) -> Optional[str]:
        """Return the text at ``root/parts`` or ``None`` when it does not exist."""
        path = self.root.joinpath(*parts)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def _resolve(self, rel_path: str) -> Path:
        path = (self.root / rel_path).resolve()
        if self.root not in path.parents and path != self.root:
            raise ValueError(f"Path escapes the workspace: {rel_path}")
        return path

    def _iter_files(self, rules: Sequence[IgnoreRule]) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(self.root).as_posix() if current_dir != self.root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _ALWAYS_SKIPPED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if should_ignore(rel_path, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, False, rules):
                    continue
                yield rel_path


__all__ = [
    "IgnoreRule",
    "LocalWorkspace",
    "build_ignore_rules",
    "detect_language",
    "parse_gitignore",
    "should_ignore",
]
