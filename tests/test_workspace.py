"""Tests for the local workspace provider."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.workspace_builder import WorkspaceBuilder
from tourgen.workspace import IgnoreRule, LocalWorkspace, build_ignore_rules, detect_language, should_ignore


def test_find_files_respects_gitignore_and_skipped_dirs(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write(
        {
            ".gitignore": "build/\n*.gen.ts\n!keep.gen.ts\n",
            "src/a.ts": "export const a = 1;\n",
            "src/b.gen.ts": "export const b = 1;\n",
            "src/keep.gen.ts": "export const k = 1;\n",
            "build/out.ts": "var x;\n",
            ".git/hooks/pre-commit.ts": "var y;\n",
            "notes.md": "# notes\n",
        }
    )

    found = workspace_builder.workspace().find_files([".ts"], [])

    assert found == ["src/a.ts", "src/keep.gen.ts"]


def test_find_files_stops_at_limit(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"a.py": "", "b.py": "", "c.py": ""})

    found = workspace_builder.workspace().find_files([".py"], [], limit=2)

    assert found == ["a.py", "b.py"]


def test_caller_rules_are_applied(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"src/a.py": "", "gen/b.py": ""})

    found = workspace_builder.workspace().find_files([".py"], build_ignore_rules(["gen/"]))

    assert found == ["src/a.py"]


def test_read_file_returns_text_and_language(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"pkg/mod.py": "x = 1\n"})

    text, language = workspace_builder.workspace().read_file("pkg/mod.py")

    assert text == "x = 1\n"
    assert language == "python"


def test_read_file_rejects_paths_outside_root(workspace_builder: WorkspaceBuilder) -> None:
    (workspace_builder.path().parent / "secret.txt").write_text("nope", encoding="utf-8")

    with pytest.raises(ValueError):
        workspace_builder.workspace().read_file("../secret.txt")


def test_read_joined_returns_none_for_missing_files(workspace_builder: WorkspaceBuilder) -> None:
    workspace_builder.write({"README.md": "# Demo\n"})
    workspace = workspace_builder.workspace()

    assert workspace.read_joined("README.md") == "# Demo\n"
    assert workspace.read_joined("package.json") is None


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LocalWorkspace(tmp_path / "absent")

    target = tmp_path / "file.txt"
    target.write_text("", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        LocalWorkspace(target)


def test_workspace_name_is_root_basename(workspace_builder: WorkspaceBuilder) -> None:
    assert workspace_builder.workspace().name == "repo"


def test_ignore_rules_last_match_wins() -> None:
    rules = build_ignore_rules(["*.log", "!important.log"])

    assert should_ignore("debug.log", False, rules)
    assert not should_ignore("important.log", False, rules)


def test_ignore_rule_parse_flags() -> None:
    assert IgnoreRule.parse("  # comment") is None
    assert IgnoreRule.parse("   ") is None
    assert IgnoreRule.parse("!/") is None
    assert IgnoreRule.parse("!/build/") == IgnoreRule("build", negate=True, directory_only=True, anchored=True)
    assert not IgnoreRule.parse("*.log").scoped
    assert IgnoreRule.parse("docs/api").scoped


def test_scoped_rules_match_descendants_and_anchors() -> None:
    rules = build_ignore_rules(["docs/api", "/build"])

    assert should_ignore("docs/api/index.md", False, rules)
    assert not should_ignore("src/docs/api/index.md", False, rules)
    assert should_ignore("build/main.js", False, rules)
    assert not should_ignore("src/build/main.js", False, rules)


def test_directory_only_rules_skip_same_named_files() -> None:
    rules = build_ignore_rules(["gen/"])

    assert should_ignore("src/gen", True, rules)
    assert should_ignore("src/gen/out.py", False, rules)
    assert not should_ignore("src/gen", False, rules)


def test_detect_language() -> None:
    assert detect_language("src/App.TSX") == "typescriptreact"
    assert detect_language("lib/index.mjs") == "javascript"
    assert detect_language("Makefile") == "plaintext"
