"""Tests for file discovery and prioritisation."""

from __future__ import annotations

from tests._fixtures.workspace_builder import WorkspaceBuilder
from tourgen.discovery import discover, is_noise_path, prioritize, score_path


def _populate(builder: WorkspaceBuilder) -> None:
    builder.write(
        {
            "src/app.ts": "export const app = 1;\n",
            "src/utils/strings.ts": "export const a = 1;\n",
            "src/types.ts": "export interface A {}\n",
            "lib/index.js": "module.exports = {};\n",
            "webpack.config.js": "module.exports = {};\n",
            "README.md": "# Demo\n",
            "dist/bundle.js": "var x;\n",
            "node_modules/pkg/index.js": "var y;\n",
            "src/app.spec.ts": "it('works', () => {});\n",
            "src/__tests__/app.ts": "test();\n",
            "src/vendor.min.js": "var z;\n",
            "src/global.d.ts": "declare const g: number;\n",
            "tests/test_app.py": "def test_app():\n    pass\n",
            "tools/gen.py": "def gen():\n    pass\n",
        }
    )


def test_unbounded_discovery_returns_every_non_noise_match(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)

    found = discover(workspace_builder.workspace(), [".ts", ".js", ".py"], limit=0)

    assert sorted(found) == [
        "lib/index.js",
        "src/app.ts",
        "src/types.ts",
        "src/utils/strings.ts",
        "tools/gen.py",
    ]


def test_discovery_orders_by_score(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)

    found = discover(workspace_builder.workspace(), [".ts", ".js", ".py"])

    # Equal scores keep walk order, which visits lib/ before src/.
    assert found[:2] == ["lib/index.js", "src/app.ts"]
    assert found[-1] == "tools/gen.py"


def test_limit_caps_results(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)

    found = discover(workspace_builder.workspace(), [".ts", ".js", ".py"], limit=2)

    assert len(found) <= 2
    assert not any(is_noise_path(path) for path in found)


def test_caller_excludes_are_applied(workspace_builder: WorkspaceBuilder) -> None:
    _populate(workspace_builder)

    found = discover(workspace_builder.workspace(), [".ts"], exclude_patterns=["src/utils/"])

    assert "src/utils/strings.ts" not in found
    assert "src/app.ts" in found


def test_noise_substrings_use_path_boundaries() -> None:
    assert is_noise_path("pkg/tests/helpers.py")
    assert is_noise_path("tests/helpers.py")
    assert is_noise_path("src/app.config.ts")
    assert not is_noise_path("src/latest/feature.ts")
    assert not is_noise_path("src/contest.ts")


def test_score_path_components() -> None:
    assert score_path("src/main.ts") == 100 + 50 - 4
    assert score_path("a/b/helper.ts") == -6
    assert score_path("webpack.config.js") == -2 - 30
    assert score_path("src/types.ts") == 50 - 4 + 10
    assert score_path("spec/helper.ts") == -50 - 4


def test_prioritize_is_stable_for_ties() -> None:
    assert prioritize(["b/x.ts", "a/y.ts", "src/index.ts"]) == ["src/index.ts", "b/x.ts", "a/y.ts"]
