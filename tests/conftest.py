from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.workspace_builder import WorkspaceBuilder


@pytest.fixture
def workspace_builder(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a reusable workspace builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _clear_llm_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "TOURGEN_LLM_API_KEY",
        "TOURGEN_LLM_MODEL",
        "TOURGEN_LLM_API_URL",
        "TOURGEN_LLM_PROVIDER",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)
