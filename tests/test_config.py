"""Tests for tourgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from tourgen.config import GenerateConfig, TourGenConfig, load_config
from tourgen.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TourGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.llm.provider is None
    assert config.llm.api_key is None
    assert config.generate == GenerateConfig()
    assert config.generate.include_file_types == [".ts", ".js", ".py"]
    assert config.exclude_paths == []
    assert config.tours_dir == ".tours"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".tourgen.yml").write_text(
        """
llm:
  provider: "anthropic"
  model: "claude-test"
  api_key: "secret"
  api_url: "https://llm.example.test/v1/messages"
  request_timeout: 30
  temperature: 0.2
  max_tokens: 2048
generate:
  max_files: 50
  include_file_types: ["ts", "*.tsx", ".PY"]
  max_steps: 12
  batch_size: 3
  concurrency: 2
  batch_timeout: 10
  target_steps: 18
  validate_line_bounds: yes
exclude_paths:
  - fixtures/
tours_dir: docs/tours
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.llm.provider == "anthropic"
    assert config.llm.model == "claude-test"
    assert config.llm.api_key == "secret"
    assert config.llm.api_url == "https://llm.example.test/v1/messages"
    assert config.llm.request_timeout == 30.0
    assert config.llm.temperature == 0.2
    assert config.llm.max_tokens == 2048
    assert config.generate.max_files == 50
    assert config.generate.include_file_types == [".ts", ".tsx", ".py"]
    assert config.generate.max_steps == 12
    assert config.generate.batch_size == 3
    assert config.generate.concurrency == 2
    assert config.generate.batch_timeout == 10.0
    assert config.generate.target_steps == 18
    assert config.generate.validate_line_bounds is True
    assert config.exclude_paths == ["fixtures/"]
    assert config.tours_dir == "docs/tours"


def test_invalid_numbers_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".tourgen.yml").write_text(
        "generate:\n  max_steps: 0\n  batch_size: -2\n  concurrency: many\n  max_files: 0\n",
        encoding="utf-8",
    )

    generate = load_config(tmp_path).generate

    assert generate.max_steps == 20
    assert generate.batch_size == 4
    assert generate.concurrency == 3
    assert generate.max_files == 0


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".tourgen.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).generate == GenerateConfig()


def test_load_config_accepts_file_path(tmp_path: Path) -> None:
    config_file = tmp_path / ".tourgen.yml"
    config_file.write_text("tours_dir: tours\n", encoding="utf-8")

    assert load_config(config_file).tours_dir == "tours"


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".tourgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_yaml_is_reported(tmp_path: Path) -> None:
    (tmp_path / ".tourgen.yml").write_text("llm: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)
