"""Configuration loading for tourgen (.tourgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".tourgen.yml"

DEFAULT_INCLUDE_FILE_TYPES: tuple[str, ...] = (".ts", ".js", ".py")


@dataclass
class LLMConfig:
    """Generation service settings from .tourgen.yml."""

    provider: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = None
    api_url: Optional[str] = None
    request_timeout: Optional[float] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass
class GenerateConfig:
    """Knobs for discovery, batching and validation."""

    max_files: int = 200
    include_file_types: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE_FILE_TYPES))
    max_steps: int = 20
    batch_size: int = 4
    concurrency: int = 3
    batch_timeout: float = 45.0
    target_steps: int = 25
    validate_line_bounds: bool = False


@dataclass
class TourGenConfig:
    """Represents the settings defined in .tourgen.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    generate: GenerateConfig = field(default_factory=GenerateConfig)
    exclude_paths: List[str] = field(default_factory=list)
    tours_dir: str = ".tours"


def load_config(config_path: Path) -> TourGenConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TourGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        provider=_as_str(llm_data.get("provider")),
        model=_as_str(llm_data.get("model")),
        api_key=_as_str(llm_data.get("api_key")),
        api_url=_as_str(llm_data.get("api_url")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
    )

    defaults = GenerateConfig()
    generate_data = _as_dict(data.get("generate"))
    include = _as_str_list(generate_data.get("include_file_types"))
    generate = GenerateConfig(
        max_files=_non_negative(_as_int(generate_data.get("max_files")), defaults.max_files),
        include_file_types=[_normalise_suffix(item) for item in include] or defaults.include_file_types,
        max_steps=_positive(_as_int(generate_data.get("max_steps")), defaults.max_steps),
        batch_size=_positive(_as_int(generate_data.get("batch_size")), defaults.batch_size),
        concurrency=_positive(_as_int(generate_data.get("concurrency")), defaults.concurrency),
        batch_timeout=_positive(_as_float(generate_data.get("batch_timeout")), defaults.batch_timeout),
        target_steps=_positive(_as_int(generate_data.get("target_steps")), defaults.target_steps),
        validate_line_bounds=_as_bool(generate_data.get("validate_line_bounds")) or False,
    )

    return TourGenConfig(
        root=root,
        llm=llm,
        generate=generate,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        tours_dir=_as_str(data.get("tours_dir")) or ".tours",
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalise_suffix(value: str) -> str:
    value = value.strip()
    if value.startswith("*"):
        value = value[1:]
    if value and not value.startswith("."):
        value = f".{value}"
    return value.lower()


def _positive(value: Any, default: Any) -> Any:
    if value is None or value <= 0:
        return default
    return value


def _non_negative(value: Optional[int], default: int) -> int:
    if value is None or value < 0:
        return default
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GenerateConfig",
    "LLMConfig",
    "TourGenConfig",
    "load_config",
]
