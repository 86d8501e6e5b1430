"""Defensive parsing of tour steps returned by the generation service."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from ..errors import StepParseError
from ..logging import get_logger
from ..models import GeneratedTourStep, Position, Selection

_logger = get_logger("generation.parsing")


def extract_json_array(text: str) -> Optional[str]:
    """Return the first balanced ``[...]`` substring of ``text``.

    Brackets inside JSON string literals are ignored. Returns None when no
    opening bracket is ever closed.
    """
    start = text.find("[")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            return text[start : end + 1]
        start = text.find("[", start + 1)
    return None


def _balanced_end(text: str, start: int) -> Optional[int]:
    depth = 0
    in_str = False
    esc = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return index
    return None


def decode_steps(text: str) -> List[GeneratedTourStep]:
    """Parse a response into untrusted steps, raising StepParseError on malformed text."""
    snippet = extract_json_array(text or "")
    if snippet is None:
        raise StepParseError("No JSON array found in response")
    try:
        payload = json.loads(snippet)
    except ValueError as exc:
        raise StepParseError(f"Response array is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise StepParseError("Response is not an array")

    steps: List[GeneratedTourStep] = []
    for item in payload:
        step = coerce_step(item)
        if step is not None:
            steps.append(step)
    return steps


def parse_steps(text: str) -> List[GeneratedTourStep]:
    """Parse a response into untrusted steps; any failure yields an empty list."""
    try:
        return decode_steps(text)
    except StepParseError as exc:
        _logger.warning("Failed to parse generation response: %s", exc)
        return []


def coerce_step(item: Any) -> Optional[GeneratedTourStep]:
    if not isinstance(item, dict):
        return None
    return GeneratedTourStep(
        title=_as_text(item.get("title")),
        file=_as_text(item.get("file")),
        description=_as_text(item.get("description")),
        line=_as_line(item.get("line")),
        selection=_as_selection(item.get("selection")),
    )


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return str(value)


def _as_line(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_position(value: Any) -> Optional[Position]:
    if not isinstance(value, dict):
        return None
    line = _as_line(value.get("line"))
    character = _as_line(value.get("character"))
    if line is None:
        return None
    return Position(line=line, character=character or 0)


def _as_selection(value: Any) -> Optional[Selection]:
    if not isinstance(value, dict):
        return None
    start = _as_position(value.get("start"))
    end = _as_position(value.get("end"))
    if start is None or end is None:
        return None
    return Selection(start=start, end=end)


__all__ = ["coerce_step", "decode_steps", "extract_json_array", "parse_steps"]
