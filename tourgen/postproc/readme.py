"""README cleaning before it is shown to the generation service."""

from __future__ import annotations

import re
from typing import List

README_CHAR_BUDGET = 5000

_BADGE_PATTERNS = (
    re.compile(r"!\[.*?\]\(.*?badge.*?\)", re.IGNORECASE),
    re.compile(r"!\[.*?\]\(https://img\.shields\.io", re.IGNORECASE),
)
_SECTION_SKIP_TOKENS = ("sponsor", "### sponsors", "## sponsors", "### thank")
_PROMO_PATTERN = re.compile(r"\b(try|get|download|available)\b.*\b(free|now|today)\b", re.IGNORECASE)
_HEADING = re.compile(r"^#{1,3}\s")


def is_badge_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in _BADGE_PATTERNS)


def is_promotional_line(line: str) -> bool:
    lowered = line.lower()
    if "warp" in lowered and "built for" in lowered:
        return True
    if "tuple" in lowered and "premier" in lowered:
        return True
    if "available for" in lowered and "macos" in lowered:
        return True
    return bool(_PROMO_PATTERN.search(line))


def clean_readme(text: str, limit: int = README_CHAR_BUDGET) -> str:
    """Drop badges, sponsor sections and promotional lines, then truncate.

    A sponsor or thank-you section is skipped up to the next level 1-3
    heading, which is kept.
    """
    cleaned: List[str] = []
    skipping = False
    for line in text.split("\n"):
        if is_badge_line(line):
            continue
        lowered = line.lower()
        if any(token in lowered for token in _SECTION_SKIP_TOKENS):
            skipping = True
            continue
        if is_promotional_line(line):
            continue
        if skipping and _HEADING.match(line):
            skipping = False
        if not skipping:
            cleaned.append(line)
    return "\n".join(cleaned)[:limit]


__all__ = ["README_CHAR_BUDGET", "clean_readme", "is_badge_line", "is_promotional_line"]
