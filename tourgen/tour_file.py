"""CodeTour artifact construction and persistence."""

from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .models import CodeTour, TourStep
from .prompting.constants import DEFAULT_TOUR_DESCRIPTION

CODETOUR_SCHEMA = "https://aka.ms/codetour-schema"

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\-]", re.ASCII)


def slugify(title: str) -> str:
    """Lowercase, hyphenate whitespace, and drop everything but word characters and hyphens."""
    slug = _NON_WORD.sub("", _WHITESPACE.sub("-", title.lower()))
    return slug or "tour"


def default_title(now: datetime | None = None) -> str:
    moment = now or datetime.now()
    return f"AI Generated Tour - {moment.strftime('%Y-%m-%d %H:%M:%S')}"


def tour_path(root: Path, tours_dir: str, title: str) -> Path:
    return Path(root) / tours_dir / f"{slugify(title)}.tour"


def build_tour(
    steps: Sequence[TourStep],
    root: Path,
    *,
    tours_dir: str = ".tours",
    title: Optional[str] = None,
    description: Optional[str] = None,
    now: datetime | None = None,
) -> CodeTour:
    resolved_title = title or default_title(now)
    path = tour_path(Path(root).resolve(), tours_dir, resolved_title)
    return CodeTour(
        id=path.as_uri(),
        title=resolved_title,
        description=description or DEFAULT_TOUR_DESCRIPTION,
        steps=list(steps),
    )


def tour_to_dict(tour: CodeTour) -> Dict[str, Any]:
    return {
        "$schema": CODETOUR_SCHEMA,
        "title": tour.title,
        "description": tour.description,
        "steps": [step.to_dict() for step in tour.steps],
    }


def write_tour(tour: CodeTour, root: Path, tours_dir: str = ".tours") -> Path:
    """Write ``tour`` as JSON into ``root/tours_dir`` and return the file path."""
    path = tour_path(Path(root), tours_dir, tour.title)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(tour_to_dict(tour), indent=2) + "\n", encoding="utf-8")
    return path


__all__ = [
    "CODETOUR_SCHEMA",
    "build_tour",
    "default_title",
    "slugify",
    "tour_path",
    "tour_to_dict",
    "write_tour",
]
