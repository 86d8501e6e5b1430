"""Prompt construction for the generation service."""

from .builder import (
    PromptBuilder,
    TourFocus,
    build_project_context,
    format_batch_digest,
    key_directories,
    steps_per_batch,
)

__all__ = [
    "PromptBuilder",
    "TourFocus",
    "build_project_context",
    "format_batch_digest",
    "key_directories",
    "steps_per_batch",
]
