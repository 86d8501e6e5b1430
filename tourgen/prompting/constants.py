"""Shared prompt text for tour generation."""

from __future__ import annotations

WELCOME_MARKER = "Welcome"

PROJECT_GOAL = (
    "Create a comprehensive, narrative-driven tour that helps developers deeply understand this codebase."
)

INTERCONNECTION_NOTE = "Note: Files are interconnected. Show how they work together as a cohesive system."

# Scoped to the first step only; batch prompts never mention the welcome page.
WELCOME_SYSTEM_PROMPT = (
    "You are creating the WELCOME PAGE for a code tour. This is the FIRST step and it introduces "
    "the entire project.\n\n"
    "Use the README and the codebase structure to explain WHAT this project does and WHY it exists:\n"
    "- Purpose: the specific problem it solves and its primary function\n"
    "- Core functionality: the main features and capabilities\n"
    "- Key use cases: two or three concrete scenarios\n"
    "- How it works: the high-level flow from input to output\n"
    "- Architecture: main components and their roles\n"
    "- Tech stack: languages, frameworks and key libraries\n\n"
    "Avoid marketing language, sponsor notices and vague descriptions. Be specific and technical. "
    "Respond with a JSON array containing exactly one step object."
)

BATCH_SYSTEM_PROMPT = (
    "You are generating code tour steps for a SPECIFIC BATCH of files. The welcome step has ALREADY "
    "been created.\n\n"
    "Create detailed steps for the files provided, focusing on helping developers understand the "
    "code's purpose, architecture and connections. Respond with a JSON array only."
)

DEFAULT_TOUR_DESCRIPTION = "This tour was automatically generated using AI and tree-sitter analysis."


__all__ = [
    "BATCH_SYSTEM_PROMPT",
    "DEFAULT_TOUR_DESCRIPTION",
    "INTERCONNECTION_NOTE",
    "PROJECT_GOAL",
    "WELCOME_MARKER",
    "WELCOME_SYSTEM_PROMPT",
]
