"""Validation of generated tour steps."""

from .steps import StepValidator, find_similar_file, is_welcome_step, validate_steps

__all__ = ["StepValidator", "find_similar_file", "is_welcome_step", "validate_steps"]
