"""Post-processing of project documentation."""

from .readme import clean_readme

__all__ = ["clean_readme"]
