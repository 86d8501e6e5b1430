"""Structural analysis and LLM-driven CodeTour generation."""

__version__ = "0.1.0"

__all__ = ["__version__"]
