"""Exception types raised across the tour generation pipeline."""

from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


class LLMError(RuntimeError):
    """Base class for generation-service failures.

    ``str(exc)`` is the user-facing message for the failure class.
    """


class LLMNotConfiguredError(LLMError):
    """Raised when no API key is available for the generation service."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "LLM API key is not configured. Set llm.api_key in .tourgen.yml or TOURGEN_LLM_API_KEY."
        )


class LLMAuthenticationError(LLMError):
    """The service rejected the configured credentials."""


class LLMRateLimitError(LLMError):
    """The service refused the request because of rate limiting."""


class LLMConnectionError(LLMError):
    """The service endpoint could not be reached."""


class LLMResponseError(LLMError):
    """The service answered, but not with usable text."""


class StepParseError(ValueError):
    """A generation response did not contain a usable JSON step array."""


class TourCancelledError(RuntimeError):
    """Raised at a checkpoint after cancellation was requested."""

    def __init__(self, message: str = "Tour generation cancelled") -> None:
        super().__init__(message)


__all__ = [
    "ConfigError",
    "LLMAuthenticationError",
    "LLMConnectionError",
    "LLMError",
    "LLMNotConfiguredError",
    "LLMRateLimitError",
    "LLMResponseError",
    "StepParseError",
    "TourCancelledError",
]
