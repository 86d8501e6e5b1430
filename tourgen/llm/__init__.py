"""Generation-service client."""

from .client import GenerationService, LLMClient, LLMMessage, LLMResponse, build_messages

__all__ = ["GenerationService", "LLMClient", "LLMMessage", "LLMResponse", "build_messages"]
