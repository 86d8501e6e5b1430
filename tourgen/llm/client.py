"""Async client for the external text-generation service."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import httpx

from ..config import LLMConfig
from ..errors import (
    ConfigError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMNotConfiguredError,
    LLMRateLimitError,
    LLMResponseError,
)
from ..logging import get_logger

_logger = get_logger("llm")

_TOKEN_WARNING_THRESHOLD = 100_000


@dataclass(frozen=True)
class LLMMessage:
    """Role-tagged chat message (``system``, ``user`` or ``assistant``)."""

    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMResponse:
    content: str
    usage: Optional[Dict[str, int]] = None


class GenerationService(Protocol):
    async def complete(self, messages: Sequence[LLMMessage]) -> LLMResponse: ...


def estimate_tokens(messages: Sequence[LLMMessage]) -> int:
    """Rough input size in tokens (four characters per token)."""
    return sum(len(message.content) for message in messages) // 4


class LLMClient:
    """Sends chat requests to OpenAI, Anthropic or an OpenAI-compatible endpoint."""

    PROVIDERS = ("openai", "anthropic", "custom")
    DEFAULT_PROVIDER = "openai"
    DEFAULT_MODEL = "gpt-4"
    DEFAULT_URLS = {
        "openai": "https://api.openai.com/v1/chat/completions",
        "anthropic": "https://api.anthropic.com/v1/messages",
        "custom": "https://api.openai.com/v1/chat/completions",
    }
    ANTHROPIC_VERSION = "2023-06-01"
    ENV_API_KEY = "TOURGEN_LLM_API_KEY"
    ENV_PROVIDER_API_KEYS = {"openai": "OPENAI_API_KEY", "anthropic": "ANTHROPIC_API_KEY"}
    ENV_MODEL = "TOURGEN_LLM_MODEL"
    ENV_API_URL = "TOURGEN_LLM_API_URL"
    ENV_PROVIDER = "TOURGEN_LLM_PROVIDER"

    def __init__(
        self,
        provider: str | None = None,
        model: str | None = None,
        *,
        api_key: str | None = None,
        api_url: str | None = None,
        temperature: Optional[float] = 0.7,
        max_tokens: Optional[int] = 4096,
        request_timeout: Optional[float] = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        provider = (provider or self.DEFAULT_PROVIDER).strip().lower()
        if provider not in self.PROVIDERS:
            raise ConfigError(f"Unknown LLM provider '{provider}'. Expected one of: {', '.join(self.PROVIDERS)}")
        self.provider = provider
        self.model = model or self.DEFAULT_MODEL
        self.api_key = api_key.strip() if api_key else None
        self.api_url = api_url or self.DEFAULT_URLS[provider]
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout or 120.0
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: LLMConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> "LLMClient":
        """Build a client from file settings, letting environment variables win."""
        provider = (os.getenv(cls.ENV_PROVIDER) or config.provider or cls.DEFAULT_PROVIDER).lower()
        provider_key_env = cls.ENV_PROVIDER_API_KEYS.get(provider)
        api_key = (
            os.getenv(cls.ENV_API_KEY)
            or (os.getenv(provider_key_env) if provider_key_env else None)
            or config.api_key
        )
        return cls(
            provider,
            os.getenv(cls.ENV_MODEL) or config.model,
            api_key=api_key,
            api_url=os.getenv(cls.ENV_API_URL) or config.api_url,
            temperature=config.temperature if config.temperature is not None else 0.7,
            max_tokens=config.max_tokens if config.max_tokens is not None else 4096,
            request_timeout=config.request_timeout,
            transport=transport,
        )

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, messages: Sequence[LLMMessage]) -> LLMResponse:
        """Send ``messages`` and return the response text.

        Raises an ``LLMError`` subclass describing the failure class.
        """
        if not self.is_configured():
            raise LLMNotConfiguredError()

        estimated = estimate_tokens(messages)
        _logger.debug("Estimated input tokens: %d", estimated)
        if estimated > _TOKEN_WARNING_THRESHOLD:
            _logger.warning("Large input (~%d tokens) may exceed the model's context window", estimated)

        headers, payload = self._build_request(messages)
        try:
            async with httpx.AsyncClient(timeout=self.request_timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise LLMConnectionError(f"Request to LLM API at {self.api_url} timed out") from exc
        except httpx.TransportError as exc:
            raise LLMConnectionError(
                f"Cannot reach LLM API at {self.api_url}. Check your network connection and API URL."
            ) from exc

        if response.status_code >= 400:
            raise self._status_error(response)

        try:
            body = response.json()
        except ValueError as exc:
            raise LLMResponseError("LLM API returned invalid JSON") from exc

        content = self._extract_content(body)
        if not content or not content.strip():
            raise LLMResponseError("LLM API returned an empty response")
        usage = self._extract_usage(body)
        if usage:
            _logger.debug("Token usage: %s", usage)
        return LLMResponse(content=content, usage=usage)

    def _build_request(self, messages: Sequence[LLMMessage]) -> Tuple[Dict[str, str], Dict[str, Any]]:
        headers = {"Content-Type": "application/json"}
        payload: Dict[str, Any] = {"model": self.model}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens

        if self.provider == "anthropic":
            headers["x-api-key"] = self.api_key or ""
            headers["anthropic-version"] = self.ANTHROPIC_VERSION
            system = "\n\n".join(message.content for message in messages if message.role == "system")
            if system:
                payload["system"] = system
            payload["messages"] = [message.to_dict() for message in messages if message.role != "system"]
        else:
            headers["Authorization"] = f"Bearer {self.api_key}"
            payload["messages"] = [message.to_dict() for message in messages]
        return headers, payload

    def _extract_content(self, body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        if self.provider == "anthropic":
            blocks = body.get("content")
            if isinstance(blocks, list) and blocks and isinstance(blocks[0], dict):
                text = blocks[0].get("text")
                return text if isinstance(text, str) else ""
            return ""

        content = _openai_content(body)
        if content or self.provider == "openai":
            return content
        # OpenAI-compatible servers that answer in their own shape.
        for key in ("content", "response"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        return json.dumps(body)

    @staticmethod
    def _extract_usage(body: Any) -> Optional[Dict[str, int]]:
        if not isinstance(body, dict):
            return None
        usage = body.get("usage")
        if not isinstance(usage, dict):
            return None
        counters = {
            key: value for key, value in usage.items() if isinstance(value, int) and not isinstance(value, bool)
        }
        return counters or None

    def _status_error(self, response: httpx.Response) -> Exception:
        status = response.status_code
        detail = response.text.strip()
        if status in (401, 403):
            return LLMAuthenticationError("Invalid API key. Please check your settings.")
        if status == 429:
            return LLMRateLimitError("Rate limit exceeded. Please try again later.")
        if status == 400 and "context_length_exceeded" in detail:
            return LLMResponseError(
                "Input is too long for the model's context window. Reduce max_files or include fewer file types."
            )
        return LLMResponseError(f"LLM API request failed with status {status}: {detail[:200]}")


def _openai_content(body: Dict[str, Any]) -> str:
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content
    text = first.get("text")
    if isinstance(text, str):
        return text
    return ""


def system_message(content: str) -> LLMMessage:
    return LLMMessage(role="system", content=content)


def user_message(content: str) -> LLMMessage:
    return LLMMessage(role="user", content=content)


def build_messages(system: str, user: str) -> List[LLMMessage]:
    return [system_message(system), user_message(user)]


__all__ = [
    "GenerationService",
    "LLMClient",
    "LLMMessage",
    "LLMResponse",
    "build_messages",
    "estimate_tokens",
]
