"""Reasoning-call collaborator: OpenAI-compatible chat completions.

Provider is picked from the environment: ``AI_PROVIDER`` if set, otherwise
the first of ``OPENAI_API_KEY`` / ``GROQ_API_KEY`` that is present.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from jobradar.config import get_env
from jobradar.errors import ConfigError, ScoringError
from jobradar.log import get_logger
from jobradar.retry import retry

log = get_logger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class ReasoningClient(Protocol):
    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool = True,
        temperature: float = 0.3,
    ) -> str:
        ...


@dataclass(frozen=True)
class ProviderSettings:
    name: str
    api_key: str
    model: str
    base_url: str | None = None


def detect_provider() -> ProviderSettings:
    forced = get_env("AI_PROVIDER").lower()
    openai_key = get_env("OPENAI_API_KEY")
    groq_key = get_env("GROQ_API_KEY")

    if forced == "openai" or (not forced and openai_key):
        if not openai_key:
            raise ConfigError("OPENAI_API_KEY environment variable is required")
        return ProviderSettings("openai", openai_key, get_env("OPENAI_MODEL", "gpt-4o-mini"))
    if forced == "groq" or (not forced and groq_key):
        if not groq_key:
            raise ConfigError("GROQ_API_KEY environment variable is required")
        return ProviderSettings(
            "groq",
            groq_key,
            get_env("GROQ_LLM_MODEL", "llama-3.3-70b-versatile"),
            base_url=GROQ_BASE_URL,
        )
    if forced:
        raise ConfigError(f"Unsupported AI provider: {forced}")
    raise ConfigError("No AI provider API key found. Set OPENAI_API_KEY or GROQ_API_KEY")


class OpenAIReasoningClient:
    def __init__(self, settings: ProviderSettings | None = None, max_tokens: int | None = None) -> None:
        self.settings = settings or detect_provider()
        self.max_tokens = max_tokens
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self.settings.api_key, base_url=self.settings.base_url)
        return self._client

    @retry(max_attempts=2, base_delay=2.0, retryable=(Exception,))
    def _create(self, **kwargs):
        return self._get_client().chat.completions.create(**kwargs)

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_mode: bool = True,
        temperature: float = 0.3,
    ) -> str:
        kwargs: dict = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if self.max_tokens:
            kwargs["max_tokens"] = self.max_tokens

        r = self._create(**kwargs)
        content = (r.choices[0].message.content or "").strip() if r.choices else ""
        if not content:
            raise ScoringError(f"No response from {self.settings.name}")
        log.debug("%s completion: %d chars", self.settings.name, len(content))
        return content
