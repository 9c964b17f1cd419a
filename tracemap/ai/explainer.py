"""
Natural-language explanations for TraceMap risk scores.

The explainer sends one prompt to an external text-generation provider,
keeps the usable lines of the reply, and falls back to canned text on any
failure. Callers never see a provider error.

Usage:
    explainer = Explainer.from_settings(settings)
    lines = await explainer.explain(prompt, fallback=EMAIL_FALLBACK_EXPLANATION, limit=6)

Tests inject their own ExplanationClient instead of LLMExplanationClient.
"""

from __future__ import annotations

import abc
import asyncio

import aiohttp

from tracemap.core.config import Settings
from tracemap.core.constants import EXPLANATION_MIN_LINE_LENGTH
from tracemap.core.exceptions import (
    ExplanationError,
    ExplanationTimeoutError,
    MissingAPIKeyError,
)
from tracemap.core.logging import get_logger

logger = get_logger(__name__)


def extract_explanation_lines(text: str, limit: int) -> list[str]:
    """Split provider output into lines longer than 20 characters, first `limit` only."""
    return [line for line in text.split("\n") if len(line) > EXPLANATION_MIN_LINE_LENGTH][:limit]


class ExplanationClient(abc.ABC):
    """Given a prompt string, returns free text or raises."""

    provider: str = "unknown"

    @abc.abstractmethod
    async def generate(self, prompt: str) -> str:
        ...


class LLMExplanationClient(ExplanationClient):
    """
    Routes a prompt to the configured text-generation provider.

    Providers (settings.ai_provider):
        gemini     — Google Generative Language REST API (default)
        openai     — OpenAI chat completions
        openrouter — OpenRouter's OpenAI-compatible API
        anthropic  — Claude messages API
        ollama     — local Ollama server
    """

    def __init__(self, config: Settings) -> None:
        self._settings = config
        self.provider = config.ai_provider

    async def generate(self, prompt: str) -> str:
        if self.provider == "gemini":
            return await self._call_gemini(prompt)
        elif self.provider == "openai":
            return await self._call_openai(prompt)
        elif self.provider == "openrouter":
            return await self._call_openrouter(prompt)
        elif self.provider == "anthropic":
            return await self._call_anthropic(prompt)
        elif self.provider == "ollama":
            return await self._call_ollama(prompt)
        else:
            raise ValueError(f"Unsupported AI provider: {self.provider}")

    def _secret(self, key_name: str, env_var: str) -> str:
        if not self._settings.has_api_key(key_name):
            raise MissingAPIKeyError(self.provider, env_var)
        return getattr(self._settings, key_name).get_secret_value()

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self._settings.explanation_timeout_seconds)

    async def _call_gemini(self, prompt: str) -> str:
        """Call Gemini generateContent over REST."""
        api_key = self._secret("google_api_key", "GOOGLE_API_KEY")
        base = self._settings.gemini_base_url.rstrip("/")
        url = f"{base}/models/{self._settings.ai_model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": self._settings.ai_max_tokens},
        }

        async with aiohttp.ClientSession(timeout=self._timeout()) as session:
            async with session.post(url, params={"key": api_key}, json=payload) as r:
                if r.status != 200:
                    raise ExplanationError("gemini", f"HTTP {r.status}")
                data = await r.json()

        candidates = data.get("candidates") or []
        if not candidates:
            raise ExplanationError("gemini", "No candidates in response")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text:
            raise ExplanationError("gemini", "Empty response text")
        return text

    async def _call_openai(self, prompt: str) -> str:
        """Call OpenAI chat completions."""
        from openai import AsyncOpenAI

        async with AsyncOpenAI(
            api_key=self._secret("openai_api_key", "OPENAI_API_KEY"),
            timeout=self._settings.explanation_timeout_seconds,
            max_retries=0,
        ) as client:
            response = await client.chat.completions.create(
                model=self._settings.ai_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._settings.ai_max_tokens,
            )
        return response.choices[0].message.content or ""

    async def _call_openrouter(self, prompt: str) -> str:
        """Call OpenRouter using its OpenAI-compatible chat completions API."""
        from openai import AsyncOpenAI

        async with AsyncOpenAI(
            api_key=self._secret("openrouter_api_key", "OPENROUTER_API_KEY"),
            base_url=self._settings.openrouter_base_url.rstrip("/"),
            default_headers={"X-Title": "TraceMap"},
            timeout=self._settings.explanation_timeout_seconds,
            max_retries=0,
        ) as client:
            response = await client.chat.completions.create(
                model=self._settings.ai_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._settings.ai_max_tokens,
            )
        return response.choices[0].message.content or ""

    async def _call_anthropic(self, prompt: str) -> str:
        """Call Anthropic Claude API."""
        from anthropic import AsyncAnthropic

        async with AsyncAnthropic(
            api_key=self._secret("anthropic_api_key", "ANTHROPIC_API_KEY"),
            timeout=self._settings.explanation_timeout_seconds,
            max_retries=0,
        ) as client:
            response = await client.messages.create(
                model=self._settings.ai_model,
                max_tokens=self._settings.ai_max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        content = response.content[0]
        return content.text if hasattr(content, "text") else str(content)

    async def _call_ollama(self, prompt: str) -> str:
        """Call local Ollama server."""
        endpoint = self._settings.ollama_endpoint.rstrip("/")
        payload = {
            "model": self._settings.ollama_model,
            "prompt": prompt,
            "stream": False,
        }

        async with aiohttp.ClientSession(timeout=self._timeout()) as session:
            async with session.post(f"{endpoint}/api/generate", json=payload) as r:
                r.raise_for_status()
                data = await r.json()
                return data.get("response", "")


class Explainer:
    """
    Turns a prompt into explanation bullets, never raising.

    Exactly one provider call per explain(), bounded by `timeout` seconds.
    Timeouts, provider errors, malformed replies and replies with no usable
    lines all produce a copy of `fallback`.
    """

    def __init__(
        self,
        client: ExplanationClient | None,
        timeout: float = 8.0,
        enabled: bool = True,
    ) -> None:
        self.client = client
        self.timeout = timeout
        self.enabled = enabled and client is not None

    @classmethod
    def from_settings(cls, config: Settings) -> Explainer:
        return cls(
            LLMExplanationClient(config),
            timeout=config.explanation_timeout_seconds,
            enabled=config.enable_ai_explanations,
        )

    @property
    def provider(self) -> str:
        return getattr(self.client, "provider", "none")

    async def explain(self, prompt: str, fallback: list[str], limit: int) -> list[str]:
        if not self.enabled:
            return list(fallback)

        try:
            text = await self._generate(prompt)
            if not isinstance(text, str):
                raise ExplanationError(self.provider, f"Expected text, got {type(text).__name__}")
            lines = extract_explanation_lines(text, limit)
        except Exception as exc:
            logger.warning("explanation_failed", provider=self.provider, error=str(exc))
            return list(fallback)

        if not lines:
            logger.warning("explanation_empty", provider=self.provider)
            return list(fallback)

        logger.debug("explanation_generated", provider=self.provider, lines=len(lines))
        return lines

    async def _generate(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(self.client.generate(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ExplanationTimeoutError(self.provider, self.timeout) from exc
