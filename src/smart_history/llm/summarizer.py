"""Summarization capability: an optional text -> summary function backed by Claude."""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from enum import Enum

from smart_history.exceptions import SummarizationError

logger = logging.getLogger(__name__)


DEFAULT_MODEL = os.environ.get("SMART_HISTORY_LLM_MODEL", "claude-haiku-4-5-20251001")


class Availability(str, Enum):
    UNAVAILABLE = "unavailable"
    AVAILABLE = "available"
    DOWNLOADABLE = "downloadable"

    @property
    def usable(self) -> bool:
        return self is not Availability.UNAVAILABLE


class SummarizerSession(ABC):
    """A conversation primed with a system prompt."""

    @abstractmethod
    async def summarize(self, prompt: str) -> str:
        """Return the model's answer to ``prompt``; raises ``SummarizationError``."""
        ...


class Summarizer(ABC):
    """Abstract interface for the summarization capability."""

    @abstractmethod
    async def availability(self) -> Availability:
        ...

    @abstractmethod
    async def create_session(self, system_prompt: str) -> SummarizerSession:
        ...


class AnthropicSession(SummarizerSession):
    """Session over the async Anthropic SDK with retry on rate limits and timeouts."""

    def __init__(
        self,
        client,
        system_prompt: str,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ):
        self._client = client
        self.system_prompt = system_prompt
        self.model = model
        self.max_retries = max_retries
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def summarize(self, prompt: str) -> str:
        from anthropic import APIError, APITimeoutError, RateLimitError

        for attempt in range(self.max_retries):
            try:
                response = await self._client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    system=self.system_prompt,
                    messages=[{"role": "user", "content": prompt}],
                )
                text = "".join(
                    block.text for block in response.content if getattr(block, "type", "text") == "text"
                )
                return text.strip()
            except RateLimitError:
                wait = 2 ** (attempt + 1)
                logger.warning(f"Rate limited, retrying in {wait}s (attempt {attempt + 1})")
                await asyncio.sleep(wait)
            except APITimeoutError:
                wait = 2 ** attempt
                logger.warning(f"API timeout, retrying in {wait}s (attempt {attempt + 1})")
                await asyncio.sleep(wait)
            except APIError as e:
                raise SummarizationError(f"Claude API error: {e}") from e

        raise SummarizationError(f"Failed after {self.max_retries} retries")


class AnthropicSummarizer(Summarizer):
    """Claude-backed summarizer.

    Reports ``UNAVAILABLE`` instead of raising when no API key is configured
    or the ``anthropic`` package is not installed.

    Args:
        api_key: Anthropic API key; falls back to ``ANTHROPIC_API_KEY``.
        model: Model used for every session.
        max_retries: Attempts per prompt on rate limits and timeouts.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
    ):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self.model = model
        self.max_retries = max_retries
        self._client = None

    @property
    def client(self):
        """The underlying AsyncAnthropic client, created on first use."""
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError:
                raise ImportError(
                    "anthropic is required for AnthropicSummarizer. "
                    "Install with: pip install smart-history[llm]"
                )
            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def availability(self) -> Availability:
        if not self.api_key:
            return Availability.UNAVAILABLE
        try:
            import anthropic  # noqa: F401
        except ImportError:
            return Availability.UNAVAILABLE
        return Availability.AVAILABLE

    async def create_session(self, system_prompt: str) -> SummarizerSession:
        if not self.api_key:
            raise SummarizationError(
                "Anthropic API key is required. "
                "Pass it directly or set ANTHROPIC_API_KEY in your environment."
            )
        return AnthropicSession(
            self.client,
            system_prompt=system_prompt,
            model=self.model,
            max_retries=self.max_retries,
        )
