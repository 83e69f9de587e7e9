"""Summarization capability (Anthropic Claude)."""

from smart_history.llm.summarizer import (
    DEFAULT_MODEL,
    AnthropicSession,
    AnthropicSummarizer,
    Availability,
    Summarizer,
    SummarizerSession,
)

__all__ = [
    "DEFAULT_MODEL",
    "AnthropicSession",
    "AnthropicSummarizer",
    "Availability",
    "Summarizer",
    "SummarizerSession",
]
