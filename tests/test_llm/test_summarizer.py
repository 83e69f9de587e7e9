"""Tests for the summarization capability."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from smart_history.exceptions import SummarizationError
from smart_history.llm.summarizer import AnthropicSession, AnthropicSummarizer, Availability


def _client(**create_kwargs):
    client = MagicMock()
    client.messages.create = AsyncMock(**create_kwargs)
    return client


def test_unavailable_without_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    summarizer = AnthropicSummarizer()
    assert asyncio.run(summarizer.availability()) is Availability.UNAVAILABLE


def test_available_with_api_key(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key-123")
    summarizer = AnthropicSummarizer()
    assert asyncio.run(summarizer.availability()) is Availability.AVAILABLE


def test_create_session_requires_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(SummarizationError, match="API key is required"):
        asyncio.run(AnthropicSummarizer().create_session("system"))


def test_create_session(monkeypatch):
    summarizer = AnthropicSummarizer(api_key="test-key", model="claude-test")
    session = asyncio.run(summarizer.create_session("Be brief."))
    assert isinstance(session, AnthropicSession)
    assert session.system_prompt == "Be brief."
    assert session.model == "claude-test"


def test_availability_usable():
    assert Availability.AVAILABLE.usable
    assert Availability.DOWNLOADABLE.usable
    assert not Availability.UNAVAILABLE.usable


def test_session_summarize():
    response = SimpleNamespace(content=[SimpleNamespace(type="text", text="  A short summary.  ")])
    client = _client(return_value=response)
    session = AnthropicSession(client, system_prompt="Be brief.", model="claude-test")

    assert asyncio.run(session.summarize("Summarize this")) == "A short summary."
    kwargs = client.messages.create.await_args.kwargs
    assert kwargs["system"] == "Be brief."
    assert kwargs["model"] == "claude-test"
    assert kwargs["messages"] == [{"role": "user", "content": "Summarize this"}]


def test_session_api_error():
    from anthropic import APIError

    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    client = _client(side_effect=APIError("boom", request, body=None))
    session = AnthropicSession(client, system_prompt="s")

    with pytest.raises(SummarizationError, match="Claude API error"):
        asyncio.run(session.summarize("x"))
