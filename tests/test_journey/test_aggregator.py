"""Tests for the journey aggregator."""

import asyncio
from datetime import datetime

import pytest

from smart_history.exceptions import SummarizationError
from smart_history.extraction.models import ExtractedContent
from smart_history.journey.aggregator import JourneyAggregator
from smart_history.journey.models import JourneyData, PageRecord
from smart_history.journey.storage import MemoryKeyValueStore
from smart_history.journey.store import JourneyStore
from smart_history.llm.summarizer import Availability, Summarizer, SummarizerSession

NOW = datetime(2024, 1, 5, 12, 0)
TODAY = "2024-01-05"
CONTENT = (
    "The article explains how tide pools form along rocky coasts. "
    "It covers the animals that live in them and how they survive low tide."
)


class FakeSession(SummarizerSession):
    def __init__(self, reply="AI summary", error=None, gate=None):
        self.reply = reply
        self.error = error
        self.gate = gate
        self.prompts = []

    async def summarize(self, prompt):
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply


class FakeSummarizer(Summarizer):
    def __init__(self, session=None, availability=Availability.AVAILABLE):
        self.session = session or FakeSession()
        self._availability = availability
        self.system_prompts = []

    async def availability(self):
        return self._availability

    async def create_session(self, system_prompt):
        self.system_prompts.append(system_prompt)
        return self.session


def _content(text: str = CONTENT) -> ExtractedContent:
    return ExtractedContent(title="Tide pools", content=text, timestamp="2024-01-05T12:00:00Z")


@pytest.fixture
def store():
    return JourneyStore(MemoryKeyValueStore())


def _aggregator(store, summarizer=None) -> JourneyAggregator:
    aggregator = JourneyAggregator(store, summarizer, clock=lambda: NOW)
    asyncio.run(aggregator.initialize())
    return aggregator


def test_initialize_without_summarizer(store):
    aggregator = JourneyAggregator(store)
    assert asyncio.run(aggregator.initialize()) is False
    assert not aggregator.has_session


@pytest.mark.parametrize("availability,expected", [
    (Availability.AVAILABLE, True),
    (Availability.DOWNLOADABLE, True),
    (Availability.UNAVAILABLE, False),
])
def test_initialize_by_availability(store, availability, expected):
    summarizer = FakeSummarizer(availability=availability)
    aggregator = JourneyAggregator(store, summarizer)
    assert asyncio.run(aggregator.initialize()) is expected
    assert aggregator.has_session is expected


def test_initialize_session_failure(store):
    class Broken(FakeSummarizer):
        async def create_session(self, system_prompt):
            raise SummarizationError("no model")

    aggregator = JourneyAggregator(store, Broken())
    assert asyncio.run(aggregator.initialize()) is False


def test_record_without_summarizer_uses_fallback(store):
    aggregator = _aggregator(store)
    record = asyncio.run(aggregator.record_visit("https://example.com/tides", "Tide pools", _content()))

    assert record.ai_summary is None
    assert record.fallback_summary == (
        "The article explains how tide pools form along rocky coasts. "
        "It covers the animals that live in them and how they survive low tide"
    )
    assert record.content_length == len(CONTENT)
    stored = asyncio.run(store.get()).visited_pages[TODAY]["https://example.com/tides"]
    assert stored == record


def test_record_with_summarizer(store):
    session = FakeSession(reply="Tide pools, explained.")
    aggregator = _aggregator(store, FakeSummarizer(session))
    record = asyncio.run(aggregator.record_visit("https://example.com/tides", "Tide pools", _content()))

    assert record.ai_summary == "Tide pools, explained."
    assert record.fallback_summary is None
    assert CONTENT in session.prompts[0]


def test_summarizer_input_is_truncated(store):
    session = FakeSession()
    aggregator = _aggregator(store, FakeSummarizer(session))
    asyncio.run(aggregator.record_visit("https://example.com/", "x", _content("x" * 9000)))
    assert "x" * 8000 in session.prompts[0]
    assert "x" * 8001 not in session.prompts[0]


def test_summarizer_failure_falls_back(store):
    session = FakeSession(error=SummarizationError("quota"))
    aggregator = _aggregator(store, FakeSummarizer(session))
    record = asyncio.run(aggregator.record_visit("https://example.com/tides", "Tide pools", _content()))

    assert record.ai_summary is None
    assert record.fallback_summary
    assert asyncio.run(store.get()).has_page(TODAY, "https://example.com/tides")


def test_empty_content_has_no_summary(store):
    session = FakeSession()
    aggregator = _aggregator(store, FakeSummarizer(session))
    record = asyncio.run(aggregator.record_visit("https://example.com/", "Empty", _content("")))

    assert record.ai_summary is None
    assert record.fallback_summary is None
    assert record.content_length == 0
    assert session.prompts == []


def test_same_url_same_day_is_noop(store):
    aggregator = _aggregator(store)
    url = "https://example.com/tides"
    first = asyncio.run(aggregator.record_visit(url, "First title", _content()))
    second = asyncio.run(aggregator.record_visit(url, "Second title", _content("Different content entirely here.")))

    assert second is None
    bucket = asyncio.run(store.get()).visited_pages[TODAY]
    assert list(bucket) == [url]
    assert bucket[url] == first


def test_concurrent_visit_is_dropped(store):
    async def main():
        gate = asyncio.Event()
        aggregator = JourneyAggregator(
            store, FakeSummarizer(FakeSession(gate=gate)), clock=lambda: NOW
        )
        await aggregator.initialize()

        first = asyncio.create_task(
            aggregator.record_visit("https://a.com/", "A", _content())
        )
        while not aggregator.is_processing:
            await asyncio.sleep(0)
        while not aggregator._session.prompts:
            await asyncio.sleep(0.001)

        dropped = await aggregator.record_visit("https://b.com/", "B", _content())
        gate.set()
        return await first, dropped, aggregator.is_processing

    first, dropped, processing = asyncio.run(main())
    assert first is not None
    assert dropped is None
    assert processing is False
    assert list(asyncio.run(store.get()).visited_pages[TODAY]) == ["https://a.com/"]


def test_empty_daily_summary(store):
    summary = asyncio.run(_aggregator(store).get_daily_summary())
    assert summary.to_dict() == {
        "date": TODAY,
        "totalPages": 0,
        "summary": "No pages visited today.",
        "pages": [],
    }


def _seed(store, urls_and_times, day=TODAY):
    data = JourneyData()
    for url, timestamp in urls_and_times:
        data.add_page(day, PageRecord(url=url, title=url, timestamp=timestamp, fallback_summary=f"About {url}"))
    asyncio.run(store.put(data))


def test_daily_summary_fallback_overview(store):
    _seed(store, [
        ("https://news.example.com/", "2024-01-05T08:00:00+00:00"),
        ("https://shop.example.com/", "2024-01-05T09:00:00+00:00"),
        ("https://random.example.com/", "2024-01-05T10:00:00+00:00"),
    ])
    summary = asyncio.run(_aggregator(store).get_daily_summary())
    assert summary.total_pages == 3
    assert summary.summary == "Today you visited 3 pages. 1 news pages, 1 shopping pages, 1 general pages."


def test_daily_summary_ignores_other_days(store):
    _seed(store, [("https://news.example.com/", "2024-01-04T08:00:00+00:00")], day="2024-01-04")
    summary = asyncio.run(_aggregator(store).get_daily_summary())
    assert summary.total_pages == 0


def test_daily_summary_pages_newest_first(store):
    _seed(store, [
        ("https://a.com/", "2024-01-05T08:00:00+00:00"),
        ("https://b.com/x/y", "2024-01-05T10:00:00+00:00"),
        ("https://a.com/docs/page", "2024-01-05T09:00:00+00:00"),
    ])
    summary = asyncio.run(_aggregator(store).get_daily_summary())
    assert [page.record.url for page in summary.pages] == [
        "https://b.com/x/y",
        "https://a.com/docs/page",
        "https://a.com/",
    ]
    assert summary.pages[2].sub_pages_count == 1
    assert summary.to_dict()["pages"][2]["summary"] == "About https://a.com/"


def test_daily_summary_ai_overview(store):
    _seed(store, [("https://a.com/", "2024-01-05T08:00:00+00:00")])
    session = FakeSession(reply="  A quiet day of reading.  ")
    summary = asyncio.run(_aggregator(store, FakeSummarizer(session)).get_daily_summary())
    assert summary.summary == "A quiet day of reading."
    assert "About https://a.com/" in session.prompts[0]


def test_daily_summary_ai_overview_failure(store):
    _seed(store, [("https://github.com/", "2024-01-05T08:00:00+00:00")])
    session = FakeSession(error=RuntimeError("model crashed"))
    summary = asyncio.run(_aggregator(store, FakeSummarizer(session)).get_daily_summary())
    assert summary.summary == "Today you visited 1 pages. 1 work pages."
