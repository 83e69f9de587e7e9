"""Turns extracted pages into stored visit records and daily summaries."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from smart_history.config import MAX_SUMMARY_INPUT_LENGTH
from smart_history.exceptions import SummarizationError
from smart_history.extraction.models import ExtractedContent
from smart_history.journey.grouping import (
    day_key,
    fallback_daily_overview,
    fallback_page_summary,
    flatten_groups,
    group_pages_by_domain,
)
from smart_history.journey.models import DailySummary, PageRecord
from smart_history.journey.store import JourneyStore
from smart_history.llm.summarizer import Summarizer, SummarizerSession

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful web content summarizer. Create concise 2-3 sentence summaries "
    "that capture the main points of web pages. Focus on key information and insights."
)

PAGE_SUMMARY_PROMPT = """Create a concise, factual summary of ONLY this specific web page content. Focus on:

- Main topics and key information presented on this page only
- Type of content (article, video, product page, etc.)
- Specific sections or features mentioned on this page
- Key facts, data, or insights from this page only

IMPORTANT: Only summarize the content provided below. Do not include information from other pages or domains.

Page URL: {url}

Content to summarize:
{content}

Summary:"""

DAILY_OVERVIEW_PROMPT = """Based on these {page_count} web page summaries from today, create a factual daily overview. Focus on:

- Main domains visited and key activities
- Types of content explored (news, videos, shopping, etc.)
- Key topics or themes across the browsing session
- Any notable patterns or insights

Keep it factual and concise (3-4 sentences maximum). Avoid narrative style like "you started your day".

{summaries}

Daily Overview:"""


class JourneyAggregator:
    """Records page visits into today's bucket and builds the daily summary.

    One instance is created per process. At most one ``record_visit`` runs at
    a time; a call that arrives while another is in flight is dropped.

    Args:
        store: Journey persistence.
        summarizer: Optional summarization capability.
        clock: Returns the current local time.
    """

    def __init__(
        self,
        store: JourneyStore,
        summarizer: Summarizer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._summarizer = summarizer
        self._clock = clock
        self._session: SummarizerSession | None = None
        self._is_processing = False

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def has_session(self) -> bool:
        return self._session is not None

    async def initialize(self) -> bool:
        """Open a summarizer session if the capability is usable. Returns success."""
        if self._summarizer is None:
            return False
        try:
            availability = await self._summarizer.availability()
            logger.info("Summarizer availability: %s", availability.value)
            if not availability.usable:
                return False
            self._session = await self._summarizer.create_session(SYSTEM_PROMPT)
        except (SummarizationError, ImportError) as e:
            logger.warning("Summarizer not available: %s", e)
            self._session = None
            return False
        return True

    async def record_visit(
        self, url: str, title: str, extracted: ExtractedContent
    ) -> PageRecord | None:
        """Store a visit to ``url`` unless it is already recorded today.

        Returns the new record, or ``None`` if the visit was a same-day repeat
        or was dropped because another aggregation was in flight.
        """
        if self._is_processing:
            logger.debug("Aggregation in flight, dropping visit to %s", url)
            return None

        self._is_processing = True
        try:
            now = self._clock()
            today = day_key(now)
            data = await self._store.get()
            if data.has_page(today, url):
                logger.debug("Already recorded %s today", url)
                return None

            content = extracted.content or ""
            record = PageRecord(
                url=url,
                title=title,
                timestamp=now.astimezone(timezone.utc).isoformat(),
                content_length=len(content),
            )
            if content:
                await self._summarize_into(record, content)

            # Re-read: the summarizer call is a suspension point.
            data = await self._store.get()
            data.add_page(today, record)
            await self._store.put(data)
            logger.info("Recorded page: %s", title or url)
            return record
        finally:
            self._is_processing = False

    async def get_daily_summary(self) -> DailySummary:
        today = day_key(self._clock())
        data = await self._store.get()
        pages = list(data.bucket(today).values())
        if not pages:
            return DailySummary.empty(today)

        groups = group_pages_by_domain(pages)
        return DailySummary(
            date=today,
            total_pages=len(pages),
            summary=await self._daily_overview(pages),
            pages=flatten_groups(groups),
        )

    async def _summarize_into(self, record: PageRecord, content: str) -> None:
        if self._session is not None:
            prompt = PAGE_SUMMARY_PROMPT.format(
                url=record.url, content=content[:MAX_SUMMARY_INPUT_LENGTH]
            )
            try:
                record.ai_summary = await self._session.summarize(prompt)
                return
            except Exception as e:
                logger.warning("AI summary failed for %s, using fallback: %s", record.url, e)
        record.fallback_summary = fallback_page_summary(content)

    async def _daily_overview(self, pages: list[PageRecord]) -> str:
        if self._session is None:
            return fallback_daily_overview(pages)
        summaries = "\n\n".join(page.ai_summary or page.fallback_summary or "" for page in pages)
        prompt = DAILY_OVERVIEW_PROMPT.format(page_count=len(pages), summaries=summaries)
        try:
            return (await self._session.summarize(prompt)).strip()
        except Exception as e:
            logger.warning("AI daily overview failed: %s", e)
            return fallback_daily_overview(pages)
