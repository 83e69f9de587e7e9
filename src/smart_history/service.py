"""Process-wide journey service: wires the components and dispatches messages."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from smart_history.config import Settings
from smart_history.exceptions import JourneyStoreError, TransportError
from smart_history.extraction.models import ExtractedContent
from smart_history.journey.aggregator import JourneyAggregator
from smart_history.journey.grouping import day_key
from smart_history.journey.retention import RetentionScheduler
from smart_history.journey.storage import SQLiteKeyValueStore
from smart_history.journey.store import JourneyStore
from smart_history.llm.summarizer import AnthropicSummarizer
from smart_history.messages import (
    CLEAR_DATA,
    EXTRACT_PAGE_CONTENT,
    GET_DAILY_SUMMARY,
    PAGE_CONTENT_EXTRACTED,
    PING,
    TabInfo,
    Transport,
)

logger = logging.getLogger(__name__)

SUMMARY_ERROR_TEXT = "Unable to load daily summary"


class JourneyService:
    """Owns the store, aggregator and retention scheduler for one process."""

    def __init__(
        self,
        store: JourneyStore,
        aggregator: JourneyAggregator,
        scheduler: RetentionScheduler,
        transport: Transport | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.aggregator = aggregator
        self.scheduler = scheduler
        self.transport = transport
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, transport: Transport | None = None
    ) -> JourneyService:
        settings = settings or Settings()
        store = JourneyStore(SQLiteKeyValueStore(settings.db_path))
        summarizer = AnthropicSummarizer(
            api_key=settings.anthropic_api_key or None,
            model=settings.llm_model,
        )
        return cls(
            store=store,
            aggregator=JourneyAggregator(store, summarizer),
            scheduler=RetentionScheduler(
                store,
                reset_hour=settings.reset_hour,
                retention_days=settings.retention_days,
            ),
            transport=transport,
        )

    async def start(self, run_scheduler: bool = True) -> None:
        """Open the summarizer session, run the startup reset check, start the timer."""
        await self.aggregator.initialize()
        try:
            await self.scheduler.maybe_reset()
        except JourneyStoreError:
            logger.exception("Startup reset failed")
        if run_scheduler:
            self.scheduler.start()
        logger.info("Journey service started")

    def stop(self) -> None:
        self.scheduler.stop()

    async def handle_message(self, request: dict, sender: TabInfo | None = None) -> dict | None:
        action = request.get("action")
        if action == PAGE_CONTENT_EXTRACTED:
            await self._on_page_content(request.get("data") or {}, sender)
            return None
        if action == GET_DAILY_SUMMARY:
            try:
                summary = await self.aggregator.get_daily_summary()
            except JourneyStoreError as e:
                logger.error("Daily summary failed: %s", e)
                return {"error": SUMMARY_ERROR_TEXT}
            return {"summary": summary.to_dict()}
        if action == CLEAR_DATA:
            try:
                await self.store.clear()
            except JourneyStoreError as e:
                logger.error("Clearing data failed: %s", e)
                return {"success": False}
            return {"success": True}
        if action == PING:
            return {"status": "alive"}
        logger.debug("Ignoring unknown action %r", action)
        return None

    async def handle_page_visit(self, tab: TabInfo) -> bool:
        """Ask the tab's page agent for content. Returns whether a request went out."""
        if not tab.url.startswith("http"):
            return False
        if self.transport is None:
            logger.debug("No transport configured, not requesting %s", tab.url)
            return False

        data = await self.store.get()
        if data.has_page(day_key(self._clock()), tab.url):
            return False

        try:
            await self.transport.send_to_tab(tab.tab_id, {"action": EXTRACT_PAGE_CONTENT})
            return True
        except TransportError as e:
            logger.info("Page agent not ready in tab %s: %s", tab.tab_id, e)

        # A freshly injected agent extracts on its own after start-up.
        try:
            await self.transport.inject_agent(tab.tab_id)
            logger.info("Page agent injected into tab %s", tab.tab_id)
            return True
        except TransportError as e:
            logger.info("Failed to inject page agent into tab %s: %s", tab.tab_id, e)
            return False

    async def _on_page_content(self, data: dict, sender: TabInfo | None) -> None:
        extracted = ExtractedContent.from_dict(data)
        url = (sender.url if sender else "") or extracted.metadata.url
        title = (sender.title if sender else "") or extracted.title
        if not url:
            logger.warning("Extracted content without a URL, ignoring")
            return
        try:
            await self.aggregator.record_visit(url, title, extracted)
        except JourneyStoreError as e:
            logger.error("Failed to record %s: %s", url, e)
