"""Page-side agent: extracts the page and pushes the result to the service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from smart_history.config import INITIAL_EXTRACTION_DELAY, MUTATION_QUIET_PERIOD
from smart_history.exceptions import TransportError
from smart_history.extraction.document import PageDocument
from smart_history.extraction.extractor import ContentExtractor
from smart_history.extraction.models import ExtractedContent
from smart_history.messages import EXTRACT_PAGE_CONTENT, PAGE_CONTENT_EXTRACTED

logger = logging.getLogger(__name__)


class PageAgent:
    """Runs extraction inside one page and sends results upstream.

    Args:
        snapshot: Returns the current state of the page.
        send: Delivers a message to the service; may raise ``TransportError``.
        extractor: Content extractor, a fresh ``ContentExtractor`` by default.
        initial_delay: Seconds between ``start()`` and the first extraction.
        quiet_period: Seconds without mutations before re-extracting.
        ready_timeout: Give up waiting for the page after this many seconds.
            ``None`` waits indefinitely.

    Must be driven from a running event loop.
    """

    def __init__(
        self,
        snapshot: Callable[[], PageDocument],
        send: Callable[[dict], Awaitable[Any]],
        extractor: ContentExtractor | None = None,
        initial_delay: float = INITIAL_EXTRACTION_DELAY,
        quiet_period: float = MUTATION_QUIET_PERIOD,
        ready_timeout: float | None = None,
    ):
        self._snapshot = snapshot
        self._send = send
        self._extractor = extractor or ContentExtractor()
        self.initial_delay = initial_delay
        self.quiet_period = quiet_period
        self.ready_timeout = ready_timeout
        self._ready = asyncio.Event()
        self._pending: asyncio.TimerHandle | None = None
        self._current: asyncio.Task | None = None

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    def mark_ready(self) -> None:
        """Signal that the page finished loading."""
        self._ready.set()

    def start(self) -> None:
        self._arm(self.initial_delay)

    def stop(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._current is not None:
            self._current.cancel()
            self._current = None

    def on_mutation(self) -> None:
        """Debounce: each mutation pushes the next extraction back by ``quiet_period``."""
        self._arm(self.quiet_period)

    async def handle_message(self, message: dict) -> dict | None:
        if message.get("action") == EXTRACT_PAGE_CONTENT:
            self._spawn()
            return {"success": True}
        return None

    async def extract_and_send(self) -> ExtractedContent | None:
        """Extract the page once it is ready and push it to the service.

        Returns the extracted record, or ``None`` if the page never became ready.
        """
        if not await self._wait_until_ready():
            logger.info("Page not ready after %ss, skipping extraction", self.ready_timeout)
            return None

        extracted = self._extractor.extract(self._snapshot())
        try:
            await self._send({"action": PAGE_CONTENT_EXTRACTED, "data": extracted.to_dict()})
        except TransportError as e:
            logger.info("Service unreachable, content not sent: %s", e)
        return extracted

    async def _wait_until_ready(self) -> bool:
        if self._ready.is_set():
            return True
        if self.ready_timeout is None:
            await self._ready.wait()
            return True
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=self.ready_timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def _arm(self, delay: float) -> None:
        if self._pending is not None:
            self._pending.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        self._pending = None
        self._spawn()

    def _spawn(self) -> asyncio.Task:
        # One extraction at a time; later requests join the running one.
        if self.in_flight:
            return self._current
        self._current = asyncio.get_running_loop().create_task(self._run())
        return self._current

    async def _run(self) -> None:
        try:
            await self.extract_and_send()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Error extracting page content")
