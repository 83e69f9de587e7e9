"""Message actions and transport interface between page agents and the service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

PAGE_CONTENT_EXTRACTED = "pageContentExtracted"
EXTRACT_PAGE_CONTENT = "extractPageContent"
GET_DAILY_SUMMARY = "getDailySummary"
CLEAR_DATA = "clearData"
PING = "ping"


@dataclass(frozen=True)
class TabInfo:
    """The browser tab a message came from or a visit happened in."""

    tab_id: int
    url: str = ""
    title: str = ""


class Transport(ABC):
    """Delivery of service-to-page messages."""

    @abstractmethod
    async def send_to_tab(self, tab_id: int, message: dict) -> dict | None:
        """Deliver ``message`` to the page agent in ``tab_id``.

        Raises ``TransportError`` when no agent is listening.
        """
        ...

    @abstractmethod
    async def inject_agent(self, tab_id: int) -> None:
        """Install a page agent into ``tab_id``; raises ``TransportError`` on failure."""
        ...
