"""Heuristic main-content extraction over a page snapshot.

Strategies are tried in order and the first one that yields text wins:

1. Selector scan over semantic and common CMS/video/feed containers.
2. Video page summary (title, channel, description, content type).
3. Loose aggregation of long paragraphs and headings.
4. Whole body with navigation, ads and widgets stripped.
5. Title and meta descriptions only.
"""

from __future__ import annotations

import copy
import logging
import re
from datetime import datetime, timezone
from typing import Callable

from bs4 import Tag

from smart_history.config import MAX_CONTENT_LENGTH
from smart_history.exceptions import ExtractionError
from smart_history.extraction.document import PageDocument
from smart_history.extraction.models import ExtractedContent, PageMetadata

logger = logging.getLogger(__name__)

PLACEHOLDER_CONTENT = "Page content not available"

MIN_BLOCK_LENGTH = 50
MIN_AGGREGATE_LENGTH = 100
MIN_LINE_LENGTH = 20
MAX_VIDEO_DESCRIPTION = 200

MAIN_CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".content",
    ".main-content",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".story-content",
    ".news-content",
    ".blog-content",
    "#content",
    "#main",
    "#article",
    ".video-content",
    ".watch-content",
    ".player-container",
    ".ytd-watch-flexy",
    ".ytd-rich-grid-renderer",
    ".feed",
    ".timeline",
    ".stream",
]

TEXT_CONTAINER_TAGS = ["p", "div", "section", "h1", "h2", "h3", "h4", "h5", "h6"]

VIDEO_PLAYER_SELECTOR = "video, .video-player, .ytd-player, .html5-video-player"
VIDEO_TITLE_SELECTOR = "h1, .title, .ytd-video-primary-info-renderer h1"
VIDEO_CHANNEL_SELECTOR = ".ytd-channel-name a, .ytd-video-owner-renderer a, .uploader"
VIDEO_DESCRIPTION_SELECTOR = "#description, .ytd-video-secondary-info-renderer, .video-description"

# (path fragment, label); first match wins.
VIDEO_CONTENT_TYPES = [
    ("/watch", "Video"),
    ("/channel", "Channel"),
    ("/results", "Search Results"),
    ("/search", "Search Results"),
    ("/playlist", "Playlist"),
]

UNWANTED_SELECTORS = [
    "nav", "header", "footer", "aside",
    ".nav", ".navbar", ".header", ".footer", ".sidebar",
    ".ad", ".advertisement", ".ads", ".banner",
    ".menu", ".navigation", ".social",
    "script", "style", "noscript", "iframe",
]

_WHITESPACE_RE = re.compile(r"\s+")
_NEWLINES_RE = re.compile(r"\n+")


def clean_text(text: str, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """Normalize whitespace, drop short (navigation-like) lines and truncate."""
    text = _WHITESPACE_RE.sub(" ", text or "")
    text = _NEWLINES_RE.sub("\n", text).strip()
    lines = [line.strip() for line in text.split("\n")]
    kept = [line for line in lines if len(line) > MIN_LINE_LENGTH]
    return "\n".join(kept)[:max_length]


def _element_text(element: Tag | None) -> str:
    if element is None:
        return ""
    return element.get_text()


def _from_selectors(document: PageDocument) -> str | None:
    for selector in MAIN_CONTENT_SELECTORS:
        element = document.soup.select_one(selector)
        if element is None:
            continue
        content = clean_text(_element_text(element))
        if len(content) > MIN_BLOCK_LENGTH:
            logger.debug("Extracted content via selector %s", selector)
            return content
    return None


def _from_video(document: PageDocument) -> str | None:
    soup = document.soup
    if not soup.select(VIDEO_PLAYER_SELECTOR):
        return None

    parts: list[str] = []
    title = _element_text(soup.select_one(VIDEO_TITLE_SELECTOR)).strip()
    if title:
        parts.append(f"Video Title: {title}")
    channel = _element_text(soup.select_one(VIDEO_CHANNEL_SELECTOR)).strip()
    if channel:
        parts.append(f"Channel: {channel}")
    description = _element_text(soup.select_one(VIDEO_DESCRIPTION_SELECTOR)).strip()
    if description:
        parts.append(f"Description: {description[:MAX_VIDEO_DESCRIPTION]}...")

    path = document.path
    for fragment, label in VIDEO_CONTENT_TYPES:
        if fragment in path:
            parts.append(f"Content Type: {label}")
            break

    if not parts:
        return None
    return "\n\n".join(parts)


def _from_text_blocks(document: PageDocument) -> str | None:
    chunks: list[str] = []
    for tag in TEXT_CONTAINER_TAGS:
        for element in document.soup.find_all(tag):
            text = element.get_text().strip()
            if len(text) > MIN_BLOCK_LENGTH:
                chunks.append(text + "\n\n")
    aggregate = "".join(chunks)
    if len(aggregate) > MIN_AGGREGATE_LENGTH:
        return aggregate[:MAX_CONTENT_LENGTH]
    return None


def _from_body(document: PageDocument) -> str | None:
    body = document.soup.body
    if body is None:
        return None
    # Work on a copy; the live snapshot must stay untouched.
    clone = copy.copy(body)
    for selector in UNWANTED_SELECTORS:
        for element in clone.select(selector):
            element.decompose()
    content = clean_text(clone.get_text())
    if len(content) > MIN_BLOCK_LENGTH:
        return content
    return None


def _from_metadata(document: PageDocument) -> str:
    title = document.title
    description = document.meta_content("description")
    og_description = document.meta_content("og:description", "property")
    parts = [
        f"Title: {title}" if title else "",
        f"Description: {description}" if description else "",
        f"OpenGraph: {og_description}" if og_description else "",
    ]
    return "\n\n".join(p for p in parts if p) or PLACEHOLDER_CONTENT


STRATEGIES: list[tuple[str, Callable[[PageDocument], str | None]]] = [
    ("selectors", _from_selectors),
    ("video", _from_video),
    ("text_blocks", _from_text_blocks),
    ("body", _from_body),
]


def run_strategy(
    name: str, strategy: Callable[[PageDocument], str | None], document: PageDocument
) -> str | None:
    """Run one strategy, wrapping any failure in ``ExtractionError``."""
    try:
        return strategy(document)
    except Exception as e:
        raise ExtractionError(f"Extraction strategy {name} failed: {e}") from e


class ContentExtractor:
    """Produce an ``ExtractedContent`` record from a page snapshot.

    ``extract`` never raises: a failing strategy is skipped, and a failure
    outside the strategy chain degrades to a title/description-only record.
    """

    def extract(self, document: PageDocument, now: datetime | None = None) -> ExtractedContent:
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        try:
            return ExtractedContent(
                title=document.title,
                content=self.extract_main_content(document),
                metadata=self.extract_metadata(document),
                timestamp=timestamp,
            )
        except Exception as e:
            logger.warning("Extraction failed for %s, using minimal record: %s", document.url, e)
            return self._minimal_record(document, timestamp)

    def extract_main_content(self, document: PageDocument) -> str:
        """First non-empty strategy result, capped at ``MAX_CONTENT_LENGTH``."""
        for name, strategy in STRATEGIES:
            try:
                content = run_strategy(name, strategy, document)
            except ExtractionError as e:
                logger.debug("%s", e)
                continue
            if content:
                return content[:MAX_CONTENT_LENGTH]
        return _from_metadata(document)[:MAX_CONTENT_LENGTH]

    @staticmethod
    def extract_metadata(document: PageDocument) -> PageMetadata:
        return PageMetadata(
            description=document.meta_content("description"),
            keywords=document.meta_content("keywords"),
            author=document.meta_content("author"),
            og_title=document.meta_content("og:title", "property"),
            og_description=document.meta_content("og:description", "property"),
            url=document.url,
            domain=document.hostname,
        )

    @staticmethod
    def _minimal_record(document: PageDocument, timestamp: str) -> ExtractedContent:
        title = ""
        description = ""
        try:
            title = document.title
            description = document.meta_content("description")
        except Exception as e:
            logger.debug("Could not read title/description: %s", e)
        parts = [f"Title: {title}" if title else "", f"Description: {description}" if description else ""]
        content = "\n\n".join(p for p in parts if p) or PLACEHOLDER_CONTENT
        return ExtractedContent(
            title=title,
            content=content[:MAX_CONTENT_LENGTH],
            metadata=PageMetadata(description=description, url=document.url),
            timestamp=timestamp,
        )
