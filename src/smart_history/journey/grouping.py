"""Domain grouping, categorization and non-AI summaries for a day of pages."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from urllib.parse import urlparse

import dateutil.parser as parser

from smart_history.journey.models import DomainGroup, PageRecord, PageView

# Ordered; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("news", ("news", "blog")),
    ("social", ("social", "twitter", "facebook")),
    ("shopping", ("shop", "amazon", "ebay")),
    ("work", ("work", "linkedin", "github")),
]
DEFAULT_CATEGORY = "general"

FALLBACK_SENTENCES = 3
MIN_SENTENCE_LENGTH = 20

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def day_key(moment: datetime) -> str:
    """Bucket key for the calendar day of ``moment`` (``YYYY-MM-DD``)."""
    return moment.date().isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC, garbage sorts first."""
    try:
        parsed = parser.isoparse(value)
    except (TypeError, ValueError, OverflowError):
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _normalize_domain(hostname: str) -> str:
    domain = (hostname or "").strip().lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def split_url(url: str) -> tuple[str, str] | None:
    """Return ``(domain, path)``, or ``None`` when ``url`` has no usable host."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return _normalize_domain(hostname), parsed.path


def is_main_path(path: str) -> bool:
    """Root paths and single-segment paths identify a domain's main page."""
    segments = [segment for segment in path.split("/") if segment]
    return len(segments) <= 1


def group_pages_by_domain(pages: list[PageRecord]) -> dict[str, DomainGroup]:
    groups: dict[str, DomainGroup] = {}
    for page in pages:
        parts = split_url(page.url)
        if parts is None:
            # Unparseable URLs become their own group with no sub-pages.
            groups.setdefault(page.url, DomainGroup(domain=page.url, main_page=page))
            continue

        domain, path = parts
        group = groups.setdefault(domain, DomainGroup(domain=domain))
        if is_main_path(path):
            current = group.main_page
            if current is None or parse_timestamp(page.timestamp) >= parse_timestamp(current.timestamp):
                group.main_page = page
        else:
            group.sub_pages.append(page)
    return groups


def flatten_groups(groups: dict[str, DomainGroup]) -> list[PageView]:
    """Main page then sub-pages per domain, then everything newest first."""
    views: list[PageView] = []
    for group in groups.values():
        if group.main_page is not None:
            views.append(
                PageView(
                    record=group.main_page,
                    is_main_page=True,
                    sub_pages_count=len(group.sub_pages),
                )
            )
        for page in group.sub_pages:
            parts = split_url(page.url)
            views.append(
                PageView(
                    record=page,
                    is_sub_page=True,
                    parent_domain=group.domain,
                    path=parts[1] if parts else "",
                )
            )
    views.sort(key=lambda view: parse_timestamp(view.timestamp), reverse=True)
    return views


def categorize(url: str) -> str:
    parts = split_url(url)
    host = parts[0] if parts else url.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in host for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def categorize_pages(pages: list[PageRecord]) -> dict[str, int]:
    """Category counts in first-seen order."""
    counts: dict[str, int] = {}
    for page in pages:
        category = categorize(page.url)
        counts[category] = counts.get(category, 0) + 1
    return counts


def fallback_daily_overview(pages: list[PageRecord]) -> str:
    counts = categorize_pages(pages)
    category_text = ", ".join(f"{count} {category} pages" for category, count in counts.items())
    return f"Today you visited {len(pages)} pages. {category_text}."


def fallback_page_summary(content: str) -> str:
    """First few sentence-like segments of ``content``, with an ellipsis if more remain."""
    sentences = [
        segment.strip()
        for segment in _SENTENCE_SPLIT_RE.split(content or "")
        if len(segment.strip()) > MIN_SENTENCE_LENGTH
    ]
    summary = ". ".join(sentences[:FALLBACK_SENTENCES])
    if len(sentences) > FALLBACK_SENTENCES:
        summary += "..."
    return summary
