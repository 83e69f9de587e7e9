"""Data models for the journey module.

``PageRecord`` and ``JourneyData`` are persisted; their ``to_dict`` output is
the stored JSON layout. ``DomainGroup``, ``PageView`` and ``DailySummary`` are
derived on every summary request and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field

NO_SUMMARY_TEXT = "No summary available"
NO_PAGES_TEXT = "No pages visited today."


@dataclass
class PageRecord:
    """One recorded visit; ``url`` is unique within a day."""

    url: str
    title: str
    timestamp: str
    content_length: int = 0
    ai_summary: str | None = None
    fallback_summary: str | None = None

    @property
    def summary(self) -> str:
        return self.ai_summary or self.fallback_summary or NO_SUMMARY_TEXT

    def to_dict(self) -> dict:
        data = {
            "url": self.url,
            "title": self.title,
            "timestamp": self.timestamp,
            "contentLength": self.content_length,
        }
        if self.ai_summary is not None:
            data["aiSummary"] = self.ai_summary
        if self.fallback_summary is not None:
            data["fallbackSummary"] = self.fallback_summary
        return data

    @classmethod
    def from_dict(cls, raw: dict) -> PageRecord:
        return cls(
            url=raw.get("url") or "",
            title=raw.get("title") or "",
            timestamp=raw.get("timestamp") or "",
            content_length=int(raw.get("contentLength") or 0),
            ai_summary=raw.get("aiSummary"),
            fallback_summary=raw.get("fallbackSummary"),
        )


DayBucket = dict[str, PageRecord]


def _buckets_to_dict(buckets: dict[str, DayBucket]) -> dict:
    return {
        day: {url: record.to_dict() for url, record in bucket.items()}
        for day, bucket in buckets.items()
    }


def _buckets_from_dict(raw: dict | None) -> dict[str, DayBucket]:
    return {
        day: {url: PageRecord.from_dict(record) for url, record in (bucket or {}).items()}
        for day, bucket in (raw or {}).items()
    }


@dataclass
class JourneyData:
    """Live day buckets plus the bounded archive of past days."""

    visited_pages: dict[str, DayBucket] = field(default_factory=dict)
    archived_days: dict[str, DayBucket] = field(default_factory=dict)

    def bucket(self, day_key: str) -> DayBucket:
        """Return the bucket for ``day_key``, or an empty one (not inserted)."""
        return self.visited_pages.get(day_key, {})

    def has_page(self, day_key: str, url: str) -> bool:
        return url in self.visited_pages.get(day_key, {})

    def add_page(self, day_key: str, record: PageRecord) -> None:
        self.visited_pages.setdefault(day_key, {})[record.url] = record

    def to_dict(self) -> dict:
        return {
            "visitedPages": _buckets_to_dict(self.visited_pages),
            "archivedDays": _buckets_to_dict(self.archived_days),
        }

    @classmethod
    def from_dict(cls, raw: dict | None) -> JourneyData:
        raw = raw or {}
        return cls(
            visited_pages=_buckets_from_dict(raw.get("visitedPages")),
            archived_days=_buckets_from_dict(raw.get("archivedDays")),
        )


@dataclass
class DomainGroup:
    """Pages of one domain: the latest root-level visit plus deeper pages."""

    domain: str
    main_page: PageRecord | None = None
    sub_pages: list[PageRecord] = field(default_factory=list)


@dataclass
class PageView:
    """A page as shown in the daily summary."""

    record: PageRecord
    is_main_page: bool = False
    sub_pages_count: int = 0
    is_sub_page: bool = False
    parent_domain: str | None = None
    path: str | None = None

    @property
    def timestamp(self) -> str:
        return self.record.timestamp

    @property
    def summary(self) -> str:
        return self.record.summary

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["summary"] = self.summary
        if self.is_main_page:
            data["isMainPage"] = True
            data["subPagesCount"] = self.sub_pages_count
        if self.is_sub_page:
            data["isSubPage"] = True
            data["parentDomain"] = self.parent_domain
            data["path"] = self.path
        return data


@dataclass
class DailySummary:
    date: str
    total_pages: int
    summary: str
    pages: list[PageView] = field(default_factory=list)

    @classmethod
    def empty(cls, date: str) -> DailySummary:
        return cls(date=date, total_pages=0, summary=NO_PAGES_TEXT, pages=[])

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "totalPages": self.total_pages,
            "summary": self.summary,
            "pages": [page.to_dict() for page in self.pages],
        }
