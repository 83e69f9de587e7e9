"""Data models for the extraction module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PageMetadata:
    """Meta tags and location of an extracted page."""

    description: str = ""
    keywords: str = ""
    author: str = ""
    og_title: str = ""
    og_description: str = ""
    url: str = ""
    domain: str = ""

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "keywords": self.keywords,
            "author": self.author,
            "ogTitle": self.og_title,
            "ogDescription": self.og_description,
            "url": self.url,
            "domain": self.domain,
        }

    @classmethod
    def from_dict(cls, raw: dict | None) -> PageMetadata:
        raw = raw or {}
        return cls(
            description=raw.get("description") or "",
            keywords=raw.get("keywords") or "",
            author=raw.get("author") or "",
            og_title=raw.get("ogTitle") or "",
            og_description=raw.get("ogDescription") or "",
            url=raw.get("url") or "",
            domain=raw.get("domain") or "",
        )


@dataclass(frozen=True)
class ExtractedContent:
    """Best-effort textual representation of one page, produced per extraction."""

    title: str
    content: str
    timestamp: str
    metadata: PageMetadata = field(default_factory=PageMetadata)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "content": self.content,
            "metadata": self.metadata.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> ExtractedContent:
        return cls(
            title=raw.get("title") or "",
            content=raw.get("content") or "",
            timestamp=raw.get("timestamp") or "",
            metadata=PageMetadata.from_dict(raw.get("metadata")),
        )
