"""Page content extraction."""

from smart_history.extraction.agent import PageAgent
from smart_history.extraction.document import PageDocument
from smart_history.extraction.extractor import ContentExtractor, clean_text
from smart_history.extraction.fetcher import PageFetcher
from smart_history.extraction.models import ExtractedContent, PageMetadata

__all__ = [
    "PageAgent",
    "PageDocument",
    "ContentExtractor",
    "clean_text",
    "PageFetcher",
    "ExtractedContent",
    "PageMetadata",
]
