"""Unified exception hierarchy for smart-history."""


class SmartHistoryError(Exception):
    """Base exception for all smart-history errors."""


# Extraction
class ExtractionError(SmartHistoryError):
    """A content extraction strategy failed while inspecting a page."""


class FetchError(SmartHistoryError):
    """Failed to fetch a live page."""


# Summarization
class SummarizationError(SmartHistoryError):
    """The summarization capability failed or is unavailable."""


# Storage
class StorageError(SmartHistoryError):
    """Base exception for persistence substrate operations."""


class JourneyStoreError(StorageError):
    """Failed to read, write or decode the persisted journey data."""


# Runtime
class TransportError(SmartHistoryError):
    """Failed to deliver a message to a page agent."""
