"""Durable journey data: the single writer of the persisted blob."""

from __future__ import annotations

import asyncio
import logging

from smart_history.config import STORAGE_KEY
from smart_history.exceptions import JourneyStoreError, StorageError
from smart_history.journey.models import JourneyData
from smart_history.journey.storage import KeyValueStore

logger = logging.getLogger(__name__)


class JourneyStore:
    """Whole-blob reads and replacements of ``JourneyData``.

    Callers read, modify and ``put`` the entire structure; there are no
    partial-field updates. Failures propagate as ``JourneyStoreError`` and
    leave the previously stored blob unchanged.
    """

    def __init__(self, backend: KeyValueStore, key: str = STORAGE_KEY):
        self._backend = backend
        self.key = key

    async def get(self) -> JourneyData:
        """Return the stored journey, or an empty one if nothing is persisted yet."""
        try:
            raw = await asyncio.to_thread(self._backend.get, self.key)
        except StorageError as e:
            raise JourneyStoreError(f"Failed to read journey data: {e}") from e
        if raw is None:
            return JourneyData()
        if not isinstance(raw, dict):
            raise JourneyStoreError(f"Unexpected journey data type: {type(raw).__name__}")
        try:
            return JourneyData.from_dict(raw)
        except (AttributeError, TypeError, ValueError) as e:
            raise JourneyStoreError(f"Malformed journey data: {e}") from e

    async def put(self, data: JourneyData) -> None:
        try:
            await asyncio.to_thread(self._backend.set, self.key, data.to_dict())
        except StorageError as e:
            raise JourneyStoreError(f"Failed to write journey data: {e}") from e

    async def clear(self) -> None:
        try:
            await asyncio.to_thread(self._backend.remove, self.key)
        except StorageError as e:
            raise JourneyStoreError(f"Failed to clear journey data: {e}") from e
        logger.info("All stored journey data cleared")
