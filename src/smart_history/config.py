"""Settings loaded from environment variables.

Usage:
    from smart_history.config import Settings
    settings = Settings()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DB_PATH = Path.home() / ".smart_history" / "journey.db"

# Storage key for the single persisted journey blob.
STORAGE_KEY = "webJourneyData"

MAX_CONTENT_LENGTH = 15_000
MAX_SUMMARY_INPUT_LENGTH = 8_000

# Page agent timing, in seconds.
INITIAL_EXTRACTION_DELAY = 2.0
MUTATION_QUIET_PERIOD = 3.0


@dataclass
class Settings:
    """Runtime configuration.

    Values are read from the environment at instantiation time so that tests
    can override them with ``monkeypatch.setenv``.
    """

    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )
    llm_model: str = field(
        default_factory=lambda: os.environ.get(
            "SMART_HISTORY_LLM_MODEL", "claude-haiku-4-5-20251001"
        )
    )
    db_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SMART_HISTORY_DB_PATH", str(DEFAULT_DB_PATH))
        )
    )
    reset_hour: int = field(
        default_factory=lambda: int(os.environ.get("SMART_HISTORY_RESET_HOUR", "6"))
    )
    retention_days: int = field(
        default_factory=lambda: int(os.environ.get("SMART_HISTORY_RETENTION_DAYS", "7"))
    )

    def __post_init__(self) -> None:
        if not 0 <= self.reset_hour <= 23:
            raise ValueError(f"reset_hour must be between 0 and 23, got {self.reset_hour}")
        if self.retention_days < 1:
            raise ValueError(f"retention_days must be at least 1, got {self.retention_days}")
