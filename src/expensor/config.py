"""
Configuration for the expense tracker.
Settings are read from EXPENSOR_* environment variables and an optional
.env file; builders wire the storage, store and seed loader from them.
"""

import logging
from datetime import tzinfo
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .seed import BundledReceiptLoader, DEFAULT_CANDIDATES
from .storage import KeyValueStorage
from .store import DEFAULT_STORAGE_KEY, ReceiptStore

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    db_path: str = Field(
        default="receipts.db",
        description="SQLite file holding the key-value slots"
    )
    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        description="Slot holding the encoded receipt collection"
    )
    resource_dir: str = Field(
        default=".",
        description="Directory searched for bundled seed documents"
    )
    seed_candidates: str = Field(
        default=",".join(DEFAULT_CANDIDATES),
        description="Comma-separated seed document paths, tried in order"
    )
    timezone: Optional[str] = Field(
        default=None,
        description="IANA zone used for calendar-day comparisons (local zone when unset)"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file next to console output"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        try:
            ZoneInfo(v.strip())
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v.strip()

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def seed_candidates_list(self) -> List[str]:
        return [c.strip() for c in self.seed_candidates.split(",") if c.strip()]

    @property
    def tz(self) -> Optional[tzinfo]:
        return ZoneInfo(self.timezone) if self.timezone else None


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached).

    Call get_settings.cache_clear() to reload.
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Install console (and optional file) logging."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=settings.log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def build_store(settings: Settings) -> ReceiptStore:
    """Initialize storage and load the receipt store."""
    storage = KeyValueStorage(settings.db_path)
    storage.initialize()
    return ReceiptStore(storage, key=settings.storage_key)


def build_seed_loader(settings: Settings) -> BundledReceiptLoader:
    return BundledReceiptLoader(settings.seed_candidates_list, resource_dir=settings.resource_dir)
