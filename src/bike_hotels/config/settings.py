"""Runtime configuration for the hotel finder.

Relies on pydantic-settings so that environment variables (prefixed with ``BIKE_HOTELS_``)
can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import quote

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Captures runtime configuration for the hotel finder."""

    base_url: str = Field(
        default="https://hotelfinder.onepeloton.com",
        description="Upstream hotel finder origin",
    )
    search_path: str = Field(default="/en/search", description="HTML search page used for the session handshake")
    data_path: str = Field(default="/en/hotel-map-data", description="JSON endpoint accepting bounding boxes")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User agent sent on every upstream call")
    request_timeout_s: float = Field(default=15.0, description="Per-request upstream timeout in seconds")

    cache_ttl_s: float = Field(default=3600.0, description="Revalidation window for cached hotel lists")
    cache_backend: Literal["memory", "sqlite"] = Field(default="memory")
    cache_sqlite_path: Path = Field(default=Path("data/cache/hotels.sqlite3"))
    cache_sqlite_journal_mode: Optional[Literal["delete", "truncate", "persist", "memory", "wal", "off"]] = Field(
        default="wal", description="SQLite journal_mode pragma; None leaves the database default"
    )
    cache_sqlite_synchronous: Optional[Literal["off", "normal", "full", "extra"]] = Field(default="normal")
    cache_sqlite_busy_timeout_ms: int = Field(default=2000, ge=0)

    match_strategy: Literal["token", "fuzzy"] = Field(
        default="token",
        description="Venue matcher: geo-filtered token coverage or rapidfuzz name scoring",
    )
    match_radius_m: float = Field(default=150.0, description="Candidates farther than this from the origin are ignored")
    match_threshold: float = Field(default=0.6, description="Minimum token coverage accepted as a match")
    fuzzy_threshold: float = Field(default=0.4, description="Minimum normalised fuzzy score accepted as a match")

    city_catalog_path: Optional[Path] = Field(
        default=None, description="Optional JSON file with configured city bounding boxes"
    )

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))

    model_config = SettingsConfigDict(
        env_prefix="BIKE_HOTELS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("base_url")
    def _strip_base_url(cls, value: str) -> str:  # noqa: D401
        return value.rstrip("/")

    @field_validator("cache_sqlite_path", "log_dir", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("city_catalog_path", mode="before")
    def _expand_catalog_path(cls, value: str | Path | None) -> Optional[Path]:
        if value in (None, ""):
            return None
        return Path(value).expanduser()

    @field_validator("cache_ttl_s", "request_timeout_s")
    def _validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts and TTLs must be positive")
        return value

    @field_validator("match_threshold", "fuzzy_threshold")
    def _validate_unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("match thresholds must be within [0, 1]")
        return value

    def upstream_search_url(self, term: str) -> str:
        return f"{self.base_url}{self.search_path}?q={quote(term, safe='')}"

    def upstream_data_url(self) -> str:
        return f"{self.base_url}{self.data_path}"

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        if self.cache_backend == "sqlite":
            logger.debug("Ensuring SQLite cache directory %s", self.cache_sqlite_path.parent)
            self.cache_sqlite_path.parent.mkdir(parents=True, exist_ok=True)
