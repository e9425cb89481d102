"""Application configuration via environment variables."""

import logging
from functools import lru_cache
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings

from bsky_feed.services.query import build_effective_queries


class ConfigError(RuntimeError):
    """Raised when the environment does not describe a runnable feed job."""


class Settings(BaseSettings):
    """Raw settings loaded from environment variables and .env file."""

    bsky_app_handle: str | None = None  # e.g. yourname.bsky.social
    bsky_app_password: str | None = None
    bsky_service: str = ""
    bsky_search_query: str | None = None
    bsky_search_lang: str | None = None
    bsky_mute_words: str | None = None

    feed_path: str = "data/feed.json"
    search_limit: int = 100
    retry_count: int = 3
    retry_base_delay_ms: int = 500
    http_timeout_seconds: float = 10.0
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    DEFAULT_SERVICE: ClassVar[str] = "https://bsky.social"
    MAX_SEARCH_LIMIT: ClassVar[int] = 100

    @property
    def service_url(self) -> str:
        """Service endpoint, falling back to the canonical host when unset or blank."""
        return self.bsky_service.strip() or self.DEFAULT_SERVICE

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize to an upper-case level name known to the logging module."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v!r}")
        return level


class FeedConfig(BaseModel):
    """Resolved, validated configuration for a single feed run."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    password: str
    service: str
    queries: dict[str, str]
    language: str | None = None
    feed_path: str = "data/feed.json"
    search_limit: int = 100
    retry_count: int = 3
    retry_base_delay_ms: int = 500
    http_timeout_seconds: float = 10.0

    @property
    def effective_queries(self) -> list[str]:
        """Effective queries that will actually be issued."""
        return [q for q in self.queries.values() if q]


def parse_language(raw: str | None) -> str | None:
    """Return the single configured language code, or None.

    Raises ConfigError if more than one comma-separated code is given.
    """
    if not raw:
        return None
    if "," in raw:
        raise ConfigError("BSKY_SEARCH_LANG supports only a single language code")
    lang = raw.strip()
    return lang or None


def parse_mute_words(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [word.strip() for word in raw.split(",") if word.strip()]


def split_query_parts(raw_query: str) -> list[str]:
    """Split a comma-separated query string into independent query parts."""
    parts = [part.strip() for part in raw_query.split(",") if part.strip()]
    if parts:
        return parts
    fallback = raw_query.strip()
    return [fallback] if fallback else []


def resolve_config(settings: Settings) -> FeedConfig:
    """Validate raw settings and build the immutable run configuration."""
    language = parse_language(settings.bsky_search_lang)
    mute_words = parse_mute_words(settings.bsky_mute_words)

    if not settings.bsky_search_query:
        raise ConfigError("BSKY_SEARCH_QUERY is required")

    parts = split_query_parts(settings.bsky_search_query)
    if not parts:
        raise ConfigError("BSKY_SEARCH_QUERY must include at least one term")

    if not settings.bsky_app_handle or not settings.bsky_app_password:
        raise ConfigError(
            "BSKY_APP_HANDLE and BSKY_APP_PASSWORD are required "
            "(e.g., handle=yourname.bsky.social)"
        )

    return FeedConfig(
        identifier=settings.bsky_app_handle,
        password=settings.bsky_app_password,
        service=settings.service_url,
        queries=build_effective_queries(parts, mute_words),
        language=language,
        feed_path=settings.feed_path,
        search_limit=max(1, min(settings.search_limit, Settings.MAX_SEARCH_LIMIT)),
        retry_count=max(0, settings.retry_count),
        retry_base_delay_ms=max(0, settings.retry_base_delay_ms),
        http_timeout_seconds=settings.http_timeout_seconds,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
