"""Application configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseModel):
    api_key: str | None = None
    enabled: bool = True
    base_url: str | None = None
    page_size: int | None = Field(default=None, ge=1, le=100)

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None


class ProvidersSettings(BaseModel):
    newsapi: ProviderSettings = ProviderSettings()
    guardian: ProviderSettings = ProviderSettings()
    nytimes: ProviderSettings = ProviderSettings()
    bbc_news: ProviderSettings = ProviderSettings()
    opennews: ProviderSettings = ProviderSettings()

    def api_key_for(self, name: str) -> str | None:
        provider: ProviderSettings = getattr(self, name)
        if provider.api_key:
            return provider.api_key
        # bbc-news and opennews are served by newsapi.org
        if name in {"bbc_news", "opennews"}:
            return self.newsapi.api_key
        return None


class AggregationSettings(BaseModel):
    request_timeout_seconds: float = Field(30.0, ge=1.0, le=300.0)
    max_concurrent_fetches: int = Field(0, ge=0, le=32)
    run_timeout_seconds: float | None = Field(default=None, gt=0)
    slug_max_attempts: int = Field(3, ge=1, le=10)
    poll_interval_seconds: int = Field(3600, ge=60)
    shutdown_grace_seconds: float = Field(30.0, gt=0)
    user_agent: str = "news-aggregator/1.0"


class HealthSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        env_prefix="",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database_url: str = Field(..., validation_alias="DATABASE_URL")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    sentry_dsn: str | None = Field(default=None, validation_alias="SENTRY_DSN")

    providers: ProvidersSettings = ProvidersSettings()
    aggregation: AggregationSettings = AggregationSettings()
    health: HealthSettings = HealthSettings()

    def public_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        if data.get("sentry_dsn"):
            data["sentry_dsn"] = "***"
        for provider in (data.get("providers") or {}).values():
            if isinstance(provider, dict) and provider.get("api_key"):
                provider["api_key"] = "***"
        return data
