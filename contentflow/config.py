"""Application configuration using pydantic-settings."""

import json
from ast import literal_eval
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ContentFlow AI"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3006

    # API
    api_prefix: str = "/api"
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:3006",
    ]

    # Research provider (Perplexity chat completions)
    research_provider: Literal["perplexity", "template"] = "perplexity"
    perplexity_api_key: str | None = None
    perplexity_base_url: str = "https://api.perplexity.ai"
    perplexity_model: str = "sonar"
    perplexity_timeout_seconds: float = 60.0

    # LLM article writer (pydantic-ai model string, e.g. "anthropic:claude-sonnet-4-5")
    generation_model: str | None = None
    llm_max_retries: int = 2

    # Generation defaults
    default_word_count: int = 1500
    default_tone: Literal["professional", "casual", "authoritative", "friendly"] = "professional"

    # Pipeline timing; 0 disables stage delays
    pipeline_delay_scale: float = 1.0

    # Progress store
    progress_store_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    progress_ttl_seconds: int = 86400  # 24 hours
    progress_sweep_interval_seconds: int = 300

    @property
    def perplexity_enabled(self) -> bool:
        """Whether live Perplexity research is configured."""
        return self.research_provider == "perplexity" and bool(self.perplexity_api_key)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        """Accept JSON list/string or comma-separated values for CORS_ORIGINS."""
        def normalize(origin: object) -> str:
            return str(origin).strip().strip("'\"")

        if isinstance(value, list):
            return [normalize(origin) for origin in value if normalize(origin)]
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            try:
                parsed = literal_eval(raw)
            except (ValueError, SyntaxError):
                parsed = [normalize(origin) for origin in raw.split(",")]
                return [origin for origin in parsed if origin]

        if isinstance(parsed, str):
            parsed = [parsed]
        if isinstance(parsed, tuple | set):
            parsed = list(parsed)
        if not isinstance(parsed, list):
            raise ValueError(
                "CORS_ORIGINS must be a JSON array, JSON string, or comma-separated string.",
            )
        return [normalize(origin) for origin in parsed if normalize(origin)]

    @field_validator("api_prefix", mode="before")
    @classmethod
    def _normalize_api_prefix(cls, value: object) -> object:
        """Normalize route prefix values to `/segment` form."""
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        if not normalized or normalized == "/":
            return ""
        return f"/{normalized.strip('/')}"

    @field_validator("pipeline_delay_scale")
    @classmethod
    def _non_negative_delay_scale(cls, value: float) -> float:
        if value < 0:
            raise ValueError("PIPELINE_DELAY_SCALE must be >= 0")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    return settings


settings = get_settings()
