"""
Application settings module.

Manages all configuration via environment variables using pydantic-settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PG_", extra="ignore")

    host: str = "localhost"
    port: int = 5432
    user: str = "admin"
    password: str = "1234"
    database: str = "roommate_match_dev"
    pool_max: int = 10


class RedisSettings(BaseSettings):
    """Redis connection settings (embedding cache)."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="REDIS_", extra="ignore")

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str = ""


class OpenAISettings(BaseSettings):
    """OpenAI provider settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="OPENAI_", extra="ignore")

    api_key: str = ""
    embedding_model: str = "text-embedding-ada-002"
    chat_model: str = "gpt-4o-mini"
    temperature: float = 0.3
    max_tokens: int = 1000
    timeout: float = 30.0


class MatchingSettings(BaseSettings):
    """Matching engine tuning."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MATCHING_", extra="ignore")

    min_structured_score: float = 0.1
    # What to do when the AI ranking pass fails
    fallback_strategy: Literal["structured", "embedding"] = "structured"

    # Embeddings
    embedding_dimensions: int = 1536
    embedding_ttl_days: int = 7
    embed_max_attempts: int = 3
    embed_base_delay: float = 0.5  # seconds, doubled per attempt
    max_concurrent_embeddings: int = 8

    # LLM reranking
    max_rerank_candidates: int = 40

    # Blend weights
    semantic_weight: float = 0.8
    keyword_weight: float = 0.2
    structured_weight: float = 0.1


class BackfillSettings(BaseSettings):
    """Embedding backfill job settings."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BACKFILL_", extra="ignore")

    enabled: bool = False
    interval_minutes: int = 60
    batch_size: int = 50


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    cors_origins: str = "*"

    postgres: PostgresSettings = PostgresSettings()
    redis: RedisSettings = RedisSettings()
    openai: OpenAISettings = OpenAISettings()
    matching: MatchingSettings = MatchingSettings()
    backfill: BackfillSettings = BackfillSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
