"""
API Dependencies.

Builds the matching engine from the shared connections and providers.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException
from loguru import logger
from openai import AsyncOpenAI

from config.settings import get_settings
from src.connections.postgres import get_postgres
from src.connections.redis import get_redis
from src.matching import (
    CandidatePool,
    EmbeddingCache,
    LLMReranker,
    PreferenceParser,
    RankingPipeline,
)
from src.providers import (
    create_client,
    create_completion_provider,
    create_embedding_provider,
)

deps_log = logger.bind(module="Dependencies")


@lru_cache
def get_openai_client() -> AsyncOpenAI | None:
    """Get the shared OpenAI client (None if no API key)."""
    return create_client(get_settings().openai)


async def get_embedding_cache() -> EmbeddingCache:
    """Get an embedding cache over Redis and the configured provider."""
    settings = get_settings()
    matching = settings.matching
    try:
        store = await get_redis()
    except Exception as e:
        deps_log.warning(f"Embedding cache store unavailable: {e}")
        store = None
    return EmbeddingCache(
        provider=create_embedding_provider(get_openai_client(), settings.openai),
        store=store,
        dimensions=matching.embedding_dimensions,
        ttl=timedelta(days=matching.embedding_ttl_days),
        max_attempts=matching.embed_max_attempts,
        base_delay=matching.embed_base_delay,
    )


async def get_pipeline(
    embedding_cache: Annotated[EmbeddingCache, Depends(get_embedding_cache)],
) -> RankingPipeline:
    """Get a ranking pipeline for one request."""
    settings = get_settings()
    try:
        postgres = await get_postgres()
    except Exception as e:
        deps_log.error(f"Listing store unavailable: {e}")
        raise HTTPException(status_code=500, detail="Failed to find matches. Please try again.")

    completion = create_completion_provider(get_openai_client(), settings.openai)
    reranker = (
        LLMReranker(completion, max_candidates=settings.matching.max_rerank_candidates)
        if completion is not None
        else None
    )
    return RankingPipeline(
        candidates=CandidatePool(postgres.listings()),
        embedding_cache=embedding_cache,
        reranker=reranker,
        settings=settings.matching,
    )


def get_preference_parser() -> PreferenceParser | None:
    """Get a preference parser (None if no completion provider)."""
    completion = create_completion_provider(get_openai_client(), get_settings().openai)
    if completion is None:
        return None
    return PreferenceParser(completion)


# Type aliases for dependency injection
Pipeline = Annotated[RankingPipeline, Depends(get_pipeline)]
Preferences = Annotated[PreferenceParser | None, Depends(get_preference_parser)]
Embeddings = Annotated[EmbeddingCache, Depends(get_embedding_cache)]
