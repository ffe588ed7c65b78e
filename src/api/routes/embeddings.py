"""Embedding routes."""

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from src.api.dependencies import Embeddings

embeddings_log = logger.bind(module="Embeddings")

router = APIRouter(prefix="/embeddings", tags=["Embeddings"])


class EmbeddingRequest(BaseModel):
    """Request body for embedding a text."""

    text: str = Field(..., min_length=1, max_length=8000)

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Trim the text and reject blank input."""
        v = v.strip()
        if not v:
            raise ValueError("text must not be blank")
        return v


class EmbeddingResponse(BaseModel):
    """Embedding of the submitted text."""

    embedding: list[float]


@router.post("", response_model=EmbeddingResponse)
async def create_embedding(data: EmbeddingRequest, cache: Embeddings) -> EmbeddingResponse:
    """
    Embed a text through the shared cache.

    A zero vector is returned when the provider fails after its retries.
    """
    if not cache.available:
        raise HTTPException(status_code=503, detail="Embeddings are not configured")

    embedding = await cache.get_embedding(data.text)
    embeddings_log.debug(f"Embedded {len(data.text)} chars into {len(embedding)} dims")
    return EmbeddingResponse(embedding=embedding)
