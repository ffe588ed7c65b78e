"""AI service providers."""

from src.providers.base import CompletionProvider, EmbeddingProvider
from src.providers.openai import (
    OpenAICompletionProvider,
    OpenAIEmbeddingProvider,
    create_client,
    create_completion_provider,
    create_embedding_provider,
)

__all__ = [
    "CompletionProvider",
    "EmbeddingProvider",
    "OpenAICompletionProvider",
    "OpenAIEmbeddingProvider",
    "create_client",
    "create_completion_provider",
    "create_embedding_provider",
]
