"""
Base Provider Module.

Defines the interfaces for the external AI services the matching engine
calls out to.
"""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """
    Base class for text embedding providers.

    Implementations must be idempotent for identical input text and signal
    failure by raising. Retries and degraded results are handled by the
    embedding cache, not here.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Compute an embedding vector for text.

        Args:
            text: Input text

        Returns:
            Embedding vector
        """
        pass


class CompletionProvider(ABC):
    """
    Base class for LLM chat completion providers.

    Output is unstructured text; callers must parse it defensively.
    """

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Get a completion for a system and user prompt.

        Args:
            system_prompt: Instructions for the model's role
            user_prompt: The task

        Returns:
            Raw model output text
        """
        pass
