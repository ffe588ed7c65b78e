"""
OpenAI Providers.

Embedding and chat completion providers backed by the OpenAI API.
"""

from loguru import logger
from openai import AsyncOpenAI

from config.settings import OpenAISettings
from src.providers.base import CompletionProvider, EmbeddingProvider

openai_log = logger.bind(module="OpenAI")


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeddings via the OpenAI embeddings endpoint."""

    def __init__(self, client: AsyncOpenAI, model: str = "text-embedding-ada-002"):
        """
        Initialize provider.

        Args:
            client: Shared AsyncOpenAI client
            model: Embedding model name
        """
        self._client = client
        self.model = model

    async def embed(self, text: str) -> list[float]:
        """Compute an embedding for text."""
        response = await self._client.embeddings.create(model=self.model, input=text)
        return list(response.data[0].embedding)


class OpenAICompletionProvider(CompletionProvider):
    """Chat completions via the OpenAI chat endpoint."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ):
        """
        Initialize provider.

        Args:
            client: Shared AsyncOpenAI client
            model: Chat model name
            temperature: Sampling temperature
            max_tokens: Completion length limit
        """
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Get a chat completion."""
        openai_log.debug(f"Sending completion request to {self.model} ({len(user_prompt)} chars)")
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""


def create_client(settings: OpenAISettings) -> AsyncOpenAI | None:
    """
    Create an AsyncOpenAI client, or None when no API key is configured.

    A missing key disables the AI stages instead of failing startup.
    """
    if not settings.api_key:
        openai_log.warning("OPENAI_API_KEY not set; AI ranking and embeddings disabled")
        return None
    return AsyncOpenAI(api_key=settings.api_key, timeout=settings.timeout)


def create_embedding_provider(
    client: AsyncOpenAI | None, settings: OpenAISettings
) -> OpenAIEmbeddingProvider | None:
    """Build the embedding provider if a client is available."""
    if client is None:
        return None
    return OpenAIEmbeddingProvider(client, model=settings.embedding_model)


def create_completion_provider(
    client: AsyncOpenAI | None, settings: OpenAISettings
) -> OpenAICompletionProvider | None:
    """Build the completion provider if a client is available."""
    if client is None:
        return None
    return OpenAICompletionProvider(
        client,
        model=settings.chat_model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
