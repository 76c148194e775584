"""
LLM Client Factory
Creates chat/embedding clients based on configuration
"""

from shopsearch.core.config import settings
from shopsearch.core.logging import get_logger
from shopsearch.llm.mock import MockChatClient, MockEmbeddingClient
from shopsearch.llm.openai import OpenAIChatClient, OpenAIEmbeddingClient
from shopsearch.llm.protocol import ChatClientProtocol, EmbeddingClientProtocol

logger = get_logger(__name__)


def get_chat_client() -> ChatClientProtocol:
    """
    Get chat client implementation based on configuration

    Raises:
        ValueError: If llm_provider is not supported
    """
    provider = settings.llm_provider

    logger.info("chat_client_factory", provider=provider, model=settings.chat_model)

    if provider == "mock":
        return MockChatClient(model=settings.chat_model)

    if provider == "openai":
        if not settings.openai_api_key:
            logger.warning("openai_api_key_missing")
        return OpenAIChatClient(model=settings.chat_model)

    raise ValueError(
        f"Unsupported llm_provider: {provider}. Supported providers: openai, mock"
    )


def get_embedding_client() -> EmbeddingClientProtocol:
    """
    Get embedding client implementation based on configuration

    Raises:
        ValueError: If llm_provider is not supported
    """
    provider = settings.llm_provider

    logger.info("embedding_client_factory", provider=provider, model=settings.embedding_model)

    if provider == "mock":
        return MockEmbeddingClient(
            model=settings.embedding_model, dimension=settings.vectorstore_dimension
        )

    if provider == "openai":
        return OpenAIEmbeddingClient(model=settings.embedding_model)

    raise ValueError(
        f"Unsupported llm_provider: {provider}. Supported providers: openai, mock"
    )
