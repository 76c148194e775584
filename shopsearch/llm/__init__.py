"""
LLM Client Abstraction
Chat/function-calling and embedding clients, prompt templates, embedding cache
"""

from shopsearch.llm.protocol import ChatClientProtocol, EmbeddingClientProtocol
from shopsearch.llm.factory import get_chat_client, get_embedding_client

__all__ = [
    "ChatClientProtocol",
    "EmbeddingClientProtocol",
    "get_chat_client",
    "get_embedding_client",
]
