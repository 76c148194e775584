"""
LLM Client Protocols (Interfaces)
Contracts for chat/function-calling and embedding backends
"""

from typing import Any, Protocol

from shopsearch.llm.schemas import ChatCompletion, ChatMessage, FunctionDefinition


class ChatClientProtocol(Protocol):
    """
    Protocol for chat completion backends
    """

    model: str

    async def chat(
        self,
        messages: list[ChatMessage],
        *,
        functions: list[FunctionDefinition] | None = None,
        function_call: dict[str, Any] | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> ChatCompletion:
        """
        Run one chat completion

        Args:
            messages: Conversation messages
            functions: Optional function-calling schemas
            function_call: Optional forced function, e.g. {"name": "parse_product_query"}
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Decoded completion

        Raises:
            UpstreamError: If the call fails or returns a non-success status
            DecodeError: If the response body is malformed
        """
        ...

    async def aclose(self) -> None:
        ...


class EmbeddingClientProtocol(Protocol):
    """
    Protocol for embedding backends
    """

    model: str

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts, one vector per input in input order

        Raises:
            EmptyInputError: If texts is empty
            UpstreamError: If the call fails or the body is malformed
        """
        ...

    async def aclose(self) -> None:
        ...
