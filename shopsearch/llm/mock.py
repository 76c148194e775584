"""
Mock LLM Clients
For development and testing without actual LLM API calls
"""

import hashlib
import json
import math
import re
from typing import Any

from shopsearch.core.exceptions import EmptyInputError
from shopsearch.core.logging import get_logger
from shopsearch.llm.schemas import (
    ChatChoice,
    ChatCompletion,
    ChatMessage,
    FunctionCall,
    FunctionDefinition,
    Usage,
)

logger = get_logger(__name__)

_FIELD_PATTERN = r"^{label}:\s*(.+)$"


class MockChatClient:
    """
    Mock chat client returning canned responses based on the request shape

    - forced function call: echoes the query back as product_type
    - variant prompt: templated descriptions around product name/category
    - anything else: an empty JSON array
    """

    def __init__(self, model: str = "mock-chat"):
        self.model = model
        logger.info("mock_chat_initialized", model=model)

    async def chat(
        self,
        messages: list[ChatMessage],
        *,
        functions: list[FunctionDefinition] | None = None,
        function_call: dict[str, Any] | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> ChatCompletion:
        prompt = (messages[-1].content or "") if messages else ""
        logger.debug("mock_chat_called", prompt_length=len(prompt), temperature=temperature)

        if functions:
            query = prompt.split(":", 1)[-1].strip()
            message = ChatMessage(
                role="assistant",
                function_call=FunctionCall(
                    name=functions[0].name,
                    arguments=json.dumps({"product_type": query}, ensure_ascii=False),
                ),
            )
        else:
            message = ChatMessage(role="assistant", content=self._variants_for(prompt))

        return ChatCompletion(
            model=self.model,
            choices=[ChatChoice(index=0, message=message, finish_reason="stop")],
            usage=Usage(prompt_tokens=len(prompt) // 4, completion_tokens=20),
        )

    async def aclose(self) -> None:
        return None

    @staticmethod
    def _variants_for(prompt: str) -> str:
        name = _extract_field(prompt, "Product name")
        category = _extract_field(prompt, "Category")
        if not name:
            return "[]"
        variants = [
            name,
            f"{name} {category}",
            f"{category} {name}",
            f"best {category}: {name}",
            f"{name} for everyday use",
        ]
        return json.dumps(variants, ensure_ascii=False)


class MockEmbeddingClient:
    """
    Deterministic bag-of-tokens embeddings

    Texts sharing tokens get similar vectors, which is enough to exercise
    cosine search end to end.
    """

    def __init__(self, model: str = "mock-embedding", dimension: int = 64):
        self.model = model
        self.dimension = dimension
        logger.info("mock_embedding_initialized", model=model, dimension=dimension)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            raise EmptyInputError("no texts provided")
        return [self._vector(text) for text in texts]

    async def aclose(self) -> None:
        return None

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in text.lower().split() or [text]:
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            vector[int.from_bytes(digest[:4], "big") % self.dimension] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]


def _extract_field(prompt: str, label: str) -> str:
    match = re.search(_FIELD_PATTERN.format(label=re.escape(label)), prompt, re.MULTILINE)
    return match.group(1).strip() if match else ""
