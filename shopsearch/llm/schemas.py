"""
LLM wire DTOs

Request/response shapes of the OpenAI-compatible chat completion and
embedding endpoints.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class FunctionCall(_WireModel):
    name: str = ""
    arguments: str = ""


class ChatMessage(_WireModel):
    role: Literal["system", "user", "assistant", "function"]
    content: str | None = None
    function_call: FunctionCall | None = None


class FunctionDefinition(_WireModel):
    """Function-calling schema sent with a chat request."""

    name: str = Field(min_length=1, alias="function_name")
    description: str = ""
    parameters: dict[str, Any]

    model_config = ConfigDict(populate_by_name=True)


class Usage(_WireModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatChoice(_WireModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class ChatCompletion(_WireModel):
    id: str | None = None
    model: str | None = None
    choices: list[ChatChoice] = Field(default_factory=list)
    usage: Usage | None = None


class EmbeddingData(_WireModel):
    index: int
    embedding: list[float]


class EmbeddingResponse(_WireModel):
    model: str | None = None
    data: list[EmbeddingData]
    usage: Usage | None = None
