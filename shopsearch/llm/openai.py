"""
OpenAI-compatible LLM Clients

Chat completion (with function calling) and embedding clients over httpx.
Works against api.openai.com or any server exposing the same endpoints.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from shopsearch.core.config import settings
from shopsearch.core.exceptions import DecodeError, EmptyInputError, UpstreamError
from shopsearch.core.logging import get_logger, log_llm_call
from shopsearch.llm.schemas import (
    ChatCompletion,
    ChatMessage,
    EmbeddingResponse,
    FunctionDefinition,
)

logger = get_logger(__name__)


class _OpenAIHTTPClient:
    """Shared transport: auth header, timeout, status and body checks."""

    def __init__(
        self,
        *,
        model: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.model = model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        api_key = api_key if api_key is not None else settings.openai_api_key
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or settings.openai_timeout,
        )

    async def _post(self, path: str, payload: dict[str, Any], *, operation: str) -> dict:
        t0 = time.perf_counter()
        try:
            resp = await self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            log_llm_call(
                operation=operation,
                model=self.model,
                latency_ms=(time.perf_counter() - t0) * 1000,
                error=str(exc),
            )
            raise UpstreamError(f"{operation} request failed: {exc}") from exc

        latency_ms = (time.perf_counter() - t0) * 1000

        if resp.status_code != httpx.codes.OK:
            logger.error(
                "openai_api_error",
                operation=operation,
                status_code=resp.status_code,
                body=resp.text[:500],
            )
            log_llm_call(
                operation=operation,
                model=self.model,
                latency_ms=latency_ms,
                error=f"status {resp.status_code}",
            )
            raise UpstreamError(f"{operation} API error: status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise DecodeError(f"{operation} returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise DecodeError(f"{operation} returned an unexpected body")

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise UpstreamError(f"{operation} API error: {message}")

        log_llm_call(
            operation=operation,
            model=self.model,
            latency_ms=latency_ms,
            tokens=data.get("usage"),
        )
        return data

    async def aclose(self) -> None:
        await self._client.aclose()


class OpenAIChatClient(_OpenAIHTTPClient):
    """Chat completions with optional function calling."""

    def __init__(self, *, model: str | None = None, **kwargs: Any) -> None:
        super().__init__(model=model or settings.chat_model, **kwargs)
        logger.info("openai_chat_client_initialized", base_url=self.base_url, model=self.model)

    async def chat(
        self,
        messages: list[ChatMessage],
        *,
        functions: list[FunctionDefinition] | None = None,
        function_call: dict[str, Any] | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> ChatCompletion:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [m.model_dump(exclude_none=True) for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if functions:
            payload["functions"] = [f.model_dump() for f in functions]
        if function_call:
            payload["function_call"] = function_call

        data = await self._post("/chat/completions", payload, operation="chat_completion")
        try:
            return ChatCompletion.model_validate(data)
        except PydanticValidationError as exc:
            raise DecodeError(f"Malformed chat completion: {exc}") from exc


class OpenAIEmbeddingClient(_OpenAIHTTPClient):
    """Embedding client that splits large inputs into rate-limited batches."""

    def __init__(
        self,
        *,
        model: str | None = None,
        batch_size: int | None = None,
        batch_delay_seconds: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(model=model or settings.embedding_model, **kwargs)
        self.batch_size = max(batch_size or settings.embedding_batch_size, 1)
        self.batch_delay_seconds = (
            settings.embedding_batch_delay_seconds
            if batch_delay_seconds is None
            else batch_delay_seconds
        )
        logger.info(
            "openai_embedding_client_initialized",
            base_url=self.base_url,
            model=self.model,
            batch_size=self.batch_size,
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            raise EmptyInputError("no texts provided")

        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            if start > 0:
                # Upstream rate limit
                await asyncio.sleep(self.batch_delay_seconds)
            batch = texts[start : start + self.batch_size]
            vectors.extend(await self._embed_batch(batch))

        logger.debug("embeddings_fetched", texts=len(texts), batches=-(-len(texts) // self.batch_size))
        return vectors

    async def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        data = await self._post(
            "/embeddings",
            {"model": self.model, "input": batch},
            operation="embedding",
        )
        try:
            response = EmbeddingResponse.model_validate(data)
        except PydanticValidationError as exc:
            raise DecodeError(f"Malformed embedding response: {exc}") from exc

        if len(response.data) != len(batch):
            raise DecodeError(
                f"Expected {len(batch)} embeddings, got {len(response.data)}"
            )

        ordered = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in ordered]
