"""
Cached Embedding Service

Wraps an embedding client with an exact-text cache. The cache is created once
per application and injected; it has no TTL or eviction and never overwrites
an existing entry.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from uuid import uuid4

from shopsearch.core.exceptions import EmptyInputError, UpstreamError
from shopsearch.core.logging import get_logger
from shopsearch.llm.protocol import EmbeddingClientProtocol
from shopsearch.schemas.product import ProductVariant

logger = get_logger(__name__)


class EmbeddingCache:
    """Text -> vector mapping keyed by the exact input text."""

    def __init__(self) -> None:
        self._entries: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def get(self, text: str) -> list[float] | None:
        with self._lock:
            return self._entries.get(text)

    def set(self, text: str, vector: list[float]) -> list[float]:
        """Insert if absent; returns the vector held by the cache."""
        with self._lock:
            return self._entries.setdefault(text, vector)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, text: object) -> bool:
        with self._lock:
            return text in self._entries


class CachedEmbeddingService:
    """
    Embedding lookups through the cache.

    Only texts missing from the cache reach the client, in one call that
    preserves their input order; results are stitched back so the output
    matches the input order and length exactly.
    """

    def __init__(self, client: EmbeddingClientProtocol, cache: EmbeddingCache) -> None:
        self.client = client
        self.cache = cache

    async def get_embedding(self, text: str) -> list[float]:
        cached = self.cache.get(text)
        if cached is not None:
            logger.debug("embedding_cache_hit", text=text[:50])
            return cached

        vectors = await self.get_embeddings([text])
        if not vectors:
            raise UpstreamError("no embedding returned")
        return vectors[0]

    async def get_embeddings(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            raise EmptyInputError("no texts provided")

        results: list[list[float] | None] = [None] * len(texts)
        missing: dict[str, list[int]] = {}

        for index, text in enumerate(texts):
            cached = self.cache.get(text)
            if cached is not None:
                results[index] = cached
            else:
                missing.setdefault(text, []).append(index)

        if missing:
            uncached = list(missing)
            fetched = await self.client.embed(uncached)
            if len(fetched) != len(uncached):
                raise UpstreamError(
                    f"Expected {len(uncached)} embeddings, got {len(fetched)}"
                )
            for text, vector in zip(uncached, fetched):
                stored = self.cache.set(text, vector)
                for index in missing[text]:
                    results[index] = stored

        logger.debug(
            "embeddings_resolved",
            total=len(texts),
            cached=len(texts) - sum(len(v) for v in missing.values()),
            fetched=len(missing),
        )
        return [vector for vector in results if vector is not None]

    async def get_variant_embeddings(
        self, product_id: str, variants: list[str]
    ) -> list[ProductVariant]:
        """Embed variant texts into ProductVariant records for one product."""
        if not variants:
            raise EmptyInputError("no variants provided")

        vectors = await self.get_embeddings(variants)
        generated_at = datetime.now(timezone.utc)
        return [
            ProductVariant(
                id=str(uuid4()),
                product_id=product_id,
                text=text,
                vector=vector,
                generated_at=generated_at,
            )
            for text, vector in zip(variants, vectors)
        ]

    @property
    def cache_size(self) -> int:
        return len(self.cache)
