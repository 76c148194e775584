"""
Mock VectorStore Implementation
In-memory implementation for development/testing.

Evaluates the same filter model as Qdrant (match/range conditions under
must/should/must_not) and ranks by cosine similarity.
"""

import math
from typing import Any

from shopsearch.core.logging import get_logger
from shopsearch.schemas.product import Product, ProductVariant
from shopsearch.vectorstore.base import CollectionLifecycle
from shopsearch.vectorstore.payload import build_payload, product_from_payload
from shopsearch.vectorstore.protocol import StoreState
from shopsearch.vectorstore.schemas import FieldCondition, Filter, ScoredPoint, StoredPoint

logger = get_logger(__name__)


class MockVectorStore:
    """
    Mock VectorStore using in-memory dictionary.

    Points are kept in insertion order so equal scores come back in a stable
    order.
    """

    def __init__(self, collection: str = "products"):
        self.collection = collection
        self._points: dict[str, tuple[list[float], dict[str, Any]]] = {}
        self._lifecycle = CollectionLifecycle(collection, self._create_collection)
        logger.info("mock_vectorstore_initialized", collection=collection)

    @property
    def state(self) -> StoreState:
        return self._lifecycle.state

    async def ensure_ready(self) -> None:
        await self._lifecycle.ensure_ready()

    async def insert_product(self, product: Product, variants: list[ProductVariant]) -> None:
        await self.ensure_ready()
        for variant in variants:
            self._points[variant.id] = (list(variant.vector), build_payload(product, variant))
        logger.debug("mock_product_inserted", product_id=product.id, points=len(variants))

    async def search(
        self,
        vector: list[float],
        filter: Filter | None = None,
        limit: int = 10,
    ) -> list[ScoredPoint]:
        await self.ensure_ready()
        hits = [
            ScoredPoint(id=point_id, score=_cosine(vector, stored), payload=dict(payload))
            for point_id, (stored, payload) in self._points.items()
            if filter is None or matches_filter(filter, payload)
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:limit]

    async def get_product(self, product_id: str) -> Product | None:
        points, _ = await self.scroll(
            filter=Filter(must=[FieldCondition.equals("product_id", product_id)]), limit=1
        )
        return product_from_payload(points[0].payload) if points else None

    async def delete_product(self, product_id: str) -> None:
        await self.ensure_ready()
        doomed = [pid for pid, (_, payload) in self._points.items() if payload.get("product_id") == product_id]
        for point_id in doomed:
            del self._points[point_id]
        logger.debug("mock_product_deleted", product_id=product_id, points=len(doomed))

    async def scroll(
        self,
        filter: Filter | None = None,
        limit: int = 100,
        offset: str | None = None,
    ) -> tuple[list[StoredPoint], str | None]:
        await self.ensure_ready()
        selected = [
            StoredPoint(id=point_id, payload=dict(payload))
            for point_id, (_, payload) in self._points.items()
            if filter is None or matches_filter(filter, payload)
        ]
        start = int(offset) if offset else 0
        page = selected[start : start + limit]
        next_offset = str(start + limit) if start + limit < len(selected) else None
        return page, next_offset

    async def stats(self) -> dict[str, Any]:
        await self.ensure_ready()
        products = {payload.get("product_id") for _, payload in self._points.values()}
        return {
            "backend": "mock",
            "collection": self.collection,
            "state": self.state.value,
            "points_count": len(self._points),
            "products_count": len(products),
        }

    async def aclose(self) -> None:
        return None

    def clear(self) -> None:
        """Clear all points (test helper)."""
        self._points.clear()

    async def _create_collection(self) -> None:
        logger.info("mock_collection_created", collection=self.collection)


def matches_filter(filter: Filter, payload: dict[str, Any]) -> bool:
    """Evaluate a Filter against one payload."""
    if not all(_matches_condition(c, payload) for c in filter.must):
        return False
    if filter.should and not any(_matches_condition(c, payload) for c in filter.should):
        return False
    return not any(_matches_condition(c, payload) for c in filter.must_not)


def _matches_condition(condition: FieldCondition, payload: dict[str, Any]) -> bool:
    if condition.key not in payload:
        return False
    value = payload[condition.key]

    if condition.match is not None:
        expected = condition.match.value
        if isinstance(value, list):
            return expected in value
        return value == expected

    if condition.range_ is not None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        bounds = condition.range_
        if bounds.gt is not None and not value > bounds.gt:
            return False
        if bounds.gte is not None and not value >= bounds.gte:
            return False
        if bounds.lt is not None and not value < bounds.lt:
            return False
        if bounds.lte is not None and not value <= bounds.lte:
            return False
        return True

    return False


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0
