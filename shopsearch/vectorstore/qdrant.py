"""
Qdrant VectorStore implementation.

Talks to the Qdrant REST API over httpx. The collection is created lazily
(configured vector size, cosine distance) on the first operation that needs
it; "already exists" from a racing creator is treated as success.
"""

from __future__ import annotations

from typing import Any

import httpx

from shopsearch.core.config import settings
from shopsearch.core.exceptions import VectorStoreError
from shopsearch.core.logging import get_logger
from shopsearch.schemas.product import Product, ProductVariant
from shopsearch.vectorstore.base import CollectionLifecycle
from shopsearch.vectorstore.payload import build_payload, product_from_payload
from shopsearch.vectorstore.protocol import StoreState
from shopsearch.vectorstore.schemas import (
    FieldCondition,
    Filter,
    PointStruct,
    ScoredPoint,
    StoredPoint,
)

logger = get_logger(__name__)


class QdrantVectorStore:
    """Qdrant-backed VectorStore, one point per product variant."""

    def __init__(
        self,
        *,
        url: str | None = None,
        collection: str | None = None,
        dimension: int | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = (url or settings.qdrant_url).rstrip("/")
        self.collection = collection or settings.qdrant_collection
        self.dimension = dimension or settings.vectorstore_dimension

        api_key = api_key if api_key is not None else settings.qdrant_api_key
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["api-key"] = api_key
        self._client = client or httpx.AsyncClient(
            base_url=self.url,
            headers=headers,
            timeout=timeout or settings.qdrant_timeout,
        )
        self._lifecycle = CollectionLifecycle(self.collection, self._create_collection)

    @property
    def state(self) -> StoreState:
        return self._lifecycle.state

    async def ensure_ready(self) -> None:
        await self._lifecycle.ensure_ready()

    async def insert_product(self, product: Product, variants: list[ProductVariant]) -> None:
        if not variants:
            return
        await self.ensure_ready()

        points = [
            PointStruct(id=variant.id, vector=variant.vector, payload=build_payload(product, variant))
            for variant in variants
        ]
        await self._request(
            "PUT",
            f"/collections/{self.collection}/points",
            operation="upsert",
            params={"wait": "true"},
            json={"points": [p.model_dump() for p in points]},
        )
        logger.info(
            "qdrant_product_upserted",
            collection=self.collection,
            product_id=product.id,
            points=len(points),
        )

    async def search(
        self,
        vector: list[float],
        filter: Filter | None = None,
        limit: int = 10,
    ) -> list[ScoredPoint]:
        await self.ensure_ready()

        body: dict[str, Any] = {"vector": vector, "limit": limit, "with_payload": True}
        if filter is not None:
            filter_payload = filter.to_payload()
            if filter_payload:
                body["filter"] = filter_payload

        result = await self._request(
            "POST",
            f"/collections/{self.collection}/points/search",
            operation="search",
            json=body,
        )
        hits = [
            ScoredPoint(
                id=str(hit.get("id")),
                score=float(hit.get("score") or 0.0),
                payload=hit.get("payload") or {},
            )
            for hit in result or []
        ]
        logger.debug("qdrant_search", collection=self.collection, hits=len(hits), limit=limit)
        return hits

    async def get_product(self, product_id: str) -> Product | None:
        points, _ = await self.scroll(filter=_product_filter(product_id), limit=1)
        if not points:
            return None
        return product_from_payload(points[0].payload)

    async def delete_product(self, product_id: str) -> None:
        await self.ensure_ready()
        await self._request(
            "POST",
            f"/collections/{self.collection}/points/delete",
            operation="delete",
            params={"wait": "true"},
            json={"filter": _product_filter(product_id).to_payload()},
        )
        logger.info("qdrant_product_deleted", collection=self.collection, product_id=product_id)

    async def scroll(
        self,
        filter: Filter | None = None,
        limit: int = 100,
        offset: str | None = None,
    ) -> tuple[list[StoredPoint], str | None]:
        await self.ensure_ready()

        body: dict[str, Any] = {"limit": limit, "with_payload": True, "with_vector": False}
        if filter is not None:
            body["filter"] = filter.to_payload()
        if offset is not None:
            body["offset"] = offset

        result = await self._request(
            "POST",
            f"/collections/{self.collection}/points/scroll",
            operation="scroll",
            json=body,
        )
        result = result or {}
        points = [
            StoredPoint(id=str(p.get("id")), payload=p.get("payload") or {})
            for p in result.get("points") or []
        ]
        next_offset = result.get("next_page_offset")
        return points, str(next_offset) if next_offset is not None else None

    async def stats(self) -> dict[str, Any]:
        await self.ensure_ready()
        result = await self._request(
            "GET", f"/collections/{self.collection}", operation="collection_info"
        )
        result = result or {}
        return {
            "backend": "qdrant",
            "collection": self.collection,
            "state": self.state.value,
            "status": result.get("status"),
            "points_count": result.get("points_count") or 0,
            "dimension": self.dimension,
        }

    async def aclose(self) -> None:
        await self._client.aclose()

    # Internal helpers -------------------------------------------------

    async def _create_collection(self) -> None:
        try:
            resp = await self._client.get(f"/collections/{self.collection}")
        except httpx.HTTPError as exc:
            raise VectorStoreError(f"collection lookup failed: {exc}") from exc

        if resp.status_code == httpx.codes.OK:
            logger.info("qdrant_collection_exists", collection=self.collection)
            return

        try:
            resp = await self._client.put(
                f"/collections/{self.collection}",
                json={"vectors": {"size": self.dimension, "distance": "Cosine"}},
            )
        except httpx.HTTPError as exc:
            raise VectorStoreError(f"collection create failed: {exc}") from exc

        if resp.status_code == httpx.codes.OK:
            logger.info(
                "qdrant_collection_created",
                collection=self.collection,
                dimension=self.dimension,
            )
            return
        if resp.status_code == httpx.codes.CONFLICT or "already exists" in resp.text:
            logger.info("qdrant_collection_already_exists", collection=self.collection)
            return

        raise VectorStoreError(
            f"collection create failed: status {resp.status_code}: {resp.text[:200]}"
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            resp = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.error("qdrant_request_failed", operation=operation, error=str(exc))
            raise VectorStoreError(f"qdrant {operation} failed: {exc}") from exc

        if resp.status_code != httpx.codes.OK:
            logger.error(
                "qdrant_api_error",
                operation=operation,
                status_code=resp.status_code,
                body=resp.text[:500],
            )
            raise VectorStoreError(f"qdrant {operation} failed: status {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise VectorStoreError(f"qdrant {operation} returned invalid JSON") from exc
        return body.get("result") if isinstance(body, dict) else None


def _product_filter(product_id: str) -> Filter:
    return Filter(must=[FieldCondition.equals("product_id", product_id)])
