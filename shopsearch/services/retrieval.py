"""
Retrieval Orchestrator

Builds a vector-store filter from an intent, runs one similarity query and
turns the hits into SearchResults with a readable match reason.
"""

from __future__ import annotations

from shopsearch.core.config import settings
from shopsearch.core.exceptions import RetrievalError, VectorStoreError
from shopsearch.core.logging import get_logger
from shopsearch.schemas.product import ProductStatus
from shopsearch.schemas.search import ParsedIntent, SearchResult
from shopsearch.vectorstore.payload import (
    ATTRIBUTE_PREFIX,
    filter_condition_key,
    product_from_payload,
)
from shopsearch.vectorstore.protocol import VectorStoreProtocol
from shopsearch.vectorstore.schemas import FieldCondition, Filter, ScoredPoint

logger = get_logger(__name__)

# Intent attributes mapped 1:1 to exact-match payload conditions, in clause order.
EXACT_MATCH_FIELDS = ("color", "brand", "size", "material", "style", "occasion", "gender")

# Filter keys reported in match reasons.
REASON_DIMENSIONS = (
    ("brand", "brand match"),
    ("color", "color match"),
    ("price", "price range match"),
    ("size", "size match"),
)


def build_filter(intent: ParsedIntent) -> Filter:
    must: list[FieldCondition] = []

    for field in EXACT_MATCH_FIELDS:
        value = getattr(intent, field)
        if value:
            must.append(FieldCondition.equals(field, value))

    if intent.price_min is not None or intent.price_max is not None:
        must.append(FieldCondition.between("price", gte=intent.price_min, lte=intent.price_max))

    for key, value in intent.filters.items():
        if value == "" or value is None:
            continue
        payload_key = filter_condition_key(key)
        if payload_key.startswith(ATTRIBUTE_PREFIX):
            # overflow attributes are stored as strings
            value = str(value)
        must.append(FieldCondition.equals(payload_key, value))

    must.append(FieldCondition.equals("status", ProductStatus.ACTIVE.value))
    return Filter(must=must)


def match_reason(score: float, filter: Filter | None) -> str:
    if score > settings.match_high_threshold:
        tier = "high semantic match"
    elif score > settings.match_good_threshold:
        tier = "good semantic match"
    else:
        tier = "basic semantic match"

    if filter is None:
        return tier
    keys = {condition.key for condition in filter.must}
    dimensions = [label for key, label in REASON_DIMENSIONS if key in keys]
    if not dimensions:
        return tier
    return f"{tier} + {', '.join(dimensions)}"


class RetrievalService:
    def __init__(self, *, vectorstore: VectorStoreProtocol) -> None:
        self.vectorstore = vectorstore

    async def search(
        self, vector: list[float], filter: Filter | None, limit: int
    ) -> list[SearchResult]:
        """
        Raises:
            RetrievalError: the store query failed
        """
        try:
            hits = await self.vectorstore.search(vector, filter=filter, limit=limit)
        except VectorStoreError as exc:
            logger.error("retrieval_failed", error=exc.message, limit=limit)
            raise RetrievalError(f"vector search failed: {exc.message}") from exc

        return [self._to_result(hit, filter) for hit in hits]

    @staticmethod
    def _to_result(hit: ScoredPoint, filter: Filter | None) -> SearchResult:
        variant = hit.payload.get("variant_text")
        return SearchResult(
            product=product_from_payload(hit.payload),
            score=hit.score,
            variant=str(variant) if variant else None,
            match_reason=match_reason(hit.score, filter),
        )
