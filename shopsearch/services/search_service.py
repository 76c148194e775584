"""
SearchService

query -> intent (with raw-text fallback) -> normalized intent -> query vector
-> filtered similarity search.
"""

from __future__ import annotations

import time

from shopsearch.core.config import settings
from shopsearch.core.exceptions import FeatureDisabledError, UpstreamError, ValidationError
from shopsearch.core.logging import get_logger, log_context, measure_latency, metrics_counter
from shopsearch.llm.embedder import CachedEmbeddingService
from shopsearch.schemas.search import ParsedIntent, SearchResponse
from shopsearch.services.query_interpreter import QueryInterpreter
from shopsearch.services.retrieval import RetrievalService, build_filter

logger = get_logger(__name__)

SUGGESTION_DEFAULT_LIMIT = 5


def clamp_limit(limit: int) -> int:
    if limit <= 0 or limit > settings.search_max_results:
        return settings.search_max_results
    return limit


def clamp_suggestion_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return SUGGESTION_DEFAULT_LIMIT
    return min(limit, settings.suggestion_max)


class SearchService:
    def __init__(
        self,
        *,
        interpreter: QueryInterpreter,
        embedder: CachedEmbeddingService,
        retrieval: RetrievalService,
    ) -> None:
        self.interpreter = interpreter
        self.embedder = embedder
        self.retrieval = retrieval

    @measure_latency("search")
    async def search(self, query: str, limit: int = 0) -> SearchResponse:
        with log_context(query=query):
            return await self._search(query, clamp_limit(limit))

    async def _search(self, query: str, limit: int) -> SearchResponse:
        started = time.perf_counter()
        logger.info("search_started", limit=limit)

        intent = await self._interpret(query)
        try:
            self.interpreter.validate(intent)
        except ValidationError as exc:
            logger.warning("query_validation_failed", error=exc.message)

        enhanced = self.interpreter.enhance(intent)
        search_text = self.interpreter.get_search_query(enhanced) or query

        vector = await self.embedder.get_embedding(search_text)
        results = await self.retrieval.search(vector, build_filter(enhanced), limit)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        metrics_counter("search_completed", empty=not results)
        logger.info("search_completed", results=len(results), time_ms=elapsed_ms)
        return SearchResponse(
            query=query,
            total=len(results),
            results=results,
            parsed_query=enhanced,
            time_taken_ms=elapsed_ms,
        )

    async def suggestions(self, query: str, limit: int | None = None) -> list[str]:
        if not settings.enable_search_suggestions:
            raise FeatureDisabledError("Search suggestions are disabled")
        limit = clamp_suggestion_limit(limit)
        suggestions = await self.interpreter.get_suggestions(query, limit)
        return suggestions[:limit]

    async def _interpret(self, query: str) -> ParsedIntent:
        if not settings.enable_function_calling:
            return ParsedIntent(product_type=query)
        try:
            return await self.interpreter.parse(query)
        except UpstreamError as exc:
            logger.warning("query_parse_failed_fallback", error=exc.message)
            metrics_counter("query_parse_fallback")
            return ParsedIntent(product_type=query)
