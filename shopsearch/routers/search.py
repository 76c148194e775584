"""Search router"""

from fastapi import APIRouter, Depends, Query

from shopsearch.core.dependencies import get_search_service
from shopsearch.schemas.search import SearchRequest, SearchResponse, SuggestionsResponse
from shopsearch.services.search_service import SearchService


router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "",
    response_model=SearchResponse,
    summary="Natural-language product search",
)
async def search(
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    return await service.search(payload.query, payload.limit)


@router.get(
    "/suggestions",
    response_model=SuggestionsResponse,
    summary="Query suggestions",
)
async def suggestions(
    query: str = Query(..., min_length=1, description="Partial query"),
    limit: int = Query(5, description="Number of suggestions, at most 20"),
    service: SearchService = Depends(get_search_service),
) -> SuggestionsResponse:
    return SuggestionsResponse(
        query=query, suggestions=await service.suggestions(query, limit)
    )
