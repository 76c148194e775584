"""
Search schemas: structured intents, search requests and results
"""

from __future__ import annotations

from pydantic import ConfigDict, Field

from shopsearch.schemas.base import BaseSchema
from shopsearch.schemas.product import Product

FilterValue = str | int | float | bool


class ParsedIntent(BaseSchema):
    """Structured representation of a free-text product query."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    product_type: str | None = None
    color: str | None = None
    brand: str | None = None
    size: str | None = None
    material: str | None = None
    style: str | None = None
    occasion: str | None = None
    gender: str | None = None
    price_min: float | None = None
    price_max: float | None = None
    filters: dict[str, FilterValue] = Field(
        default_factory=dict, description="Additional exact-match conditions"
    )


class EnhancedIntent(ParsedIntent):
    """ParsedIntent after synonym/color/size normalization."""


class SearchRequest(BaseSchema):
    query: str = Field(min_length=1)
    limit: int = 0


class SearchResult(BaseSchema):
    product: Product
    score: float
    match_reason: str
    variant: str | None = None


class SearchResponse(BaseSchema):
    query: str
    total: int
    results: list[SearchResult] = Field(default_factory=list)
    parsed_query: EnhancedIntent | None = None
    time_taken_ms: int


class SuggestionsResponse(BaseSchema):
    query: str
    suggestions: list[str] = Field(default_factory=list)
