"""
VectorStore DTO definitions

Filter model (must/should/must_not over match and range conditions) and the
point shapes exchanged with vector-store implementations.
"""

from typing import Any

from pydantic import Field

from shopsearch.schemas.base import BaseSchema


class MatchValue(BaseSchema):
    value: str | int | float | bool


class Range(BaseSchema):
    gt: float | None = None
    gte: float | None = None
    lt: float | None = None
    lte: float | None = None


class FieldCondition(BaseSchema):
    """Exact-match or range condition on one payload key."""

    key: str
    match: MatchValue | None = None
    range_: Range | None = Field(default=None, alias="range")

    @classmethod
    def equals(cls, key: str, value: str | int | float | bool) -> "FieldCondition":
        return cls(key=key, match=MatchValue(value=value))

    @classmethod
    def between(
        cls, key: str, *, gte: float | None = None, lte: float | None = None
    ) -> "FieldCondition":
        return cls(key=key, range=Range(gte=gte, lte=lte))

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Filter(BaseSchema):
    """Boolean composition of field conditions."""

    must: list[FieldCondition] = Field(default_factory=list)
    should: list[FieldCondition] = Field(default_factory=list)
    must_not: list[FieldCondition] = Field(default_factory=list)

    def keys(self) -> set[str]:
        return {c.key for c in (*self.must, *self.should, *self.must_not)}

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for clause in ("must", "should", "must_not"):
            conditions = getattr(self, clause)
            if conditions:
                payload[clause] = [c.to_payload() for c in conditions]
        return payload


class PointStruct(BaseSchema):
    """Point to upsert: one per product variant."""

    id: str
    vector: list[float]
    payload: dict[str, Any] = Field(default_factory=dict)


class ScoredPoint(BaseSchema):
    """Single similarity-search hit."""

    id: str
    score: float
    payload: dict[str, Any] = Field(default_factory=dict)


class StoredPoint(BaseSchema):
    """Point returned by scroll: payload only, no score."""

    id: str
    payload: dict[str, Any] = Field(default_factory=dict)
