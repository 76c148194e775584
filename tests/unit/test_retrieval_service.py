"""
Unit tests for filter construction and RetrievalService
"""

import pytest
from unittest.mock import AsyncMock

from shopsearch.core.exceptions import RetrievalError, VectorStoreError
from shopsearch.schemas.product import ProductVariant
from shopsearch.schemas.search import ParsedIntent
from shopsearch.services.retrieval import RetrievalService, build_filter, match_reason
from shopsearch.vectorstore.mock import MockVectorStore
from shopsearch.vectorstore.schemas import FieldCondition, Filter, ScoredPoint


def test_filter_for_color_only_has_color_then_status() -> None:
    filter = build_filter(ParsedIntent(product_type="衬衫", color="红色"))

    assert filter.must == [
        FieldCondition.equals("color", "红色"),
        FieldCondition.equals("status", "active"),
    ]
    assert filter.should == []
    assert filter.must_not == []


def test_filter_clause_order() -> None:
    intent = ParsedIntent(
        product_type="jeans",
        gender="women",
        color="blue",
        brand="Levis",
        size="M",
        material="denim",
        style="slim",
        occasion="casual",
        price_min=50,
        price_max=100,
        filters={"fit": "tapered", "in_stock": True},
    )

    filter = build_filter(intent)

    assert [c.key for c in filter.must] == [
        "color",
        "brand",
        "size",
        "material",
        "style",
        "occasion",
        "gender",
        "price",
        "attr_fit",
        "attr_in_stock",
        "status",
    ]
    assert filter.must[9].match.value == "True"
    price = filter.must[7]
    assert price.range_.gte == 50
    assert price.range_.lte == 100


def test_known_payload_fields_in_filters_keep_their_key() -> None:
    filter = build_filter(ParsedIntent(filters={"category": "jeans", "attr_fit": "slim"}))

    assert [c.key for c in filter.must] == ["category", "attr_fit", "status"]


def test_filter_single_price_bound() -> None:
    filter = build_filter(ParsedIntent(product_type="jeans", price_max=100))

    price = filter.must[0]
    assert price.key == "price"
    assert price.range_.gte is None
    assert price.range_.lte == 100
    assert price.to_payload() == {"key": "price", "range": {"lte": 100.0}}


def test_empty_intent_still_restricts_status() -> None:
    filter = build_filter(ParsedIntent())

    assert filter.to_payload() == {
        "must": [{"key": "status", "match": {"value": "active"}}]
    }


@pytest.mark.parametrize(
    "score,expected",
    [
        (0.95, "high semantic match"),
        (0.9, "good semantic match"),
        (0.71, "good semantic match"),
        (0.7, "basic semantic match"),
        (0.1, "basic semantic match"),
    ],
)
def test_match_reason_tiers(score: float, expected: str) -> None:
    assert match_reason(score, None) == expected


def test_match_reason_lists_active_dimensions() -> None:
    filter = build_filter(
        ParsedIntent(product_type="jeans", color="blue", brand="Levis", price_max=100, material="denim")
    )

    assert match_reason(0.95, filter) == (
        "high semantic match + brand match, color match, price range match"
    )


@pytest.fixture
def vectorstore() -> AsyncMock:
    return AsyncMock()


@pytest.mark.asyncio
async def test_search_builds_results_in_store_order(vectorstore, sample_product) -> None:
    payload = {
        "product_id": sample_product.id,
        "product_name": sample_product.name,
        "category": "jeans",
        "price": 59.9,
        "status": "active",
        "variant_text": "blue slim jeans",
        "attr_fit": "slim",
    }
    vectorstore.search.return_value = [
        ScoredPoint(id="p1", score=0.8, payload=payload),
        ScoredPoint(id="p2", score=0.8, payload={**payload, "variant_text": "Slim Jeans"}),
        ScoredPoint(id="p3", score=0.4, payload={"product_id": "x", "product_name": "Other"}),
    ]
    service = RetrievalService(vectorstore=vectorstore)
    filter = Filter(must=[FieldCondition.equals("status", "active")])

    results = await service.search([0.1, 0.2], filter, 3)

    vectorstore.search.assert_awaited_once_with([0.1, 0.2], filter=filter, limit=3)
    assert [r.variant for r in results] == ["blue slim jeans", "Slim Jeans", None]
    assert [r.score for r in results] == [0.8, 0.8, 0.4]
    assert results[0].product.id == sample_product.id
    assert results[0].product.attributes == {"fit": "slim"}
    assert results[0].match_reason == "good semantic match"
    assert results[2].match_reason == "basic semantic match"


@pytest.mark.asyncio
async def test_search_no_hits_returns_empty_list(vectorstore) -> None:
    vectorstore.search.return_value = []
    service = RetrievalService(vectorstore=vectorstore)

    assert await service.search([0.1], None, 10) == []


@pytest.mark.asyncio
async def test_store_failure_raises_retrieval_error(vectorstore) -> None:
    vectorstore.search.side_effect = VectorStoreError("qdrant down")
    service = RetrievalService(vectorstore=vectorstore)

    with pytest.raises(RetrievalError):
        await service.search([0.1], None, 10)


@pytest.mark.asyncio
async def test_attribute_filter_matches_indexed_product(sample_product) -> None:
    store = MockVectorStore()
    variant = ProductVariant(
        id="v-1",
        product_id=sample_product.id,
        text="Slim Jeans",
        vector=[1.0, 0.0],
        generated_at=sample_product.created_at,
    )
    await store.insert_product(sample_product, [variant])
    service = RetrievalService(vectorstore=store)

    plain = await service.search([1.0, 0.0], build_filter(ParsedIntent(product_type="jeans")), 10)
    by_fit = await service.search(
        [1.0, 0.0], build_filter(ParsedIntent(product_type="jeans", filters={"fit": "slim"})), 10
    )
    other_fit = await service.search(
        [1.0, 0.0], build_filter(ParsedIntent(product_type="jeans", filters={"fit": "loose"})), 10
    )

    assert len(plain) == 1
    assert [r.product.id for r in by_fit] == [sample_product.id]
    assert other_fit == []


@pytest.mark.asyncio
async def test_non_string_attribute_filter_matches_stored_string(sample_product) -> None:
    product = sample_product.model_copy(update={"attributes": {"in_stock": True, "pockets": 5}})
    store = MockVectorStore()
    variant = ProductVariant(
        id="v-1",
        product_id=product.id,
        text="Slim Jeans",
        vector=[1.0, 0.0],
        generated_at=product.created_at,
    )
    await store.insert_product(product, [variant])
    service = RetrievalService(vectorstore=store)

    results = await service.search(
        [1.0, 0.0], build_filter(ParsedIntent(filters={"in_stock": True, "pockets": 5})), 10
    )

    assert len(results) == 1
