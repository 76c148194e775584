"""
Unit tests for the in-memory vector store and its filter evaluation
"""

from datetime import datetime, timezone

import pytest

from shopsearch.schemas.product import Product, ProductStatus, ProductVariant
from shopsearch.vectorstore.mock import MockVectorStore, matches_filter
from shopsearch.vectorstore.protocol import StoreState
from shopsearch.vectorstore.schemas import FieldCondition, Filter


def _variant(product: Product, text: str, vector: list[float], suffix: str) -> ProductVariant:
    return ProductVariant(
        id=f"{product.id}-{suffix}",
        product_id=product.id,
        text=text,
        vector=vector,
        generated_at=datetime.now(timezone.utc),
    )


PAYLOAD = {"color": "blue", "price": 59.9, "status": "active", "tags": ["sale", "denim"]}


@pytest.mark.parametrize(
    "filter,expected",
    [
        (Filter(must=[FieldCondition.equals("color", "blue")]), True),
        (Filter(must=[FieldCondition.equals("color", "red")]), False),
        (Filter(must=[FieldCondition.equals("brand", "Levis")]), False),
        (Filter(must=[FieldCondition.between("price", gte=50, lte=60)]), True),
        (Filter(must=[FieldCondition.between("price", lte=50)]), False),
        (Filter(must=[FieldCondition.equals("tags", "sale")]), True),
        (
            Filter(
                should=[
                    FieldCondition.equals("color", "red"),
                    FieldCondition.equals("color", "blue"),
                ]
            ),
            True,
        ),
        (Filter(should=[FieldCondition.equals("color", "red")]), False),
        (Filter(must_not=[FieldCondition.equals("status", "active")]), False),
        (Filter(), True),
    ],
)
def test_matches_filter(filter: Filter, expected: bool) -> None:
    assert matches_filter(filter, PAYLOAD) is expected


@pytest.mark.asyncio
async def test_search_ranks_by_cosine_and_applies_filter() -> None:
    store = MockVectorStore()
    jeans = Product(id="p-1", name="Jeans", color="blue", price=50)
    shirt = Product(id="p-2", name="Shirt", color="red", price=20)
    hidden = Product(id="p-3", name="Old Jeans", color="blue", status=ProductStatus.INACTIVE)
    await store.insert_product(jeans, [_variant(jeans, "Jeans", [1.0, 0.0], "a")])
    await store.insert_product(shirt, [_variant(shirt, "Shirt", [0.6, 0.8], "a")])
    await store.insert_product(hidden, [_variant(hidden, "Old Jeans", [1.0, 0.0], "a")])

    active = Filter(must=[FieldCondition.equals("status", "active")])
    hits = await store.search([1.0, 0.0], filter=active, limit=10)

    assert [h.payload["product_id"] for h in hits] == ["p-1", "p-2"]
    assert hits[0].score == pytest.approx(1.0)
    assert hits[1].score == pytest.approx(0.6)
    assert store.state is StoreState.READY


@pytest.mark.asyncio
async def test_delete_and_get_product() -> None:
    store = MockVectorStore()
    jeans = Product(id="p-1", name="Jeans", attributes={"fit": "slim"})
    await store.insert_product(
        jeans,
        [_variant(jeans, "Jeans", [1.0, 0.0], "a"), _variant(jeans, "Blue Jeans", [0.0, 1.0], "b")],
    )

    fetched = await store.get_product("p-1")
    assert fetched.name == "Jeans"
    assert fetched.attributes == {"fit": "slim"}
    assert (await store.stats())["points_count"] == 2

    await store.delete_product("p-1")

    assert await store.get_product("p-1") is None
    assert (await store.stats())["points_count"] == 0


@pytest.mark.asyncio
async def test_scroll_pages() -> None:
    store = MockVectorStore()
    product = Product(id="p-1", name="Jeans")
    await store.insert_product(
        product, [_variant(product, f"Jeans {i}", [1.0, 0.0], str(i)) for i in range(5)]
    )

    first, offset = await store.scroll(limit=2)
    second, offset2 = await store.scroll(limit=2, offset=offset)
    last, end = await store.scroll(limit=2, offset=offset2)

    assert [len(first), len(second), len(last)] == [2, 2, 1]
    assert end is None
