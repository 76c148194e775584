"""
Unit tests for VariantGenerator

Tests cover:
- count clamping
- prompt building with "unspecified" substitutions
- JSON / embedded-array / line-based parsing
- length, duplicate and keyword filtering
- NoVariantsError and regeneration flow
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from shopsearch.core.exceptions import NoVariantsError, RecordNotFoundError
from shopsearch.llm.embedder import CachedEmbeddingService, EmbeddingCache
from shopsearch.llm.mock import MockEmbeddingClient
from shopsearch.llm.prompts import PromptStore
from shopsearch.llm.schemas import ChatChoice, ChatCompletion, ChatMessage
from shopsearch.schemas.product import Product
from shopsearch.services.variant_generator import (
    VariantGenerator,
    clamp_variant_count,
    filter_variants,
    parse_variants,
    parse_variants_fallback,
)


def _completion(content: str) -> ChatCompletion:
    return ChatCompletion(choices=[ChatChoice(message=ChatMessage(role="assistant", content=content))])


@pytest.fixture
def chat_client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def vectorstore() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def generator(chat_client, vectorstore) -> VariantGenerator:
    return VariantGenerator(
        chat_client=chat_client,
        embedder=CachedEmbeddingService(MockEmbeddingClient(dimension=16), EmbeddingCache()),
        prompts=PromptStore(),
        vectorstore=vectorstore,
    )


@pytest.mark.parametrize("count,expected", [(0, 5), (-3, 5), (1, 1), (7, 7), (20, 20), (50, 20)])
def test_clamp_variant_count(count: int, expected: int) -> None:
    assert clamp_variant_count(count) == expected


def test_build_prompt_never_leaves_empty_substitution(generator) -> None:
    product = Product(id="p-1", name="Canvas Tote", category="bags", price=12.5, currency="EUR")

    prompt = generator.build_prompt(product, 4)

    assert "Generate 4 different" in prompt
    assert "Product name: Canvas Tote" in prompt
    assert "Price: 12.50EUR" in prompt
    assert "Color: unspecified" in prompt
    assert "Brand: unspecified" in prompt
    assert "{" not in prompt


def test_parse_variants_direct_json() -> None:
    assert parse_variants('["a b c d e", "f g h"]') == ["a b c d e", "f g h"]


def test_parse_variants_embedded_array() -> None:
    content = 'Sure! Here you go:\n```json\n["Slim Jeans in blue", "blue jeans"]\n```\nEnjoy.'

    assert parse_variants(content) == ["Slim Jeans in blue", "blue jeans"]


def test_parse_variants_returns_none_when_no_array() -> None:
    assert parse_variants("1. Slim Jeans\n2. Blue jeans") is None


def test_parse_variants_fallback_strips_markup() -> None:
    content = "\n".join(
        [
            "```",
            "# Variants",
            "// generated",
            "- Slim Jeans for work",
            "* \"Blue slim jeans\",",
            "• Jeans with stretch",
            "1. Slim fit jeans",
            "2) Denim jeans, slim",
            "10、 '修身牛仔裤'",
            "",
            "```",
        ]
    )

    assert parse_variants_fallback(content) == [
        "Slim Jeans for work",
        "Blue slim jeans",
        "Jeans with stretch",
        "Slim fit jeans",
        "Denim jeans, slim",
        "修身牛仔裤",
    ]


def test_filter_variants_length_duplicates_and_keywords(sample_product) -> None:
    variants = [
        "jean",  # too short
        "Slim Jeans in blue",
        "  Slim Jeans in blue  ",  # duplicate after trimming
        "A comfortable pair of trousers",  # no keyword
        "jeans " + "x" * 100,  # too long
        "Everyday JEANS",
    ]

    assert filter_variants(variants, sample_product) == ["Slim Jeans in blue", "Everyday JEANS"]


def test_filter_variants_keeps_boundary_lengths() -> None:
    product = Product(id="p", name="abcde", category="zz")
    five = "abcde"
    hundred = "abcde" + "y" * 95

    assert filter_variants([five, hundred, hundred + "y"], product) == [five, hundred]


def test_filter_variants_single_cjk_token() -> None:
    product = Product(id="p", name="裙", category="女装")

    assert filter_variants(["一条红色的裙子", "一双运动的鞋子"], product) == ["一条红色的裙子"]


@pytest.mark.asyncio
async def test_generate_uses_elevated_temperature(generator, chat_client, sample_product) -> None:
    chat_client.chat.return_value = _completion('["Slim Jeans in blue", "Levis jeans, slim cut"]')

    variants = await generator.generate(sample_product, 0)

    assert variants == ["Slim Jeans in blue", "Levis jeans, slim cut"]
    kwargs = chat_client.chat.await_args.kwargs
    assert kwargs["temperature"] == 0.8
    prompt = chat_client.chat.await_args.args[0][0].content
    assert "Generate 5 different" in prompt


@pytest.mark.asyncio
async def test_generate_falls_back_to_line_parsing(generator, chat_client, sample_product) -> None:
    chat_client.chat.return_value = _completion("1. Slim Jeans in blue\n2. Slim Jeans by Levis")

    variants = await generator.generate(sample_product, 2)

    assert variants == ["Slim Jeans in blue", "Slim Jeans by Levis"]


@pytest.mark.asyncio
async def test_generate_returns_empty_without_error(generator, chat_client, sample_product) -> None:
    chat_client.chat.return_value = _completion('["nothing relevant here"]')

    assert await generator.generate(sample_product, 3) == []


@pytest.mark.asyncio
async def test_generate_with_embeddings_raises_when_empty(generator, chat_client, sample_product) -> None:
    chat_client.chat.return_value = _completion("[]")

    with pytest.raises(NoVariantsError):
        await generator.generate_with_embeddings(sample_product, 3)


@pytest.mark.asyncio
async def test_generate_with_embeddings_returns_variants(generator, chat_client, sample_product) -> None:
    chat_client.chat.return_value = _completion('["Slim Jeans in blue", "Levis slim jeans"]')

    variants = await generator.generate_with_embeddings(sample_product, 2)

    assert [v.text for v in variants] == ["Slim Jeans in blue", "Levis slim jeans"]
    assert all(v.product_id == sample_product.id for v in variants)
    assert all(len(v.vector) == 16 for v in variants)


@pytest.mark.asyncio
async def test_regenerate_deletes_then_inserts(generator, chat_client, vectorstore, sample_product) -> None:
    calls = MagicMock()
    vectorstore.get_product.return_value = sample_product
    vectorstore.delete_product.side_effect = lambda product_id: calls.delete(product_id)
    vectorstore.insert_product.side_effect = lambda product, variants: calls.insert(product.id, len(variants))
    chat_client.chat.return_value = _completion('["Slim Jeans in blue", "Levis slim jeans"]')

    product, variants = await generator.regenerate_variants(sample_product.id, 2)

    assert product == sample_product
    assert len(variants) == 2
    assert [c[0] for c in calls.mock_calls] == ["delete", "insert"]
    calls.insert.assert_called_once_with(sample_product.id, 2)


@pytest.mark.asyncio
async def test_regenerate_missing_product(generator, vectorstore) -> None:
    vectorstore.get_product.return_value = None

    with pytest.raises(RecordNotFoundError):
        await generator.regenerate_variants("missing", 3)

    vectorstore.delete_product.assert_not_awaited()
