"""
Variant Generator

Asks the chat model for natural-language paraphrases of a product, parses the
answer (JSON array, embedded array, or line-by-line), and keeps only variants
that have a sane length and mention the product.
"""

from __future__ import annotations

import json
import re

from shopsearch.core.config import settings
from shopsearch.core.exceptions import NoVariantsError, RecordNotFoundError, UpstreamError
from shopsearch.core.logging import get_logger
from shopsearch.llm.embedder import CachedEmbeddingService
from shopsearch.llm.prompts import PromptStore
from shopsearch.llm.protocol import ChatClientProtocol
from shopsearch.llm.schemas import ChatMessage
from shopsearch.schemas.product import Product, ProductVariant
from shopsearch.vectorstore.protocol import VectorStoreProtocol

logger = get_logger(__name__)

DEFAULT_VARIANT_COUNT = 5
MAX_VARIANT_COUNT = 20
UNSPECIFIED = "unspecified"

_ORDINAL_PREFIX = re.compile(r"^\d+[.)、]\s*")
_BULLETS = ("-", "*", "•")
_TRIM_CHARS = " \t\"',"


def clamp_variant_count(count: int) -> int:
    if count <= 0:
        return DEFAULT_VARIANT_COUNT
    return min(count, MAX_VARIANT_COUNT)


def parse_variants(content: str) -> list[str] | None:
    """JSON array of strings, directly or between the first '[' and last ']'."""
    candidates = [content]
    start, end = content.find("["), content.rfind("]")
    if start != -1 and end > start:
        candidates.append(content[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, list) and all(isinstance(item, str) for item in parsed):
            return parsed
    return None


def parse_variants_fallback(content: str) -> list[str]:
    variants: list[str] = []
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith(("```", "#", "//")):
            continue

        for bullet in _BULLETS:
            if line.startswith(bullet):
                line = line[len(bullet) :].lstrip()
                break
        line = _ORDINAL_PREFIX.sub("", line)
        line = line.strip(_TRIM_CHARS)
        if line:
            variants.append(line)
    return variants


def product_keywords(product: Product) -> list[str]:
    tokens = f"{product.name} {product.category}".lower().split()
    # one-letter ASCII tokens are dropped, single CJK characters kept
    return [token for token in tokens if len(token) > 1 or not token.isascii()]


def filter_variants(variants: list[str], product: Product) -> list[str]:
    keywords = product_keywords(product)
    seen: set[str] = set()
    kept: list[str] = []

    for variant in variants:
        variant = variant.strip()
        if not settings.variant_min_length <= len(variant) <= settings.variant_max_length:
            continue
        if variant in seen:
            continue
        seen.add(variant)

        lowered = variant.lower()
        if any(keyword in lowered for keyword in keywords):
            kept.append(variant)
    return kept


class VariantGenerator:
    """Generates, embeds and re-indexes product variants."""

    def __init__(
        self,
        *,
        chat_client: ChatClientProtocol,
        embedder: CachedEmbeddingService,
        prompts: PromptStore,
        vectorstore: VectorStoreProtocol,
    ) -> None:
        self.chat_client = chat_client
        self.embedder = embedder
        self.prompts = prompts
        self.vectorstore = vectorstore

    def build_prompt(self, product: Product, count: int) -> str:
        replacements = {
            "{variant_count}": str(count),
            "{product_name}": product.name,
            "{category}": product.category,
            "{color}": product.color,
            "{price}": f"{product.price:.2f}{product.currency}",
            "{brand}": product.brand,
            "{size}": product.size,
            "{material}": product.material,
            "{description}": product.description,
        }
        prompt = self.prompts.variant_prompt
        for placeholder, value in replacements.items():
            prompt = prompt.replace(placeholder, value or UNSPECIFIED)
        return prompt

    async def generate(self, product: Product, count: int = DEFAULT_VARIANT_COUNT) -> list[str]:
        """
        Variant texts for ``product``; an empty list when none survive filtering.

        Raises:
            UpstreamError: chat call failed or returned no choices
        """
        count = clamp_variant_count(count)
        completion = await self.chat_client.chat(
            [ChatMessage(role="user", content=self.build_prompt(product, count))],
            temperature=settings.variant_temperature,
            max_tokens=settings.variant_max_tokens,
        )
        if not completion.choices:
            raise UpstreamError("no response choices returned")

        content = completion.choices[0].message.content or ""
        variants = parse_variants(content)
        if variants is None:
            logger.warning("variant_json_parse_failed", product_id=product.id)
            variants = parse_variants_fallback(content)

        valid = filter_variants(variants, product)
        logger.info(
            "variants_generated",
            product_id=product.id,
            requested=count,
            parsed=len(variants),
            valid=len(valid),
        )
        return valid

    async def generate_with_embeddings(
        self, product: Product, count: int = DEFAULT_VARIANT_COUNT
    ) -> list[ProductVariant]:
        """
        Raises:
            NoVariantsError: nothing usable came back from the model
        """
        texts = await self.generate(product, count)
        if not texts:
            raise NoVariantsError(f"no valid variants generated for product {product.id}")
        return await self.embedder.get_variant_embeddings(product.id, texts)

    async def regenerate_variants(
        self, product_id: str, count: int = DEFAULT_VARIANT_COUNT
    ) -> tuple[Product, list[ProductVariant]]:
        """
        Replace every stored point of a product with freshly generated ones.

        Not transactional: a failure after the delete leaves the product
        unsearchable until the next successful regeneration.
        """
        product = await self.vectorstore.get_product(product_id)
        if product is None:
            raise RecordNotFoundError(f"Product {product_id} not found")

        await self.vectorstore.delete_product(product_id)
        variants = await self.generate_with_embeddings(product, count)
        await self.vectorstore.insert_product(product, variants)

        logger.info("variants_regenerated", product_id=product_id, variants=len(variants))
        return product, variants
