"""
ProductService

Product indexing on top of the vector store: every write generates variants,
embeds them and stores one point per variant.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from shopsearch.core.config import settings
from shopsearch.core.exceptions import FeatureDisabledError, RecordNotFoundError
from shopsearch.core.logging import get_logger, log_context, measure_latency, metrics_counter
from shopsearch.schemas.product import (
    BatchImportError,
    BatchImportResponse,
    Product,
    ProductCreate,
    ProductDeleteResponse,
    ProductUpdate,
    ProductWriteResponse,
    VariantRegenerateResponse,
)
from shopsearch.services.variant_generator import (
    DEFAULT_VARIANT_COUNT,
    MAX_VARIANT_COUNT,
    VariantGenerator,
)
from shopsearch.vectorstore.protocol import VectorStoreProtocol

logger = get_logger(__name__)


class ProductService:
    def __init__(
        self,
        *,
        vectorstore: VectorStoreProtocol,
        generator: VariantGenerator,
    ) -> None:
        self.vectorstore = vectorstore
        self.generator = generator

    @measure_latency("product_create")
    async def create_product(self, payload: ProductCreate) -> ProductWriteResponse:
        product = payload.to_product()
        with log_context(product_id=product.id):
            logger.info("product_create", name=product.name)
            variants_count = await self._index(product, settings.variant_default_count)
        return ProductWriteResponse(
            product_id=product.id,
            name=product.name,
            variants_count=variants_count,
            created_at=product.created_at,
        )

    async def get_product(self, product_id: str) -> Product:
        product = await self.vectorstore.get_product(product_id)
        if product is None:
            raise RecordNotFoundError(f"Product {product_id} not found")
        return product

    @measure_latency("product_update")
    async def update_product(self, product_id: str, update: ProductUpdate) -> ProductWriteResponse:
        """Apply a partial update and re-index the product.

        New variants are generated before the old points are deleted, so a
        generation failure leaves the stored product untouched.
        """
        with log_context(product_id=product_id):
            current = await self.get_product(product_id)
            product = current.apply_update(update)

            variants = await self.generator.generate_with_embeddings(
                product, settings.variant_default_count
            )
            await self.vectorstore.delete_product(product_id)
            await self.vectorstore.insert_product(product, variants)
            logger.info("product_updated", variants=len(variants))
        return ProductWriteResponse(
            product_id=product.id,
            name=product.name,
            variants_count=len(variants),
            updated_at=product.updated_at,
        )

    async def delete_product(self, product_id: str) -> ProductDeleteResponse:
        await self.vectorstore.delete_product(product_id)
        logger.info("product_deleted", product_id=product_id)
        return ProductDeleteResponse(product_id=product_id, deleted_at=datetime.now(timezone.utc))

    @measure_latency("batch_import")
    async def batch_import(self, products: list[ProductCreate]) -> BatchImportResponse:
        """
        Index each product independently; one failure never stops the batch.
        """
        if not settings.enable_batch_import:
            raise FeatureDisabledError("Batch import is disabled")

        response = BatchImportResponse(total=len(products), process_id=str(uuid4()))
        with log_context(process_id=response.process_id):
            await self._import_all(products, response)
        return response

    async def _import_all(
        self, products: list[ProductCreate], response: BatchImportResponse
    ) -> None:
        logger.info("batch_import_started", total=response.total)

        for index, payload in enumerate(products):
            product = payload.to_product()
            try:
                with log_context(index=index, product_id=product.id):
                    await self._index(product, settings.variant_batch_count)
            except Exception as exc:  # noqa: BLE001
                message = getattr(exc, "message", None) or str(exc)
                logger.error(
                    "batch_import_item_failed", index=index, product=product.name, error=message
                )
                response.failed += 1
                response.errors.append(
                    BatchImportError(index=index, product=product.name, error=message)
                )
                continue
            response.success += 1

        metrics_counter("batch_import_completed", failed=response.failed > 0)
        logger.info("batch_import_completed", success=response.success, failed=response.failed)

    @measure_latency("variant_regenerate")
    async def regenerate_variants(self, product_id: str, count: int) -> VariantRegenerateResponse:
        if not settings.enable_variant_generation:
            raise FeatureDisabledError("Variant generation is disabled")

        if count <= 0 or count > MAX_VARIANT_COUNT:
            count = DEFAULT_VARIANT_COUNT
        with log_context(product_id=product_id):
            product, variants = await self.generator.regenerate_variants(product_id, count)
        return VariantRegenerateResponse(
            product_id=product.id,
            variant_count=count,
            variants_count=len(variants),
            regenerated_at=datetime.now(timezone.utc),
        )

    async def _index(self, product: Product, count: int) -> int:
        variants = await self.generator.generate_with_embeddings(product, count)
        await self.vectorstore.insert_product(product, variants)
        return len(variants)
