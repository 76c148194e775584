"""Product indexing router"""

from fastapi import APIRouter, Depends, status

from shopsearch.core.dependencies import get_product_service
from shopsearch.schemas.product import (
    BatchImportRequest,
    BatchImportResponse,
    Product,
    ProductCreate,
    ProductDeleteResponse,
    ProductUpdate,
    ProductWriteResponse,
    VariantRegenerateRequest,
    VariantRegenerateResponse,
)
from shopsearch.services.product_service import ProductService


router = APIRouter(prefix="/products", tags=["products"])


@router.post(
    "",
    response_model=ProductWriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create and index a product",
)
async def create_product(
    payload: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> ProductWriteResponse:
    return await service.create_product(payload)


@router.post(
    "/batch",
    response_model=BatchImportResponse,
    summary="Import several products",
)
async def batch_import(
    payload: BatchImportRequest,
    service: ProductService = Depends(get_product_service),
) -> BatchImportResponse:
    return await service.batch_import(payload.products)


@router.get(
    "/{product_id}",
    response_model=Product,
    summary="Get a product",
)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> Product:
    return await service.get_product(product_id)


@router.put(
    "/{product_id}",
    response_model=ProductWriteResponse,
    summary="Update a product and re-index it",
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service),
) -> ProductWriteResponse:
    return await service.update_product(product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=ProductDeleteResponse,
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> ProductDeleteResponse:
    return await service.delete_product(product_id)


@router.post(
    "/{product_id}/variants/regenerate",
    response_model=VariantRegenerateResponse,
    summary="Regenerate product variants",
)
async def regenerate_variants(
    product_id: str,
    payload: VariantRegenerateRequest | None = None,
    service: ProductService = Depends(get_product_service),
) -> VariantRegenerateResponse:
    count = payload.variant_count if payload is not None else 0
    return await service.regenerate_variants(product_id, count)
