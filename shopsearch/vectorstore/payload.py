"""
Product <-> point payload mapping

Each variant point carries the full denormalized product. Known attributes
use fixed keys; overflow attributes are flattened to ``attr_<key>`` strings so
they stay filterable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from shopsearch.schemas.product import Product, ProductStatus, ProductVariant

ATTRIBUTE_PREFIX = "attr_"

_STRING_FIELDS = (
    "category",
    "description",
    "currency",
    "brand",
    "color",
    "size",
    "material",
    "style",
    "gender",
    "occasion",
)

# Top-level payload keys a filter can target directly.
TOP_LEVEL_FIELDS = frozenset((*_STRING_FIELDS, "product_id", "product_name", "price", "status", "tags"))


def build_payload(product: Product, variant: ProductVariant) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "product_id": product.id,
        "variant_id": variant.id,
        "variant_text": variant.text,
        "product_name": product.name,
        "price": product.price,
        "status": product.status.value,
        "created_at": _to_unix(product.created_at),
        "updated_at": _to_unix(product.updated_at),
        "generated_at": _to_unix(variant.generated_at),
    }
    for field in _STRING_FIELDS:
        payload[field] = getattr(product, field)
    if product.tags:
        payload["tags"] = list(product.tags)
    if product.image_urls:
        payload["image_urls"] = list(product.image_urls)
    for key, value in product.attributes.items():
        payload[f"{ATTRIBUTE_PREFIX}{key}"] = str(value)
    return payload


def filter_condition_key(key: str) -> str:
    """Payload key for a filter on ``key``; unknown keys address overflow attributes."""
    if key in TOP_LEVEL_FIELDS or key.startswith(ATTRIBUTE_PREFIX):
        return key
    return f"{ATTRIBUTE_PREFIX}{key}"


def product_from_payload(payload: dict[str, Any]) -> Product:
    """Rebuild a Product from a stored point payload."""
    status = payload.get("status") or ProductStatus.ACTIVE.value
    try:
        product_status = ProductStatus(status)
    except ValueError:
        product_status = ProductStatus.ACTIVE

    return Product(
        id=str(payload.get("product_id") or ""),
        name=str(payload.get("product_name") or ""),
        price=float(payload.get("price") or 0.0),
        status=product_status,
        created_at=_from_unix(payload.get("created_at")),
        updated_at=_from_unix(payload.get("updated_at")),
        tags=[str(t) for t in payload.get("tags") or []],
        image_urls=[str(u) for u in payload.get("image_urls") or []],
        attributes={
            key[len(ATTRIBUTE_PREFIX):]: value
            for key, value in payload.items()
            if key.startswith(ATTRIBUTE_PREFIX)
        },
        **{field: str(payload.get(field) or "") for field in _STRING_FIELDS},
    )


def _to_unix(value: datetime | None) -> int | None:
    return int(value.timestamp()) if value is not None else None


def _from_unix(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None
