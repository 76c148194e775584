"""
VectorStore Protocol (Interface)
Defines contract for all VectorStore implementations
"""

import enum
from typing import Any, Protocol

from shopsearch.schemas.product import Product, ProductVariant
from shopsearch.vectorstore.schemas import Filter, ScoredPoint, StoredPoint


class StoreState(str, enum.Enum):
    """Collection lifecycle: created lazily on first use."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class VectorStoreProtocol(Protocol):
    """
    Protocol for VectorStore implementations

    One point per product variant; every point carries the denormalized
    product payload so hits can be turned back into products.
    """

    @property
    def state(self) -> StoreState:
        ...

    async def ensure_ready(self) -> None:
        """
        Create the collection if absent

        Safe to call concurrently; an "already exists" answer counts as
        success.

        Raises:
            VectorStoreError: If the collection cannot be created
        """
        ...

    async def insert_product(self, product: Product, variants: list[ProductVariant]) -> None:
        """
        Upsert one point per variant

        Raises:
            VectorStoreError: If the upsert fails
        """
        ...

    async def search(
        self,
        vector: list[float],
        filter: Filter | None = None,
        limit: int = 10,
    ) -> list[ScoredPoint]:
        """
        Similarity query restricted by ``filter``

        Returns:
            Hits ordered by similarity (highest first)

        Raises:
            VectorStoreError: If the query fails
        """
        ...

    async def get_product(self, product_id: str) -> Product | None:
        """Product rebuilt from any of its points, or None."""
        ...

    async def delete_product(self, product_id: str) -> None:
        """Delete every point whose payload carries ``product_id``."""
        ...

    async def scroll(
        self,
        filter: Filter | None = None,
        limit: int = 100,
        offset: str | None = None,
    ) -> tuple[list[StoredPoint], str | None]:
        """
        Page through stored points

        Returns:
            (points, next_offset); next_offset is None on the last page
        """
        ...

    async def stats(self) -> dict[str, Any]:
        ...

    async def aclose(self) -> None:
        ...
