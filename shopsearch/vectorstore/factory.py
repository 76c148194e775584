"""
VectorStore Factory
Creates appropriate VectorStore implementation based on configuration
"""

from shopsearch.core.config import settings
from shopsearch.core.logging import get_logger
from shopsearch.vectorstore.mock import MockVectorStore
from shopsearch.vectorstore.protocol import VectorStoreProtocol
from shopsearch.vectorstore.qdrant import QdrantVectorStore

logger = get_logger(__name__)


def get_vectorstore() -> VectorStoreProtocol:
    """
    Get VectorStore implementation based on configuration

    Raises:
        ValueError: If vectorstore_type is not supported
    """
    vectorstore_type = settings.vectorstore_type

    logger.info(
        "vectorstore_factory",
        collection=settings.qdrant_collection,
        vectorstore_type=vectorstore_type,
    )

    if vectorstore_type == "mock":
        return MockVectorStore(collection=settings.qdrant_collection)

    if vectorstore_type == "qdrant":
        return QdrantVectorStore()

    raise ValueError(
        f"Unsupported vectorstore_type: {vectorstore_type}. Supported types: qdrant, mock"
    )
