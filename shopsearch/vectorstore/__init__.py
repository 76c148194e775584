from shopsearch.vectorstore.factory import get_vectorstore
from shopsearch.vectorstore.protocol import StoreState, VectorStoreProtocol
from shopsearch.vectorstore.schemas import FieldCondition, Filter, ScoredPoint

__all__ = [
    "FieldCondition",
    "Filter",
    "ScoredPoint",
    "StoreState",
    "VectorStoreProtocol",
    "get_vectorstore",
]
