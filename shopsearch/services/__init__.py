"""
Search and indexing services
"""

from shopsearch.services.product_service import ProductService
from shopsearch.services.query_interpreter import QueryInterpreter
from shopsearch.services.retrieval import RetrievalService, build_filter
from shopsearch.services.search_service import SearchService
from shopsearch.services.variant_generator import VariantGenerator

__all__ = [
    "ProductService",
    "QueryInterpreter",
    "RetrievalService",
    "SearchService",
    "VariantGenerator",
    "build_filter",
]
