"""
API Routers
FastAPI route handlers
"""

from shopsearch.routers import config, products, search

__all__ = [
    "config",
    "products",
    "search",
]
