"""
ShopSearch: LLM intent parsing + vector retrieval over product variants
"""

__version__ = "0.1.0"
