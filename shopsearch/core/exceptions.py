"""
Custom Exceptions for the ShopSearch pipeline
"""


class ShopSearchException(Exception):
    """Base exception for all ShopSearch errors"""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# Upstream (embedding / chat) Exceptions
class UpstreamError(ShopSearchException):
    """External API call failed or returned a non-success status"""

    pass


class DecodeError(UpstreamError):
    """External API returned a body that could not be decoded"""

    pass


# VectorStore Exceptions
class VectorStoreError(ShopSearchException):
    """VectorStore operation failed"""

    pass


class RetrievalError(VectorStoreError):
    """Similarity query against the vector store failed"""

    pass


# Pipeline Exceptions
class ValidationError(ShopSearchException):
    """Structured intent is semantically invalid"""

    pass


class NoVariantsError(ShopSearchException):
    """Variant generation produced nothing usable"""

    pass


class EmptyInputError(ShopSearchException):
    """Caller passed no work"""

    pass


class RecordNotFoundError(ShopSearchException):
    """Requested product not found in the vector store"""

    pass


class FeatureDisabledError(ShopSearchException):
    """Requested feature is switched off in configuration"""

    pass
