"""
Data models and schemas for the storefront catalog proxy
"""

from .schemas import (
    Product,
    RegisterStoreRequest,
    StoreSummary,
    SaveStoreResponse,
    ProductsResponse,
    ErrorResponse
)

__all__ = [
    "Product",
    "RegisterStoreRequest",
    "StoreSummary",
    "SaveStoreResponse",
    "ProductsResponse",
    "ErrorResponse"
]
