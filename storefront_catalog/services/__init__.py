"""
Business logic services for catalog retrieval and store credentials
"""

from .credential_store import CredentialStore
from .product_cache import ProductCache
from .shopify_client import ShopifyAdminClient
from .catalog_aggregator import CatalogAggregator

__all__ = ["CredentialStore", "ProductCache", "ShopifyAdminClient", "CatalogAggregator"]
