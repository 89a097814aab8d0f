"""
Storefront Catalog Proxy

Serves the product catalogs of registered Shopify stores:
- Store registration with Admin API access tokens
- Paginated catalog retrieval over the Admin GraphQL API
- Normalized product records cached per store
"""

__version__ = "1.0.0"
