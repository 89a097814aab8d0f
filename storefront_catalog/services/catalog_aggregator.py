import logging
from typing import Any, Dict, List, Optional

from storefront_catalog.config import settings
from storefront_catalog.exceptions import TenantNotFound, UpstreamError
from storefront_catalog.models.schemas import Product
from storefront_catalog.services.credential_store import CredentialStore
from storefront_catalog.services.product_cache import ProductCache
from storefront_catalog.services.shopify_client import PageKind, ShopifyAdminClient
from storefront_catalog.utils.helpers import dig, format_price, normalize_shop

logger = logging.getLogger(__name__)


class CatalogAggregator:
    """
    Fetches a store's full product catalog from Shopify and caches it.

    Pages are requested one after another, each using the cursor returned by
    the previous page. Concurrent misses for the same shop are not coalesced;
    each performs its own fetch and the last one to finish owns the cache entry.
    """

    def __init__(self, credential_store: CredentialStore, client: ShopifyAdminClient,
                 cache: ProductCache, placeholder_image_url: Optional[str] = None,
                 currency: Optional[str] = None):
        self.credential_store = credential_store
        self.client = client
        self.cache = cache
        self.placeholder_image_url = placeholder_image_url or settings.PLACEHOLDER_IMAGE_URL
        self.currency = currency or settings.PRICE_CURRENCY

    async def get_products(self, shop: str) -> List[Product]:
        """
        Return every product for a shop, served from cache while fresh

        Raises:
            TenantNotFound: The shop has no stored access token
            AuthError: Shopify rejected the access token
            UpstreamError: Any other Shopify failure, including transport errors
        """
        shop = normalize_shop(shop)

        cached = self.cache.get(shop)
        if cached is not None:
            logger.info(f"[Cache Hit] Serving products for {shop}")
            return cached

        access_token = self.credential_store.resolve(shop)
        if not access_token:
            logger.error(f"No access token stored for {shop}")
            raise TenantNotFound(shop)

        try:
            nodes = await self._fetch_all_nodes(shop, access_token)
        except Exception as e:
            logger.error(f"Failed to fetch products for {shop}: {e}")
            raise

        try:
            products = [self.normalize_product(node, shop) for node in nodes]
        except ValueError as e:
            logger.error(f"Malformed product record from Shopify for {shop}: {e}")
            raise UpstreamError(f"Shopify API Error: malformed product record for {shop}") from e

        if products:
            self.cache.set(shop, products)
        logger.info(f"Fetched {len(products)} products for {shop}")

        return products

    def invalidate(self, shop: str) -> bool:
        """Drop any cached snapshot for a shop"""
        return self.cache.invalidate(normalize_shop(shop))

    async def _fetch_all_nodes(self, shop: str, access_token: str) -> List[Dict[str, Any]]:
        all_nodes: List[Dict[str, Any]] = []
        cursor = None
        page_number = 0

        while True:
            page_number += 1
            page = await self.client.fetch_page(shop, access_token, cursor)

            if page.kind == PageKind.EMPTY:
                logger.warning(f"No products payload on page {page_number} for {shop}, stopping")
                break

            all_nodes.extend(page.nodes)
            logger.debug(f"Page {page_number} for {shop}: {len(page.nodes)} products")

            if not page.has_next_page:
                break
            cursor = page.end_cursor

        return all_nodes

    def normalize_product(self, node: Dict[str, Any], shop: str) -> Product:
        """Map a raw Admin API product node onto the Product shape"""
        variant_edges = dig(node, 'variants', 'edges')
        # Only the first variant is used for pricing
        first_edge = variant_edges[0] if isinstance(variant_edges, list) and variant_edges else None
        variant = dig(first_edge, 'node')
        if not isinstance(variant, dict):
            variant = {}

        tags = node.get('tags') or ()
        if not isinstance(tags, (list, tuple)):
            raise UpstreamError(f"Shopify API Error: tags for {node.get('id')} are not a list")

        image_url = dig(node, 'featuredImage', 'url') or self.placeholder_image_url
        url = node.get('onlineStoreUrl') or f"https://{shop}/products/{node.get('handle')}"

        return Product(
            id=str(node.get('id') or ''),
            name=node.get('title') or '',
            url=url,
            image_url=image_url,
            description=node.get('description') or '',
            suitable_for=tuple(tags),
            key_ingredients=(),
            variant_id=variant.get('id'),
            price=format_price(variant.get('price'), self.currency) or 'N/A',
            original_price=format_price(variant.get('compareAtPrice'), self.currency),
            product_type=node.get('productType')
        )
