import asyncio
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import BaseModel

from storefront_catalog.config import settings
from storefront_catalog.exceptions import AuthError, TransportError, UpstreamError
from storefront_catalog.utils.helpers import dig

logger = logging.getLogger(__name__)


# GraphQL query for one page of the product catalog
CATALOG_PAGE_QUERY = """
query CatalogPage($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        title
        description
        productType
        handle
        onlineStoreUrl
        featuredImage {
          url
        }
        variants(first: 1) {
          edges {
            node {
              id
              price
              compareAtPrice
            }
          }
        }
        tags
      }
    }
  }
}
"""

AUTH_ERROR_MARKERS = ("invalid api key", "access token", "unauthorized")


class PageKind(str, Enum):
    PAGE = "page"
    EMPTY = "empty"


class CatalogPage(BaseModel):
    """One decoded page of the catalog, or the terminal 'no payload' case"""
    kind: PageKind
    nodes: List[Dict[str, Any]] = []
    has_next_page: bool = False
    end_cursor: Optional[str] = None

    @classmethod
    def empty(cls) -> "CatalogPage":
        return cls(kind=PageKind.EMPTY)


def _is_auth_failure(errors: Any) -> bool:
    text = json.dumps(errors).lower()
    return any(marker in text for marker in AUTH_ERROR_MARKERS)


def has_errors(errors: Any) -> bool:
    """Any list or object under errors counts, even an empty one"""
    if isinstance(errors, (list, dict)):
        return True
    return bool(errors)


def _node_shape_ok(node: Dict[str, Any]) -> bool:
    tags = node.get("tags")
    if tags is not None and not (isinstance(tags, list) and all(isinstance(tag, str) for tag in tags)):
        return False

    variants = node.get("variants")
    if variants is None:
        return True
    edges = variants.get("edges") if isinstance(variants, dict) else None
    if edges is None:
        return isinstance(variants, dict)
    if not isinstance(edges, list):
        return False
    return all(isinstance(edge, dict) and isinstance(edge.get("node"), dict) for edge in edges)


def decode_catalog_page(shop: str, body: Any) -> CatalogPage:
    """
    Decode an Admin API GraphQL response body into a CatalogPage

    Args:
        shop: Shop domain, used for error context
        body: Parsed JSON body

    Returns:
        CatalogPage: PAGE with nodes and cursor info, or EMPTY when the
        response carries no products payload at all

    Raises:
        AuthError: If the error payload reports a bad access token
        UpstreamError: For any other error payload or malformed shape
    """
    if not isinstance(body, dict):
        raise UpstreamError(f"Shopify API Error: unexpected response body for {shop}")

    errors = body.get("errors")
    if has_errors(errors):
        logger.error(f"Shopify Admin API Errors for {shop}: {errors}")
        if _is_auth_failure(errors):
            raise AuthError(shop, json.dumps(errors))
        raise UpstreamError(f"Shopify API Error: {json.dumps(errors)}")

    products = dig(body, "data", "products")
    if not products:
        return CatalogPage.empty()
    if not isinstance(products, dict):
        raise UpstreamError(f"Shopify API Error: malformed products payload for {shop}")

    edges = products.get("edges") or []
    if not isinstance(edges, list):
        raise UpstreamError(f"Shopify API Error: malformed edges for {shop}")

    nodes = []
    for edge in edges:
        node = edge.get("node") if isinstance(edge, dict) else None
        if not isinstance(node, dict):
            raise UpstreamError(f"Shopify API Error: malformed product edge for {shop}")
        if not _node_shape_ok(node):
            logger.error(f"Malformed product node from Shopify for {shop}: {node.get('id')}")
            raise UpstreamError(f"Shopify API Error: malformed product record for {shop}")
        nodes.append(node)

    page_info = products.get("pageInfo") or {}
    if not isinstance(page_info, dict):
        raise UpstreamError(f"Shopify API Error: malformed pageInfo for {shop}")
    has_next_page = bool(page_info.get("hasNextPage"))
    end_cursor = page_info.get("endCursor") or None

    if has_next_page and not end_cursor:
        raise UpstreamError(f"Shopify API Error: next page advertised without a cursor for {shop}")

    return CatalogPage(
        kind=PageKind.PAGE,
        nodes=nodes,
        has_next_page=has_next_page,
        end_cursor=end_cursor
    )


class ShopifyAdminClient:
    """Thin async client for the Shopify Admin GraphQL catalog query"""

    def __init__(self, session_factory=aiohttp.ClientSession, timeout: Optional[float] = None,
                 api_version: Optional[str] = None, page_size: Optional[int] = None):
        self.session_factory = session_factory
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.REQUEST_TIMEOUT)
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.page_size = page_size or settings.PAGE_SIZE

    def graphql_url(self, shop: str) -> str:
        path = settings.SHOPIFY_GRAPHQL_PATH.format(version=self.api_version)
        return f"https://{shop}{path}"

    def build_payload(self, cursor: Optional[str] = None) -> Dict[str, Any]:
        variables: Dict[str, Any] = {"first": self.page_size}
        if cursor:
            variables["after"] = cursor
        return {"query": CATALOG_PAGE_QUERY, "variables": variables}

    async def fetch_page(self, shop: str, access_token: str, cursor: Optional[str] = None) -> CatalogPage:
        """Fetch and decode one page of the catalog"""
        headers = {
            'Content-Type': 'application/json',
            'X-Shopify-Access-Token': access_token,
        }

        try:
            async with self.session_factory(timeout=self.timeout) as session:
                async with session.post(
                    self.graphql_url(shop),
                    json=self.build_payload(cursor),
                    headers=headers
                ) as response:
                    status = response.status
                    try:
                        body = await response.json(content_type=None)
                    except ValueError as e:
                        logger.error(f"Non-JSON response from Shopify for {shop} (HTTP {status}): {e}")
                        raise UpstreamError(f"Shopify API Error: non-JSON response (HTTP {status})") from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Transport error calling Shopify for {shop}: {e!r}")
            raise TransportError(f"Failed to reach Shopify for {shop}: {e!r}") from e

        if status in (401, 403):
            logger.error(f"Shopify rejected access token for {shop} (HTTP {status})")
            raise AuthError(shop, f"HTTP {status}")

        if status >= 400 and not (isinstance(body, dict) and has_errors(body.get("errors"))):
            logger.error(f"Shopify returned HTTP {status} for {shop}")
            raise UpstreamError(f"Shopify API Error: HTTP {status}")

        return decode_catalog_page(shop, body)
