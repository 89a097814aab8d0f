import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status, Depends

from storefront_catalog.exceptions import AuthError, TenantNotFound, UpstreamError, ValidationError
from storefront_catalog.models.schemas import (
    RegisterStoreRequest, SaveStoreResponse, StoreSummary, ProductsResponse
)
from storefront_catalog.services.catalog_aggregator import CatalogAggregator
from storefront_catalog.services.credential_store import CredentialStore
from storefront_catalog.services.product_cache import ProductCache
from storefront_catalog.services.shopify_client import ShopifyAdminClient

logger = logging.getLogger(__name__)
router = APIRouter()


# Dependency injection for services
@lru_cache()
def get_credential_store() -> CredentialStore:
    return CredentialStore()


@lru_cache()
def get_product_cache() -> ProductCache:
    # One cache per process, shared by every request
    return ProductCache()


def get_shopify_client() -> ShopifyAdminClient:
    return ShopifyAdminClient()


def get_catalog_aggregator(
        credential_store: CredentialStore = Depends(get_credential_store),
        client: ShopifyAdminClient = Depends(get_shopify_client),
        cache: ProductCache = Depends(get_product_cache)
) -> CatalogAggregator:
    return CatalogAggregator(credential_store, client, cache)


@router.post("/stores", response_model=SaveStoreResponse)
async def save_store(
        request: Optional[RegisterStoreRequest] = None,
        credential_store: CredentialStore = Depends(get_credential_store),
        cache: ProductCache = Depends(get_product_cache)
):
    """
    Register a store or replace its Admin API access token

    **Parameters:**
    - shop: Store domain, e.g. my-store.myshopify.com (scheme and trailing slash are ignored)
    - accessToken: Shopify Admin API access token

    **Error Codes:**
    - 400: Shop domain or access token missing
    - 500: The store could not be saved
    """
    try:
        request = request or RegisterStoreRequest()
        store = credential_store.register(request.shop, request.access_token)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Save Store Error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save store: {e}"
        )

    # A new token must not keep serving a snapshot fetched with the old one
    cache.invalidate(store.shop)

    return SaveStoreResponse(
        store=StoreSummary(shop=store.shop, installed_at=store.installed_at)
    )


@router.get("/stores", response_model=List[StoreSummary])
async def list_stores(
        credential_store: CredentialStore = Depends(get_credential_store)
):
    """List registered stores (access tokens are never returned)"""
    try:
        stores = credential_store.list()
    except Exception as e:
        logger.error(f"Error listing stores: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch stores: {e}"
        )

    return [StoreSummary(shop=shop, installed_at=installed_at) for shop, installed_at in stores]


@router.get("/products", response_model=ProductsResponse)
async def get_products(
        shop: Optional[str] = None,
        aggregator: CatalogAggregator = Depends(get_catalog_aggregator)
):
    """
    Fetch the full product catalog of a registered store

    Results are cached per store for ten minutes.

    **Error Codes:**
    - 400: shop query parameter missing
    - 404: Store is not registered
    - 401: Shopify rejected the stored access token
    - 500: Any other Shopify failure
    """
    if not shop or not shop.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Shop domain query parameter is required"
        )

    try:
        products = await aggregator.get_products(shop)
    except TenantNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Shopify Admin API Token. Please check your credentials."
        )
    except UpstreamError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching products for {shop}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )

    return ProductsResponse(shop=shop, products=products)
