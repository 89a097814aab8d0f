import pydantic
import pytest

from storefront_catalog.exceptions import AuthError, TenantNotFound, TransportError, UpstreamError
from storefront_catalog.services.catalog_aggregator import CatalogAggregator
from fakes import FakeShopifyClient, catalog_body, make_node, paged_bodies

SHOP = "shop.example.com"
PLACEHOLDER = "https://placehold.co/200x200?text=No+Image"


@pytest.fixture
def registered_store(credential_store):
    credential_store.register(f"https://{SHOP}/", "shpat_123")
    return credential_store


def make_aggregator(credential_store, product_cache, responses):
    client = FakeShopifyClient(responses)
    aggregator = CatalogAggregator(
        credential_store, client, product_cache,
        placeholder_image_url=PLACEHOLDER, currency="INR"
    )
    return aggregator, client


@pytest.mark.asyncio
async def test_collects_every_page_in_upstream_order(registered_store, product_cache):
    aggregator, client = make_aggregator(registered_store, product_cache, paged_bodies(50, 50, 20))

    products = await aggregator.get_products(SHOP)

    assert len(products) == 120
    assert [p.id for p in products] == [f"gid://shopify/Product/{i}" for i in range(120)]
    assert [cursor for _, _, cursor in client.calls] == [None, "cursor-1", "cursor-2"]
    assert all(token == "shpat_123" for _, token, _ in client.calls)


@pytest.mark.asyncio
async def test_second_call_within_ttl_is_served_from_cache(registered_store, product_cache, clock):
    aggregator, client = make_aggregator(registered_store, product_cache, paged_bodies(3))

    first = await aggregator.get_products(SHOP)
    clock.advance(599)
    second = await aggregator.get_products(SHOP)

    assert len(client.calls) == 1
    assert [p.model_dump_json() for p in second] == [p.model_dump_json() for p in first]


@pytest.mark.asyncio
async def test_expired_entry_triggers_one_fresh_fetch(registered_store, product_cache, clock):
    aggregator, client = make_aggregator(registered_store, product_cache, paged_bodies(2, 1))

    await aggregator.get_products(SHOP)
    assert len(client.calls) == 2

    clock.advance(600)
    products = await aggregator.get_products(SHOP)

    assert len(client.calls) == 4
    assert [cursor for _, _, cursor in client.calls[2:]] == [None, "cursor-1"]
    assert len(products) == 3


@pytest.mark.asyncio
async def test_error_payload_mid_pagination_fails_and_leaves_cache_empty(registered_store, product_cache):
    bodies = paged_bodies(50, 50, 20)
    bodies[1] = {"errors": [{"message": "Internal error. Looks like something went wrong on our end."}]}
    aggregator, client = make_aggregator(registered_store, product_cache, bodies)

    with pytest.raises(UpstreamError):
        await aggregator.get_products(SHOP)

    assert len(client.calls) == 2
    assert product_cache.get(SHOP) is None
    assert len(product_cache) == 0


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_snapshot_untouched(registered_store, product_cache, clock):
    aggregator, _ = make_aggregator(registered_store, product_cache, paged_bodies(2))
    await aggregator.get_products(SHOP)
    snapshot = product_cache._entries[SHOP]

    clock.advance(601)
    failing, _ = make_aggregator(registered_store, product_cache, [TransportError("connection reset")])
    with pytest.raises(TransportError):
        await failing.get_products(SHOP)

    assert product_cache._entries[SHOP] is snapshot


@pytest.mark.asyncio
async def test_unknown_shop_raises_tenant_not_found(credential_store, product_cache):
    aggregator, client = make_aggregator(credential_store, product_cache, paged_bodies(1))

    with pytest.raises(TenantNotFound) as exc_info:
        await aggregator.get_products("missing.example.com")

    assert "not found" in str(exc_info.value)
    assert client.calls == []


@pytest.mark.asyncio
async def test_rejected_token_raises_auth_error_and_caches_nothing(registered_store, product_cache):
    body = {"errors": "[API] Invalid API key or access token (unrecognized login or wrong password)"}
    aggregator, _ = make_aggregator(registered_store, product_cache, [body])

    with pytest.raises(AuthError) as exc_info:
        await aggregator.get_products(SHOP)

    assert "Invalid API key" in str(exc_info.value)
    assert len(product_cache) == 0


@pytest.mark.asyncio
async def test_missing_payload_ends_pagination_with_partial_results(registered_store, product_cache):
    bodies = [
        catalog_body([make_node(1), make_node(2)], has_next_page=True, end_cursor="cursor-1"),
        {"data": None},
    ]
    aggregator, client = make_aggregator(registered_store, product_cache, bodies)

    products = await aggregator.get_products(SHOP)

    assert [p.id for p in products] == ["gid://shopify/Product/1", "gid://shopify/Product/2"]
    assert len(client.calls) == 2
    assert product_cache.get(SHOP) == products


@pytest.mark.asyncio
async def test_empty_catalog_is_not_cached(registered_store, product_cache):
    aggregator, client = make_aggregator(registered_store, product_cache, [catalog_body([])])

    assert await aggregator.get_products(SHOP) == []
    assert await aggregator.get_products(SHOP) == []
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_shop_variants_share_one_cache_entry(registered_store, product_cache):
    aggregator, client = make_aggregator(registered_store, product_cache, paged_bodies(1))

    await aggregator.get_products(SHOP)
    await aggregator.get_products(f"https://{SHOP}/")

    assert len(client.calls) == 1
    assert client.calls[0][0] == SHOP


@pytest.mark.asyncio
async def test_invalidate_forces_refetch(registered_store, product_cache):
    aggregator, client = make_aggregator(registered_store, product_cache, paged_bodies(1))

    await aggregator.get_products(SHOP)
    assert aggregator.invalidate(f"https://{SHOP}") is True
    await aggregator.get_products(SHOP)

    assert len(client.calls) == 2


# Normalization

def normalize(node):
    aggregator = CatalogAggregator(None, None, None, placeholder_image_url=PLACEHOLDER, currency="INR")
    return aggregator.normalize_product(node, SHOP)


def test_normalize_full_record():
    product = normalize(make_node(
        7,
        onlineStoreUrl="https://shop.example.com/products/glow-serum",
        tags=["oily skin", "acne"],
        variants={"edges": [{"node": {"id": "gid://shopify/ProductVariant/70", "price": "1299.5",
                                      "compareAtPrice": "1599"}}]},
    ))

    assert product.id == "gid://shopify/Product/7"
    assert product.name == "Product 7"
    assert product.url == "https://shop.example.com/products/glow-serum"
    assert product.image_url == "https://cdn.shopify.com/files/product-7.jpg"
    assert product.description == "Description 7"
    assert product.suitable_for == ("oily skin", "acne")
    assert product.key_ingredients == ()
    assert product.variant_id == "gid://shopify/ProductVariant/70"
    assert product.price == "INR 1299.50"
    assert product.original_price == "INR 1599.00"
    assert product.product_type == "Serum"


def test_normalize_missing_image_uses_placeholder():
    assert normalize(make_node(1, featuredImage=None)).image_url == PLACEHOLDER


def test_normalize_without_variant_has_no_price():
    product = normalize(make_node(1, variants={"edges": []}))

    assert product.price == "N/A"
    assert product.variant_id is None
    assert product.original_price is None


def test_normalize_builds_url_from_handle():
    assert normalize(make_node(3, onlineStoreUrl=None)).url == "https://shop.example.com/products/product-3"


def test_normalize_missing_tags_become_empty_list():
    assert normalize(make_node(1, tags=None)).suitable_for == ()


def test_normalize_serializes_with_camel_case_names():
    data = normalize(make_node(1)).model_dump(by_alias=True)

    assert set(data) == {
        "id", "name", "url", "imageUrl", "description", "suitableFor", "keyIngredients",
        "variantId", "price", "originalPrice", "productType",
    }


def test_normalize_rejects_string_tags():
    with pytest.raises(UpstreamError):
        normalize(make_node(1, tags="dry skin, oily skin"))


def test_normalize_ignores_non_object_variant_node():
    product = normalize(make_node(1, variants={"edges": [{"node": "oops"}]}))

    assert product.price == "N/A"
    assert product.variant_id is None


def test_normalized_product_cannot_be_mutated():
    product = normalize(make_node(1, tags=["dry skin"]))

    with pytest.raises(pydantic.ValidationError):
        product.name = "Renamed"
    assert not hasattr(product.suitable_for, "append")


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"variants": {"edges": [{"node": "oops"}]}},
    {"variants": {"edges": "oops"}},
    {"tags": "dry skin"},
    {"tags": ["dry skin", 3]},
])
async def test_malformed_record_fails_with_upstream_error(registered_store, product_cache, overrides):
    bodies = [catalog_body([make_node(1), make_node(2, **overrides)])]
    aggregator, _ = make_aggregator(registered_store, product_cache, bodies)

    with pytest.raises(UpstreamError):
        await aggregator.get_products(SHOP)

    assert len(product_cache) == 0


@pytest.mark.asyncio
async def test_cached_snapshot_tags_are_read_only(registered_store, product_cache):
    aggregator, _ = make_aggregator(registered_store, product_cache, paged_bodies(1))

    first = await aggregator.get_products(SHOP)
    second = await aggregator.get_products(SHOP)

    assert isinstance(first[0].suitable_for, tuple)
    assert second[0].suitable_for == ("dry skin",)
