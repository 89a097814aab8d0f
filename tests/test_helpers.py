import pytest

from storefront_catalog.utils.helpers import dig, format_price, normalize_shop


@pytest.mark.parametrize("raw", [
    "shop.example.com",
    "https://shop.example.com/",
    "http://shop.example.com",
    "  https://shop.example.com/  ",
])
def test_normalize_shop_strips_scheme_slash_and_whitespace(raw):
    assert normalize_shop(raw) == "shop.example.com"


def test_normalize_shop_only_strips_one_trailing_slash():
    assert normalize_shop("shop.example.com//") == "shop.example.com/"


def test_normalize_shop_empty_values():
    assert normalize_shop(None) == ""
    assert normalize_shop("   ") == ""
    assert normalize_shop("https://") == ""


def test_format_price_two_decimals():
    assert format_price("499", "INR") == "INR 499.00"
    assert format_price("12.5", "INR") == "INR 12.50"
    assert format_price(0, "INR") == "INR 0.00"


def test_format_price_missing_or_garbage():
    assert format_price(None, "INR") is None
    assert format_price("", "INR") is None
    assert format_price("free", "INR") is None


def test_dig_stops_at_missing_levels():
    data = {"a": {"b": {"c": 1}}, "x": None}
    assert dig(data, "a", "b", "c") == 1
    assert dig(data, "a", "missing", "c") is None
    assert dig(data, "x", "y") is None
    assert dig(None, "a") is None
