import logging
import re
from typing import Optional, Any

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)


def normalize_shop(shop: Optional[str]) -> str:
    """
    Normalize a shop domain to the key stores are registered under

    Strips whitespace, a leading http:// or https:// and one trailing slash,
    so "https://shop.example.com/" and "shop.example.com" map to the same store.

    Args:
        shop: Raw shop domain as supplied by a caller

    Returns:
        str: Normalized shop domain ("" when nothing is left)
    """
    if not shop:
        return ""

    shop = _SCHEME_RE.sub('', shop.strip())
    if shop.endswith('/'):
        shop = shop[:-1]
    return shop.strip()


def format_price(amount: Any, currency: str) -> Optional[str]:
    """
    Format an upstream money amount for display

    Args:
        amount: Decimal string (or number) as returned by the Admin API
        currency: Currency code prefix

    Returns:
        str: e.g. "INR 499.00", or None when there is no usable amount
    """
    if amount is None or amount == "":
        return None

    try:
        return f"{currency} {float(amount):.2f}"
    except (ValueError, TypeError):
        logger.warning(f"Could not parse price value: {amount!r}")
        return None


def dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing"""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data
