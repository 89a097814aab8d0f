"""
Utility functions and helpers
"""

from .helpers import (
    normalize_shop,
    format_price,
    dig
)

__all__ = [
    "normalize_shop",
    "format_price",
    "dig"
]
