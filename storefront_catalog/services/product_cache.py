"""In-memory TTL cache of normalized product snapshots, keyed by shop domain."""

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from storefront_catalog.config import settings
from storefront_catalog.models.schemas import Product

logger = logging.getLogger(__name__)


class ProductCache:
    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = settings.PRODUCT_CACHE_TTL if ttl_seconds is None else ttl_seconds
        self.clock = clock
        self._entries: Dict[str, Tuple[List[Product], float]] = {}

    def get(self, shop: str) -> Optional[List[Product]]:
        """Return the cached snapshot if present and still fresh, else None"""
        entry = self._entries.get(shop)
        if entry is None:
            return None

        products, captured_at = entry
        if self.clock() - captured_at >= self.ttl_seconds:
            # Stale entries stay in place until a successful refresh replaces them
            logger.debug(f"Cache entry for {shop} expired")
            return None

        return list(products)

    def set(self, shop: str, products: List[Product]) -> None:
        """Replace the snapshot for a shop, stamped with the current time"""
        self._entries[shop] = (list(products), self.clock())

    def invalidate(self, shop: str) -> bool:
        return self._entries.pop(shop, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, shop: str):
        return self.get(shop) is not None
