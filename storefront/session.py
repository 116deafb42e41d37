"""
Storefront session - construction and teardown of the cart/wishlist core.

One object per shopper session, handed to whatever UI needs it:

    async with create_session() as session:
        await session.cart.add_item(LineItemKey("prod-1", "M"))
        print(session.cart.totals())
"""

import asyncio
from typing import Optional

from storefront.api.client import StorefrontAPI
from storefront.cache import InMemoryCache, LocalCache, RedisCache, get_redis
from storefront.cart.service import CartManager
from storefront.config import STOREFRONT_API_URL, UPSTASH_REDIS_REST_TOKEN, UPSTASH_REDIS_REST_URL
from storefront.logging import get_logger
from storefront.models import LineItemKey
from storefront.services.notifications import AlertNotifier, Notifier
from storefront.services.transfer import move_to_cart, move_to_wishlist
from storefront.state import OperationResult
from storefront.wishlist.service import WishlistManager

logger = get_logger(__name__)


class StorefrontSession:
    """Wires the API client, cache and notifier into both managers."""

    def __init__(self, api, cache: Optional[LocalCache] = None, notifier: Optional[Notifier] = None):
        self.api = api
        self.cache = cache
        self.notifier = notifier
        self.cart = CartManager(api, cache, notifier)
        self.wishlist = WishlistManager(api, cache, notifier)
        self._closed = False

    async def start(self) -> tuple[OperationResult, OperationResult]:
        """Paint from cache, then fetch both lists concurrently."""
        await asyncio.gather(self.cart.hydrate(), self.wishlist.hydrate())
        cart_result, wishlist_result = await asyncio.gather(self.cart.load(), self.wishlist.load())
        logger.info(
            f"Session started (cart: {'ok' if cart_result.success else 'degraded'}, "
            f"wishlist: {'ok' if wishlist_result.success else 'degraded'})"
        )
        return cart_result, wishlist_result

    async def move_to_cart(self, key: LineItemKey, quantity: int = 1) -> OperationResult:
        return await move_to_cart(self.wishlist, self.cart, key, quantity)

    async def move_to_wishlist(self, key: LineItemKey) -> OperationResult:
        return await move_to_wishlist(self.cart, self.wishlist, key)

    async def complete_checkout(self) -> OperationResult:
        """Order placed: empty the cart."""
        return await self.cart.clear()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.cart.reset()
        self.wishlist.reset()
        aclose = getattr(self.api, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> "StorefrontSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def create_session(
    base_url: str = STOREFRONT_API_URL,
    cache: Optional[LocalCache] = None,
    notifier: Optional[Notifier] = None,
    namespace: str = "default",
) -> StorefrontSession:
    """
    Build a session from configuration.

    Without an explicit cache, Upstash Redis is used when configured and an
    in-memory cache otherwise.
    """
    if cache is None:
        if UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN:
            cache = RedisCache(get_redis(), namespace=namespace)
        else:
            cache = InMemoryCache()
    api = StorefrontAPI(base_url=base_url, cache=cache)
    return StorefrontSession(api, cache, notifier or AlertNotifier())
