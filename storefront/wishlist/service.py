"""Wishlist manager.

Same reconciliation rules as the cart, without quantities. Wishlist entries are
keyed by product only (the remote wishlist has no size), so callers may pass a
cart key and the variant is ignored.
"""
from storefront.config import CacheKeys
from storefront.errors import (
    ERROR_ADD_TO_WISHLIST,
    ERROR_LOAD_WISHLIST,
    ERROR_REMOVE_FROM_WISHLIST,
    ERROR_STILL_IN_WISHLIST,
    ServerError,
)
from storefront.models import LineItemKey
from storefront.state import ListStateManager, OperationResult
from storefront.wishlist.models import WishlistItem

MESSAGE_ADDED = "Added to wishlist"
MESSAGE_ALREADY_PRESENT = "Already in wishlist"
MESSAGE_REMOVED = "Removed from wishlist"


def wishlist_key(key: LineItemKey) -> LineItemKey:
    """Strip the variant; wishlist identity is the product alone."""
    if key.variant is None:
        return key
    return LineItemKey(key.product_id)


class WishlistManager(ListStateManager[WishlistItem]):
    """Owns the shopper's wishlist. ``contains`` is a set lookup."""

    kind = "wishlist"
    cache_key = CacheKeys.WISHLIST
    item_type = WishlistItem
    load_message = "Wishlist loaded"
    load_error = ERROR_LOAD_WISHLIST

    async def _fetch(self):
        return await self.api.get_wishlist()

    def contains(self, key: LineItemKey) -> bool:
        return wishlist_key(key) in self._index

    def get_item(self, key: LineItemKey):
        return self._index.get(wishlist_key(key))

    async def add_item(self, key: LineItemKey) -> OperationResult:
        """Save a product. Already saved is a success with no request."""
        key = wishlist_key(key)
        if key in self._index:
            return OperationResult(success=True, message=MESSAGE_ALREADY_PRESENT)

        return await self._mutate(
            key,
            lambda: self.api.add_to_wishlist(key),
            success_message=MESSAGE_ADDED,
            failure_message=ERROR_ADD_TO_WISHLIST,
        )

    async def remove_item(self, key: LineItemKey) -> OperationResult:
        key = wishlist_key(key)

        def still_present():
            if key in self._index:
                return ServerError(ERROR_STILL_IN_WISHLIST)
            return None

        return await self._mutate(
            key,
            lambda: self.api.remove_from_wishlist(key),
            success_message=MESSAGE_REMOVED,
            failure_message=ERROR_REMOVE_FROM_WISHLIST,
            verify=still_present,
        )

    async def toggle(self, key: LineItemKey) -> OperationResult:
        """Heart button on the product page."""
        if self.contains(key):
            return await self.remove_item(key)
        return await self.add_item(key)
