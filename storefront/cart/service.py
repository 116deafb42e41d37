"""Cart manager: canonical cart state reconciled against the remote service."""
from typing import Optional

from storefront.cart.models import CartLineItem
from storefront.config import CacheKeys
from storefront.errors import (
    ERROR_ADD_TO_CART,
    ERROR_CLEAR_CART,
    ERROR_INVALID_QUANTITY,
    ERROR_LOAD_CART,
    ERROR_QUANTITY_TOO_LOW,
    ERROR_REMOVE_FROM_CART,
    ERROR_STILL_IN_CART,
    ERROR_UPDATE_CART,
    ServerError,
)
from storefront.models import LineItemKey
from storefront.services.pricing import Totals, compute_totals, total_quantity
from storefront.state import ListStateManager, OperationResult


MESSAGE_ADDED = "Added to cart"
MESSAGE_INCREASED = "Quantity increased in cart"
MESSAGE_UPDATED = "Cart updated"
MESSAGE_REMOVED = "Removed from cart"
MESSAGE_CLEARED = "Cart cleared"


def _quantity_problem(quantity) -> Optional[str]:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return ERROR_INVALID_QUANTITY
    if quantity < 1:
        return ERROR_QUANTITY_TOO_LOW
    return None


class CartManager(ListStateManager[CartLineItem]):
    """
    Owns the shopper's cart.

    Features:
    - Server list is the only source of truth after a mutation
    - Rapid +/- clicks on one line: the last issued request wins
    - Lines are independent; a slow request never blocks another line
    - Local cache snapshot for offline/startup painting
    """

    kind = "cart"
    cache_key = CacheKeys.CART
    item_type = CartLineItem
    load_message = "Cart loaded"
    load_error = ERROR_LOAD_CART

    async def _fetch(self):
        return await self.api.get_cart()

    async def add_item(self, key: LineItemKey, quantity: int = 1) -> OperationResult:
        """Add ``quantity`` units of a product/variant to the cart."""
        problem = _quantity_problem(quantity)
        if problem:
            return self._reject(problem)

        # Advisory only: picks the wording, never whether to send
        message = MESSAGE_INCREASED if self.contains(key) else MESSAGE_ADDED
        self.log.debug(f"add_item x{quantity}", key=key)
        return await self._mutate(
            key,
            lambda: self.api.add_to_cart(key, quantity),
            success_message=message,
            failure_message=ERROR_ADD_TO_CART,
            prefer_server_message=False,
        )

    async def update_quantity(self, key: LineItemKey, new_quantity: int) -> OperationResult:
        """Set a line's quantity. Values below 1 are rejected; use remove_item."""
        problem = _quantity_problem(new_quantity)
        if problem:
            return self._reject(problem)

        return await self._mutate(
            key,
            lambda: self.api.update_cart_item(key, new_quantity),
            success_message=MESSAGE_UPDATED,
            failure_message=ERROR_UPDATE_CART,
        )

    async def increment(self, key: LineItemKey) -> OperationResult:
        """The "+" button: one more than the quantity currently shown."""
        item = self.get_item(key)
        if item is None:
            return await self.add_item(key, 1)
        return await self.update_quantity(key, item.quantity + 1)

    async def decrement(self, key: LineItemKey) -> OperationResult:
        """The "-" button: going below 1 removes the line."""
        item = self.get_item(key)
        if item is None or item.quantity <= 1:
            return await self.remove_item(key)
        return await self.update_quantity(key, item.quantity - 1)

    async def remove_item(self, key: LineItemKey) -> OperationResult:
        """Remove a line. Succeeds only if the key is gone from the server's list."""
        def still_present():
            if self.contains(key):
                return ServerError(ERROR_STILL_IN_CART)
            return None

        return await self._mutate(
            key,
            lambda: self.api.remove_from_cart(key),
            success_message=MESSAGE_REMOVED,
            failure_message=ERROR_REMOVE_FROM_CART,
            verify=still_present,
        )

    async def clear(self) -> OperationResult:
        """Empty the cart (checkout completion)."""
        return await self._mutate(
            None,
            self.api.clear_cart,
            success_message=MESSAGE_CLEARED,
            failure_message=ERROR_CLEAR_CART,
            whole_list=True,
        )

    # -------------------------------------------------------------------------
    # Derived values (computed on every call)
    # -------------------------------------------------------------------------

    def totals(self) -> Totals:
        return compute_totals(self._items)

    def total_quantity(self) -> int:
        return total_quantity(self._items)

    def summary(self, currency: str = "INR") -> dict:
        """Cart summary for display or logging."""
        if not self._items:
            return {
                "is_empty": True,
                "line_count": 0,
                "total_items": 0,
                "totals": self.totals().to_dict(),
                "formatted": self.totals().formatted(currency),
                "degraded": self._degraded,
            }

        totals = self.totals()
        return {
            "is_empty": False,
            "line_count": len(self._items),
            "total_items": self.total_quantity(),
            "items": [
                {
                    "product_id": item.product_id,
                    "variant": item.variant,
                    "name": item.summary.name,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                    "line_total": str(item.line_total),
                }
                for item in self._items
            ],
            "totals": totals.to_dict(),
            "formatted": totals.formatted(currency),
            "degraded": self._degraded,
        }
