"""
Move items between the wishlist and the cart.

A move is "add to destination, then remove from source", awaited in that
order. There is no transaction: if the removal fails the item stays in both
lists and the result says so. It is never removed from the source before the
destination has accepted it.
"""
from storefront.cart.service import CartManager
from storefront.logging import format_key, get_logger
from storefront.models import LineItemKey
from storefront.state import OperationResult
from storefront.wishlist.service import WishlistManager, wishlist_key

logger = get_logger(__name__)

MESSAGE_MOVED_TO_CART = "Moved to cart"
MESSAGE_MOVED_TO_WISHLIST = "Moved to wishlist"


def _partial(added: OperationResult, removed: OperationResult, destination: str, source: str) -> OperationResult:
    message = f"Added to {destination}, but it is still in your {source}: {removed.message}"
    return OperationResult(success=False, message=message, error=removed.error)


async def move_to_cart(
    wishlist: WishlistManager,
    cart: CartManager,
    key: LineItemKey,
    quantity: int = 1,
) -> OperationResult:
    """Move a wishlist product into the cart (``key.variant`` picks the size)."""
    added = await cart.add_item(key, quantity)
    if not added.success:
        return added

    removed = await wishlist.remove_item(wishlist_key(key))
    if not removed.success:
        logger.warning(f"Move to cart left {format_key(key)} in both lists")
        return _partial(added, removed, "cart", "wishlist")
    return OperationResult(success=True, message=MESSAGE_MOVED_TO_CART)


async def move_to_wishlist(
    cart: CartManager,
    wishlist: WishlistManager,
    key: LineItemKey,
) -> OperationResult:
    """Save a cart line for later. The whole line leaves the cart."""
    added = await wishlist.add_item(key)
    if not added.success:
        return added

    removed = await cart.remove_item(key)
    if not removed.success:
        logger.warning(f"Move to wishlist left {format_key(key)} in both lists")
        return _partial(added, removed, "wishlist", "cart")
    return OperationResult(success=True, message=MESSAGE_MOVED_TO_WISHLIST)
