"""
Storefront client core.

- cart: cart state manager and line item model
- wishlist: wishlist state manager
- api: remote cart/wishlist service client
- cache: local snapshot cache (in-memory, Upstash Redis)
- services: pricing, money, notifications, move-between-lists
- session: per-shopper wiring and lifecycle

Note: Imports are lazy so importing one submodule does not pull in httpx and
the Redis client.
"""

__all__ = [
    "LineItemKey",
    "CartManager",
    "WishlistManager",
    "StorefrontSession",
    "create_session",
    "compute_totals",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "LineItemKey":
        from storefront.models import LineItemKey
        return LineItemKey
    elif name == "CartManager":
        from storefront.cart.service import CartManager
        return CartManager
    elif name == "WishlistManager":
        from storefront.wishlist.service import WishlistManager
        return WishlistManager
    elif name == "StorefrontSession":
        from storefront.session import StorefrontSession
        return StorefrontSession
    elif name == "create_session":
        from storefront.session import create_session
        return create_session
    elif name == "compute_totals":
        from storefront.services.pricing import compute_totals
        return compute_totals
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
