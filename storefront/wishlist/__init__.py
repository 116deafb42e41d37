"""Wishlist package: item model and state manager."""
from .models import WishlistItem
from .service import WishlistManager, wishlist_key

__all__ = [
    "WishlistItem",
    "WishlistManager",
    "wishlist_key",
]
